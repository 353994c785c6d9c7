# fieldsuggest/fields.py
"""
Supported field types and the static tables that say where each one lives in
a historical record.

Every FieldType owns exactly one index. The extraction tables are checked at
import time, so a typo in a table fails loudly instead of silently indexing
nothing.
"""
from __future__ import annotations

from enum import Enum
from typing import Dict, Union

from .errors import UnknownFieldError


class FieldType(str, Enum):
    CLIENT_NAME = "clientName"
    CLIENT_PHONE = "clientPhone"
    CLIENT_EMAIL = "clientEmail"
    PIECE_TYPE = "pieceType"
    MATERIAL = "material"
    DESCRIPTION = "description"
    STONES = "stones"
    SIZE = "size"
    LOCATION = "location"

    @classmethod
    def parse(cls, name: Union["FieldType", str]) -> "FieldType":
        """Accept a member or its wire name ("clientName"); raise UnknownFieldError otherwise."""
        if isinstance(name, cls):
            return name
        try:
            return cls(name)
        except ValueError:
            raise UnknownFieldError(name) from None

    def __str__(self) -> str:
        return self.value


# Receipt property -> field index
RECEIPT_FIELDS: Dict[str, FieldType] = {ft.value: ft for ft in FieldType}

# Quotation top-level property -> field index
QUOTATION_FIELDS: Dict[str, FieldType] = {
    "clientName": FieldType.CLIENT_NAME,
    "clientPhone": FieldType.CLIENT_PHONE,
    "clientEmail": FieldType.CLIENT_EMAIL,
}

# Property of each quotation product -> field index
PRODUCT_FIELDS: Dict[str, FieldType] = {
    "type": FieldType.PIECE_TYPE,
    "material": FieldType.MATERIAL,
    "description": FieldType.DESCRIPTION,
}

# Where a record keeps its date, in lookup order
RECEIPT_DATE_KEYS = ("receiptDate", "timestamp")
QUOTATION_DATE_KEYS = ("quotationDate", "timestamp")


def _check_tables() -> None:
    for table in (RECEIPT_FIELDS, QUOTATION_FIELDS, PRODUCT_FIELDS):
        for key, ft in table.items():
            if not isinstance(ft, FieldType):
                raise TypeError(f"extraction rule {key!r} maps to {ft!r}, not a FieldType")


_check_tables()
