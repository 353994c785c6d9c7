# fieldsuggest/forms.py
"""Which input of which shop form feeds which field index, and which inputs form the ranking context."""
from __future__ import annotations

from typing import Dict, Mapping, Optional

from .fields import FieldType

FT = FieldType

# page type -> {input id: field index}
FORM_FIELDS: Dict[str, Dict[str, FieldType]] = {
    "receipt": {
        "clientName": FT.CLIENT_NAME,
        "clientPhone": FT.CLIENT_PHONE,
        "clientEmail": FT.CLIENT_EMAIL,
        "pieceType": FT.PIECE_TYPE,
        "material": FT.MATERIAL,
        "description": FT.DESCRIPTION,
        "stones": FT.STONES,
        "size": FT.SIZE,
        "location": FT.LOCATION,
    },
    "quotation": {
        "clientName": FT.CLIENT_NAME,
        "clientPhone": FT.CLIENT_PHONE,
        "clientEmail": FT.CLIENT_EMAIL,
        # product modal
        "productType": FT.PIECE_TYPE,
        "productMaterial": FT.MATERIAL,
        "productDescription": FT.DESCRIPTION,
    },
    "calculator": {
        "projectName": FT.DESCRIPTION,
        "projectDescription": FT.DESCRIPTION,
        # export modal
        "documentClientName": FT.CLIENT_NAME,
        "documentClientPhone": FT.CLIENT_PHONE,
    },
}

# input id -> context key seen by the context scorers
CONTEXT_FIELDS: Dict[str, str] = {
    "pieceType": "pieceType",
    "material": "material",
    "clientName": "clientName",
    "productType": "pieceType",
    "productMaterial": "material",
}


def field_for_input(page_type: str, input_id: str) -> Optional[FieldType]:
    return FORM_FIELDS.get(page_type, {}).get(input_id)


def context_from_form(values: Mapping[str, object]) -> Dict[str, str]:
    """Build the ranking context from raw form values, in input order; a later input wins on a shared key."""
    ctx: Dict[str, str] = {}
    for input_id, v in values.items():
        key = CONTEXT_FIELDS.get(input_id)
        if key and isinstance(v, str) and v.strip():
            ctx[key] = v.strip()
    return ctx
