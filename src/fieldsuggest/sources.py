# fieldsuggest/sources.py
from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Iterable, List, Optional, Protocol

from . import config as CFG
from .errors import DataSourceError

log = logging.getLogger(__name__)

Record = Dict[str, Any]


class HistorySource(Protocol):
    """Read-only access to the shop's historical receipts and quotations."""
    def receipts(self) -> List[Record]: ...
    def quotations(self) -> List[Record]: ...


class MemorySource:
    """In-memory records (tests, demos, or a host app that already holds the data)."""
    def __init__(self,
                 receipts: Optional[Iterable[Record]] = None,
                 quotations: Optional[Iterable[Record]] = None) -> None:
        self._receipts: List[Record] = list(receipts or [])
        self._quotations: List[Record] = list(quotations or [])

    def receipts(self) -> List[Record]:
        return list(self._receipts)

    def quotations(self) -> List[Record]:
        return list(self._quotations)

    def add_receipt(self, record: Record) -> None:
        self._receipts.append(record)

    def add_quotation(self, record: Record) -> None:
        self._quotations.append(record)


class JsonFileSource:
    """
    Records exported from the shop app's local storage.

    `path` is either
      - a directory holding ciaociao_receipts.json and quotations_ciaociao.json, or
      - one JSON file: {"receipts": [...], "quotations": [...]}.

    A missing file means no records. An unreadable or malformed one raises
    DataSourceError; the index builder recovers that as an empty dataset.
    """
    def __init__(self, path: str) -> None:
        self.path = os.path.abspath(path)

    def receipts(self) -> List[Record]:
        return self._read(CFG.RECEIPTS_KEY, "receipts")

    def quotations(self) -> List[Record]:
        return self._read(CFG.QUOTATIONS_KEY, "quotations")

    # ---- internals ----
    def _read(self, key: str, bundle_key: str) -> List[Record]:
        if os.path.isdir(self.path):
            data = _load_json(os.path.join(self.path, f"{key}.json"))
        else:
            bundle = _load_json(self.path)
            if bundle is None:
                return []
            if not isinstance(bundle, dict):
                raise DataSourceError(f"{self.path}: expected a JSON object at top level")
            data = bundle.get(bundle_key, bundle.get(key))
        if data is None:
            return []
        if not isinstance(data, list):
            raise DataSourceError(f"{self.path}: {bundle_key} must be a JSON array")
        return data


def _load_json(path: str) -> Any:
    if not os.path.exists(path):
        log.debug("History file %s not found; treating as empty", path)
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as exc:
        raise DataSourceError(f"cannot read {path}: {exc}") from exc


def make_source(dsn: str) -> HistorySource:
    """
    Factory:
      - memory://            -> empty MemorySource
      - json:///path         -> JsonFileSource (directory or single bundle file)
    """
    if dsn.startswith("memory://"):
        return MemorySource()
    if dsn.startswith("json://"):
        path = dsn.removeprefix("json://")
        if not path:
            raise ValueError("json:// source needs a path, e.g. json:///var/data/history")
        return JsonFileSource(path)
    raise ValueError(f"Unsupported history source DSN: {dsn}")
