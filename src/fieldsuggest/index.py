# fieldsuggest/index.py
from __future__ import annotations

import dataclasses
import logging
import threading
from collections.abc import Mapping
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional, Tuple, Union

from . import config as CFG
from .errors import DataSourceError, UnknownFieldError
from .fields import (
    FieldType, RECEIPT_FIELDS, QUOTATION_FIELDS, PRODUCT_FIELDS,
    RECEIPT_DATE_KEYS, QUOTATION_DATE_KEYS,
)
from .models import IndexEntry
from .sources import HistorySource, Record
from .timestamps import now_ms, ms_to_iso, parse_timestamp

log = logging.getLogger(__name__)

FieldIndex = Dict[str, IndexEntry]
Indexes = Dict[FieldType, FieldIndex]


def _empty_indexes() -> Indexes:
    return {ft: {} for ft in FieldType}


class IndexManager:
    """
    One index per FieldType, built from the historical receipts and quotations.

    This class is the only owner of the index maps. A rebuild fills a brand-new
    structure and swaps it in with one assignment, so a reader holding the old
    maps never sees a half-built index. Everything else gets copies.
    """

    def __init__(self, source: HistorySource, *, clock: Optional[Callable[[], int]] = None) -> None:
        self.source = source
        self._clock = clock or now_ms
        self._lock = threading.RLock()
        self._indexes: Indexes = _empty_indexes()
        self.last_build: int = 0
        self.version: int = CFG.INDEX_VERSION

    # ---- Build ----
    def build_indexes(self) -> None:
        """Rebuild every index from the full historical dataset."""
        receipts = self._load("receipts", self.source.receipts)
        quotations = self._load("quotations", self.source.quotations)
        log.info("Indexing %d receipts and %d quotations", len(receipts), len(quotations))

        fresh = _empty_indexes()
        now = self._clock()
        for r in receipts:
            self._index_record(fresh, r, RECEIPT_FIELDS, RECEIPT_DATE_KEYS, now)
        for q in quotations:
            ts = self._index_record(fresh, q, QUOTATION_FIELDS, QUOTATION_DATE_KEYS, now)
            if ts is not None:
                self._index_products(fresh, q.get("products"), ts)

        with self._lock:
            self._indexes = fresh
            self.last_build = self._clock()
        log.info("Field indexes built: %d entries", self.calculate_total_entries())

    def update_indexes(self) -> None:
        # Full rebuild; datasets are small enough that diffing isn't worth it.
        self.build_indexes()

    def clear_indexes(self) -> None:
        with self._lock:
            self._indexes = _empty_indexes()

    # ---- Incremental ----
    def add_to_index(self, field_type: Union[FieldType, str], value: Any,
                     timestamp: Optional[int] = None) -> None:
        if not isinstance(value, str) or not value.strip():
            return
        try:
            ft = FieldType.parse(field_type)
        except UnknownFieldError:
            log.warning("Unknown field type %r; value not indexed", field_type)
            return
        ts = self._clock() if timestamp is None else int(timestamp)
        with self._lock:
            _upsert(self._indexes[ft], value, ts)

    def add_entry(self, field_type: Union[FieldType, str], value: Any,
                  context: Optional[Mapping] = None) -> None:
        """Record a freshly confirmed value (the learn-from-input path)."""
        self.add_to_index(field_type, value, self._clock())

    # ---- Read ----
    def get_index_entries(self, field_type: Union[FieldType, str]) -> List[IndexEntry]:
        """Copies of every entry for a field; [] for an unknown field."""
        try:
            ft = FieldType.parse(field_type)
        except UnknownFieldError:
            log.debug("get_index_entries: unknown field %r", field_type)
            return []
        with self._lock:
            return [dataclasses.replace(e) for e in self._indexes[ft].values()]

    def calculate_total_entries(self) -> int:
        with self._lock:
            return sum(len(idx) for idx in self._indexes.values())

    def get_index_stats(self) -> Dict[str, Any]:
        with self._lock:
            stats: Dict[str, Any] = {ft.value: len(idx) for ft, idx in self._indexes.items()}
        stats["total"] = sum(stats.values())
        stats["lastBuild"] = ms_to_iso(self.last_build) if self.last_build else None
        stats["version"] = self.version
        return stats

    @staticmethod
    def generate_search_tokens(value: str) -> FrozenSet[str]:
        """
        Whole value lowercased, plus for every word of length >= 2 the word and
        all its contiguous substrings of length >= 2.

        "Oro Blanco" -> {"oro blanco", "oro", "or", "ro", "blanco", "bl", "bla", "lan", ...}
        """
        low = value.lower()
        tokens = {low}
        k = CFG.MIN_TOKEN_LENGTH
        for word in low.split():
            if len(word) < k:
                continue
            tokens.add(word)
            for i in range(len(word) - k + 1):
                for j in range(i + k, len(word) + 1):
                    tokens.add(word[i:j])
        return frozenset(tokens)

    # ---- internals ----
    def _load(self, label: str, reader: Callable[[], Any]) -> List[Record]:
        try:
            data = reader()
        except DataSourceError as exc:
            log.warning("Historical %s unavailable (%s); indexing none", label, exc)
            return []
        if not isinstance(data, list):
            if data is not None:
                log.warning("Historical %s is a %s, not a list; indexing none", label, type(data).__name__)
            return []
        return data

    def _index_record(self, indexes: Indexes, record: Any, rules: Dict[str, FieldType],
                      date_keys: Tuple[str, ...], now: int) -> Optional[int]:
        """Index the flat fields of one record; return its timestamp, or None if skipped."""
        if not isinstance(record, Mapping):
            log.debug("Skipping malformed record of type %s", type(record).__name__)
            return None
        ts = _record_timestamp(record, date_keys, now)
        for key, ft in rules.items():
            value = record.get(key)
            if value and isinstance(value, str):
                _upsert(indexes[ft], value, ts)
        return ts

    def _index_products(self, indexes: Indexes, products: Any, ts: int) -> None:
        if not isinstance(products, list):
            return
        for product in products:
            if not isinstance(product, Mapping):
                continue
            for key, ft in PRODUCT_FIELDS.items():
                value = product.get(key)
                if value and isinstance(value, str):
                    _upsert(indexes[ft], value, ts)


def _upsert(index: FieldIndex, value: str, ts: int) -> None:
    clean = value.strip()
    if not clean:
        return
    entry = index.get(clean)
    if entry is None:
        entry = IndexEntry(
            value=clean,
            frequency=0,
            first_used=ts,
            last_used=ts,
            search_tokens=IndexManager.generate_search_tokens(clean),
        )
        index[clean] = entry
    entry.frequency += 1
    entry.last_used = max(entry.last_used, ts)
    entry.first_used = min(entry.first_used, ts)


def _record_timestamp(record: Mapping, keys: Iterable[str], now: int) -> int:
    for key in keys:
        raw = record.get(key)
        if not raw:
            continue
        ts = parse_timestamp(raw)
        if ts is not None:
            return ts
        log.debug("Unparseable %s=%r; trying next date field", key, raw)
    return now
