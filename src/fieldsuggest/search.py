# fieldsuggest/search.py
from __future__ import annotations

import logging
from typing import List, Union

from . import config as CFG
from .fields import FieldType
from .index import IndexManager
from .models import Candidate, IndexEntry

log = logging.getLogger(__name__)

# Similarity tiers, first match wins
_PREFIX = 1.0
_CONTAINS = 0.8
_TOKEN_PREFIX = 0.7
_TOKEN_CONTAINS = 0.5


class SearchEngine:
    """Scores every indexed value of a field against the query."""

    def __init__(self, index_manager: IndexManager) -> None:
        self.index_manager = index_manager

    def find_candidates(self, field_type: Union[FieldType, str], query: str) -> List[Candidate]:
        entries = self.index_manager.get_index_entries(field_type)
        if not entries:
            return []

        q = query.lower().strip()
        out: List[Candidate] = []
        for entry in entries:
            sim = self.calculate_similarity(q, entry)
            if sim > CFG.MIN_SIMILARITY:
                out.append(Candidate.from_entry(entry, sim))
        log.debug("find_candidates(%s, %r): %d of %d entries", field_type, q, len(out), len(entries))
        return out

    def calculate_similarity(self, query: str, entry: IndexEntry) -> float:
        """`query` must already be lowercased and trimmed."""
        value = entry.value.lower()
        if value.startswith(query):
            return _PREFIX
        if query in value:
            return _CONTAINS

        best = 0.0
        for token in entry.search_tokens:
            if token.startswith(query):
                sim = _TOKEN_PREFIX
            elif query in token:
                sim = _TOKEN_CONTAINS
            else:
                sim = levenshtein_similarity(query, token)
            if sim > best:
                best = sim
        return best


def levenshtein_similarity(a: str, b: str) -> float:
    """1 - distance / longer length, floored at 0. Two empty strings are identical."""
    if not a:
        return 1.0 if not b else 0.0
    if not b:
        return 0.0
    longest = max(len(a), len(b))
    return max(0.0, (longest - levenshtein_distance(a, b)) / longest)


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance with unit cost for insert, delete and substitute (two-row DP)."""
    if len(a) < len(b):
        a, b = b, a
    prev = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        cur = [i] + [0] * len(b)
        for j, cb in enumerate(b, start=1):
            if ca == cb:
                cur[j] = prev[j - 1]
            else:
                cur[j] = 1 + min(prev[j - 1], prev[j], cur[j - 1])
        prev = cur
    return prev[len(b)]
