# fieldsuggest/models.py
"""
Data models for the suggestion engine.

- IndexEntry:       one distinct value inside one field index (usage stats + search tokens).
- Candidate:        read-only copy of an entry that passed the similarity threshold.
- ScoredSuggestion: a candidate with its ranking breakdown.
- Suggestion:       the result object handed to callers.
- ScoringWeights / EngineConfig: validated configuration.

Timestamps are epoch milliseconds throughout, matching what the shop app
stores in its receipts and quotations.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Mapping

from . import config as CFG


@dataclass(slots=True)
class IndexEntry:
    """
    Attributes
    ----------
    value : str
        Trimmed value with its original casing. Unique per field index.
    frequency : int
        How many times the value was seen (>= 1 once indexed).
    first_used, last_used : int
        Oldest and newest timestamp seen for the value; last_used >= first_used.
    search_tokens : FrozenSet[str]
        Lowercased substrings used for partial and fuzzy matching.
    """
    value: str
    frequency: int
    first_used: int
    last_used: int
    search_tokens: FrozenSet[str]


@dataclass(frozen=True, slots=True)
class Candidate:
    value: str
    frequency: int
    first_used: int
    last_used: int
    search_tokens: FrozenSet[str]
    similarity: float

    @classmethod
    def from_entry(cls, entry: IndexEntry, similarity: float) -> "Candidate":
        return cls(
            value=entry.value,
            frequency=entry.frequency,
            first_used=entry.first_used,
            last_used=entry.last_used,
            search_tokens=entry.search_tokens,
            similarity=similarity,
        )


@dataclass(frozen=True, slots=True)
class ScoredSuggestion:
    candidate: Candidate
    frequency_score: float
    recency_score: float
    similarity_score: float
    context_score: float
    final_score: float

    @property
    def value(self) -> str:
        return self.candidate.value

    @property
    def frequency(self) -> int:
        return self.candidate.frequency

    @property
    def last_used(self) -> int:
        return self.candidate.last_used


@dataclass(frozen=True, slots=True)
class Suggestion:
    """
    One ranked suggestion as returned by AutoCompleteEngine.get_suggestions().

    score is the final ranking score scaled to an integer in [0, 100].
    """
    value: str
    score: int
    frequency: int
    last_used: int
    type: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "value": self.value,
            "score": self.score,
            "frequency": self.frequency,
            "lastUsed": self.last_used,
            "type": self.type,
        }


@dataclass(frozen=True, slots=True)
class ScoringWeights:
    frequency: float = CFG.DEFAULT_WEIGHTS["frequency"]
    recency: float = CFG.DEFAULT_WEIGHTS["recency"]
    similarity: float = CFG.DEFAULT_WEIGHTS["similarity"]
    context: float = CFG.DEFAULT_WEIGHTS["context"]

    def __post_init__(self) -> None:
        for name, w in self.to_dict().items():
            if not 0.0 <= w <= 1.0:
                raise ValueError(f"weight {name}={w} is outside [0, 1]")
        total = sum(self.to_dict().values())
        if not math.isclose(total, 1.0, abs_tol=1e-6):
            raise ValueError(f"weights must sum to 1.0, got {total:.6f}")

    @classmethod
    def from_mapping(cls, m: Mapping[str, float]) -> "ScoringWeights":
        unknown = set(m) - set(CFG.DEFAULT_WEIGHTS)
        if unknown:
            raise ValueError(f"unknown weight(s): {sorted(unknown)}")
        return cls(**{k: float(v) for k, v in m.items()})

    def to_dict(self) -> Dict[str, float]:
        return {
            "frequency": self.frequency,
            "recency": self.recency,
            "similarity": self.similarity,
            "context": self.context,
        }


@dataclass(frozen=True, slots=True)
class EngineConfig:
    max_suggestions: int = CFG.MAX_SUGGESTIONS
    min_query_length: int = CFG.MIN_QUERY_LENGTH
    cache_expiry_ms: int = CFG.CACHE_EXPIRY_MS
    weights: ScoringWeights = field(default_factory=ScoringWeights)

    def __post_init__(self) -> None:
        if self.max_suggestions < 1:
            raise ValueError("max_suggestions must be >= 1")
        if self.min_query_length < 0:
            raise ValueError("min_query_length must be >= 0")
        if self.cache_expiry_ms < 0:
            raise ValueError("cache_expiry_ms must be >= 0")
        if not isinstance(self.weights, ScoringWeights):
            raise TypeError("weights must be a ScoringWeights instance")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "maxSuggestions": self.max_suggestions,
            "minQueryLength": self.min_query_length,
            "cacheExpiry": self.cache_expiry_ms,
            "weights": self.weights.to_dict(),
        }
