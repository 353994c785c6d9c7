# fieldsuggest/context.py
"""
Context scorers: field-specific rules that look at what else is on the form.

A scorer returns a score in [0, 1], or None to fall back to the neutral
score. Register one per field in RankingEngine(context_scorers=...); fields
without a scorer always get NEUTRAL_CONTEXT_SCORE.
"""
from __future__ import annotations

from typing import Dict, Mapping, Optional, Protocol, Sequence

from .fields import FieldType
from .models import Candidate

NEUTRAL_CONTEXT_SCORE = 0.5


class ContextScorer(Protocol):
    def score(self, candidate: Candidate, context: Mapping[str, object]) -> Optional[float]: ...


# Materials usually ordered for each kind of piece
MATERIALS_BY_PIECE: Dict[str, Sequence[str]] = {
    "anillo": ("oro", "plata", "platino"),
    "collar": ("oro", "plata", "acero"),
    "pulsera": ("oro", "plata", "cuero"),
    "aretes": ("oro", "plata", "acero"),
}


class MaterialSuitabilityScorer:
    """Full score for a material that suits the piece type already chosen on the form."""

    def __init__(self, table: Optional[Mapping[str, Sequence[str]]] = None) -> None:
        self.table = {k.lower(): tuple(m.lower() for m in v)
                      for k, v in (table or MATERIALS_BY_PIECE).items()}

    def score(self, candidate: Candidate, context: Mapping[str, object]) -> Optional[float]:
        piece = context.get("pieceType")
        if not piece or not isinstance(piece, str):
            return None
        suitable = self.table.get(piece.strip().lower(), ())
        value = candidate.value.lower()
        if any(m in value for m in suitable):
            return 1.0
        return None


def default_context_scorers() -> Dict[FieldType, ContextScorer]:
    return {FieldType.MATERIAL: MaterialSuitabilityScorer()}
