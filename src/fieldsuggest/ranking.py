# fieldsuggest/ranking.py
from __future__ import annotations

import math
from typing import Dict, Iterable, List, Mapping, Optional, Union

from .context import NEUTRAL_CONTEXT_SCORE, ContextScorer, default_context_scorers
from .fields import FieldType
from .models import Candidate, ScoredSuggestion, ScoringWeights
from .timestamps import MS_PER_DAY, now_ms


# (max age in days, score); anything older scores _OLDEST
_RECENCY_STEPS = ((7, 1.0), (30, 0.8), (90, 0.6), (365, 0.4))
_OLDEST = 0.2


class RankingEngine:
    """
    final = frequency*w.frequency + recency*w.recency
          + similarity*w.similarity + context*w.context

    Results are sorted by final score, highest first. The sort is stable, so
    equal scores keep the order the candidates came in.
    """

    def __init__(self, weights: Optional[ScoringWeights] = None,
                 context_scorers: Optional[Mapping[FieldType, ContextScorer]] = None) -> None:
        self.weights = weights or ScoringWeights()
        self.context_scorers: Dict[FieldType, ContextScorer] = (
            dict(context_scorers) if context_scorers is not None else default_context_scorers()
        )

    def rank_results(self, candidates: Iterable[Candidate], query: str,
                     field_type: Union[FieldType, str],
                     context: Optional[Mapping[str, object]] = None,
                     now: Optional[int] = None) -> List[ScoredSuggestion]:
        now = now_ms() if now is None else now
        ctx = context or {}
        w = self.weights

        scored: List[ScoredSuggestion] = []
        for c in candidates:
            f = self.calculate_frequency_score(c.frequency)
            r = self.calculate_recency_score(c.last_used, now)
            s = c.similarity
            x = self.calculate_context_score(c, ctx, field_type)
            final = f * w.frequency + r * w.recency + s * w.similarity + x * w.context
            scored.append(ScoredSuggestion(c, f, r, s, x, final))

        scored.sort(key=lambda item: item.final_score, reverse=True)
        return scored

    @staticmethod
    def calculate_frequency_score(frequency: int) -> float:
        # log10(f + 1) passes 1.0 once f > 9; the clamp is what caps it.
        return min(1.0, math.log(frequency + 1) / math.log(10))

    @staticmethod
    def calculate_recency_score(last_used: int, now: int) -> float:
        age_days = (now - last_used) / MS_PER_DAY
        for limit, score in _RECENCY_STEPS:
            if age_days <= limit:
                return score
        return _OLDEST

    def calculate_context_score(self, candidate: Candidate, context: Mapping[str, object],
                                field_type: Union[FieldType, str]) -> float:
        try:
            ft = FieldType.parse(field_type)
        except KeyError:
            return NEUTRAL_CONTEXT_SCORE
        scorer = self.context_scorers.get(ft)
        if scorer is None or not context:
            return NEUTRAL_CONTEXT_SCORE
        score = scorer.score(candidate, context)
        return NEUTRAL_CONTEXT_SCORE if score is None else score
