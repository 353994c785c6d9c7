# fieldsuggest/engine.py
from __future__ import annotations

import logging
import math
import os
import threading
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from . import config as CFG
from .context import ContextScorer
from .errors import UnknownFieldError
from .fields import FieldType
from .forms import FORM_FIELDS, context_from_form
from .index import IndexManager
from .models import EngineConfig, Suggestion
from .ranking import RankingEngine
from .search import SearchEngine
from .sources import HistorySource, MemorySource
from .timestamps import ms_to_iso, now_ms

log = logging.getLogger(__name__)


class EngineState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    REINDEXING = "reindexing"
    DISPOSED = "disposed"


class AutoCompleteEngine:
    """
    Orchestration layer that glues together:
      - IndexManager  (per-field indexes built from the historical source),
      - SearchEngine  (similarity scoring),
      - RankingEngine (frequency / recency / similarity / context).

    Public API (used by the CLI and the Flask app):
      * initialize():                         build indexes once; True on success
      * get_suggestions(field, query, ctx):   top-N ranked Suggestion objects
      * learn_from_input(field, value, ctx):  index a freshly confirmed value
      * learn_from_form(page, values):        same, for every mapped input of a form
      * get_stats():                          state, index sizes, configuration
      * shutdown():                           drop indexes; the instance is done

    Autocomplete is a convenience: nothing here raises into the caller.
    Failures are logged and turn into "no suggestions".
    """

    # ------------- lifecycle -------------

    def __init__(
        self,
        source: Optional[HistorySource] = None,
        config: Optional[EngineConfig] = None,
        *,
        clock: Optional[Callable[[], int]] = None,
        context_scorers: Optional[Mapping[FieldType, ContextScorer]] = None,
    ) -> None:
        if os.environ.get("FIELDSUGGEST_VERBOSE") == "1":
            logging.basicConfig(level=logging.INFO)

        self.config = config or EngineConfig()
        self._clock = clock or now_ms
        self.source = source if source is not None else MemorySource()

        self.index_manager = IndexManager(self.source, clock=self._clock)
        self.search_engine = SearchEngine(self.index_manager)
        self.ranking_engine = RankingEngine(self.config.weights, context_scorers)

        self.state = EngineState.UNINITIALIZED
        self.last_index_update: int = 0
        self._init_lock = threading.Lock()
        self._reindex_lock = threading.Lock()

    @property
    def is_initialized(self) -> bool:
        return self.state in (EngineState.READY, EngineState.REINDEXING)

    # /* ~~~ Build indexes once; concurrent callers wait for the first one ~~~ */
    def initialize(self) -> bool:
        if self.is_initialized:
            return True
        with self._init_lock:
            if self.is_initialized:
                return True
            if self.state is EngineState.DISPOSED:
                log.warning("initialize() called on a shut-down engine")
                return False
            self.state = EngineState.INITIALIZING
            try:
                self.index_manager.build_indexes()
            except Exception:
                log.exception("Autocomplete initialization failed")
                self.state = EngineState.UNINITIALIZED
                return False
            self.last_index_update = self._clock()
            self.state = EngineState.READY
            log.info("Autocomplete engine ready: %s", self.index_manager.get_index_stats())
            return True

    # /* ~~~ Drop all indexed state; the engine refuses to initialize again ~~~ */
    def shutdown(self) -> None:
        with self._init_lock:
            self.state = EngineState.DISPOSED
            self.index_manager.clear_indexes()
            log.info("Autocomplete engine shutdown complete")

    # ------------- query -------------

    def get_suggestions(self, field_type: Union[FieldType, str], query: str,
                        context: Optional[Mapping[str, Any]] = None) -> List[Suggestion]:
        if not query or not isinstance(query, str) or len(query) < self.config.min_query_length:
            return []
        try:
            ft = FieldType.parse(field_type)
        except UnknownFieldError:
            log.warning("Suggestions requested for unknown field type %r", field_type)
            return []

        try:
            if not self.is_initialized and not self.initialize():
                return []
            if self.should_update_indexes():
                self.update_indexes()

            candidates = self.search_engine.find_candidates(ft, query)
            if not candidates:
                return []
            ranked = self.ranking_engine.rank_results(
                candidates, query, ft, context or {}, now=self._clock()
            )
            return [
                Suggestion(
                    value=r.value,
                    score=_percent(r.final_score),
                    frequency=r.frequency,
                    last_used=r.last_used,
                    type=ft.value,
                )
                for r in ranked[: self.config.max_suggestions]
            ]
        except Exception:
            log.exception("Error getting suggestions for %s", ft.value)
            return []

    # ------------- learning -------------

    def learn_from_input(self, field_type: Union[FieldType, str], value: Any,
                         context: Optional[Mapping[str, Any]] = None) -> bool:
        """Index a confirmed value. True when it actually went into an index."""
        try:
            if not isinstance(value, str) or len(value.strip()) < CFG.MIN_LEARN_LENGTH:
                return False
            try:
                ft = FieldType.parse(field_type)
            except UnknownFieldError:
                log.warning("Cannot learn value for unknown field type %r", field_type)
                return False
            # Learning before the first build would be wiped out by it.
            if not self.is_initialized and not self.initialize():
                return False
            clean = value.strip()
            self.index_manager.add_entry(ft, clean, context)
            log.info("Learned %s = %r", ft.value, clean)
            return True
        except Exception:
            log.exception("Error learning from input")
            return False

    def learn_from_form(self, page_type: str, values: Mapping[str, Any]) -> int:
        """Learn every input of a submitted form that maps to a field index. Returns how many were learned."""
        if not isinstance(page_type, str) or not isinstance(values, Mapping):
            log.warning("Ignoring form submission: page=%r values=%s", page_type, type(values).__name__)
            return 0
        try:
            fields = FORM_FIELDS.get(page_type)
            if fields is None:
                log.warning("No form mapping for page type %r", page_type)
                return 0
            ctx = context_from_form(values)
            learned = 0
            for input_id, value in values.items():
                ft = fields.get(input_id)
                if ft is not None and self.learn_from_input(ft, value, ctx):
                    learned += 1
            return learned
        except Exception:
            log.exception("Error learning from %s form", page_type)
            return 0

    # ------------- index freshness -------------

    def should_update_indexes(self) -> bool:
        return self._clock() - self.last_index_update > self.config.cache_expiry_ms

    # /* ~~~ Full rebuild; a second caller while one is running returns False at once ~~~ */
    def update_indexes(self) -> bool:
        if not self.is_initialized:
            return self.initialize()
        if not self._reindex_lock.acquire(blocking=False):
            log.info("Reindex already in progress; keeping current index")
            return False
        try:
            with self._init_lock:
                if self.state is EngineState.DISPOSED:
                    return False
                self.state = EngineState.REINDEXING
            self.index_manager.update_indexes()
            with self._init_lock:
                # shutdown() ran mid-rebuild; don't keep the fresh index alive
                if self.state is EngineState.DISPOSED:
                    self.index_manager.clear_indexes()
                    log.info("Engine shut down during reindex; dropped rebuilt index")
                    return False
                self.last_index_update = self._clock()
            return True
        except Exception:
            log.exception("Reindex failed; keeping current index")
            return False
        finally:
            with self._init_lock:
                if self.state is EngineState.REINDEXING:
                    self.state = EngineState.READY
            self._reindex_lock.release()

    # ------------- introspection -------------

    def get_stats(self) -> Dict[str, Any]:
        return {
            "initialized": self.is_initialized,
            "state": self.state.value,
            "lastUpdate": ms_to_iso(self.last_index_update) if self.last_index_update else None,
            "indexStats": self.index_manager.get_index_stats(),
            "config": self.config.to_dict(),
        }


def _percent(score: float) -> int:
    # half-up like the shop UI's Math.round, clamped for out-of-range custom scorers
    return max(0, min(100, int(math.floor(score * 100 + 0.5))))
