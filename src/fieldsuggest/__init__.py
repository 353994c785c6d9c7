"""
fieldsuggest: suggestions for shop form fields, learned from past receipts and quotations.

Typical use:

    from fieldsuggest import AutoCompleteEngine, make_source

    engine = AutoCompleteEngine(make_source("json:///var/data/history"))
    engine.initialize()
    for s in engine.get_suggestions("material", "oro", {"pieceType": "anillo"}):
        print(s.score, s.value)
    engine.learn_from_input("clientName", "Juan Perez")
"""
from .engine import AutoCompleteEngine, EngineState
from .errors import DataSourceError, SuggestError, UnknownFieldError
from .fields import FieldType
from .index import IndexManager
from .models import EngineConfig, ScoringWeights, Suggestion
from .ranking import RankingEngine
from .search import SearchEngine
from .sources import HistorySource, JsonFileSource, MemorySource, make_source

__version__ = "1.0.0"
__all__ = [
    "AutoCompleteEngine", "EngineState", "EngineConfig", "ScoringWeights", "Suggestion",
    "FieldType", "IndexManager", "SearchEngine", "RankingEngine",
    "HistorySource", "MemorySource", "JsonFileSource", "make_source",
    "SuggestError", "DataSourceError", "UnknownFieldError",
]
