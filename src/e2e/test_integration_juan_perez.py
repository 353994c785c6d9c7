# src/e2e/test_integration_juan_perez.py
import pytest

from fieldsuggest import AutoCompleteEngine, MemorySource


def _seed(n: int = 3) -> MemorySource:
    return MemorySource(receipts=[
        {"clientName": "Juan Perez", "pieceType": "anillo", "material": "oro-14k"} for _ in range(n)
    ])


@pytest.mark.e2e
def test_three_receipts_one_entry_and_top_suggestion():
    eng = AutoCompleteEngine(_seed())
    try:
        assert eng.initialize() is True
        entries = eng.index_manager.get_index_entries("clientName")
        assert len(entries) == 1
        assert entries[0].value == "Juan Perez"
        assert entries[0].frequency == 3

        rows = eng.get_suggestions("clientName", "ju")
        assert rows and rows[0].value == "Juan Perez"
        assert 0 <= rows[0].score <= 100
        # 0.4*log10(4) + 0.3 + 0.2 + 0.1*0.5
        assert rows[0].score == 79
        assert rows[0].frequency == 3
        assert rows[0].type == "clientName"
    finally:
        eng.shutdown()


@pytest.mark.e2e
def test_rebuild_keeps_frequency_at_n():
    eng = AutoCompleteEngine(_seed(5))
    try:
        eng.initialize()
        eng.index_manager.build_indexes()
        eng.index_manager.build_indexes()
        [e] = eng.index_manager.get_index_entries("clientName")
        assert e.frequency == 5
    finally:
        eng.shutdown()


@pytest.mark.e2e
def test_suggestion_dict_shape():
    eng = AutoCompleteEngine(_seed())
    try:
        [row] = eng.get_suggestions("material", "oro")
        d = row.to_dict()
        assert set(d) == {"value", "score", "frequency", "lastUsed", "type"}
        assert d["value"] == "oro-14k" and d["type"] == "material"
        assert isinstance(d["score"], int) and isinstance(d["lastUsed"], int)
    finally:
        eng.shutdown()
