# src/e2e/test_engine_lifecycle.py
import logging
import threading

import pytest

from fieldsuggest import AutoCompleteEngine, EngineConfig, EngineState, MemorySource


class FakeClock:
    def __init__(self, now: int = 1_700_000_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now


class CountingSource(MemorySource):
    def __init__(self, *a, **kw):
        super().__init__(*a, **kw)
        self.reads = 0

    def receipts(self):
        self.reads += 1
        return super().receipts()


def test_short_query_returns_empty_without_touching_index(monkeypatch):
    src = CountingSource(receipts=[{"clientName": "Juan Perez"}])
    eng = AutoCompleteEngine(src)

    def explode(*a, **kw):
        raise AssertionError("index searched for a short query")
    monkeypatch.setattr(eng.search_engine, "find_candidates", explode)

    assert eng.get_suggestions("clientName", "j") == []
    assert eng.get_suggestions("clientName", "") == []
    assert eng.get_suggestions("clientName", None) == []
    assert src.reads == 0
    assert eng.state is EngineState.UNINITIALIZED


def test_min_query_length_is_configurable():
    eng = AutoCompleteEngine(MemorySource(receipts=[{"clientName": "Juan Perez"}]),
                             EngineConfig(min_query_length=1))
    assert [r.value for r in eng.get_suggestions("clientName", "j")] == ["Juan Perez"]


def test_lazy_initialize_is_idempotent():
    src = CountingSource(receipts=[{"clientName": "Ana"}])
    eng = AutoCompleteEngine(src)
    assert not eng.is_initialized
    eng.get_suggestions("clientName", "an")
    assert eng.state is EngineState.READY
    assert eng.initialize() is True
    assert src.reads == 1


def test_concurrent_initialize_builds_once():
    src = CountingSource(receipts=[{"clientName": "Ana"}])
    eng = AutoCompleteEngine(src)
    results = []
    threads = [threading.Thread(target=lambda: results.append(eng.initialize())) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert results == [True] * 8
    assert src.reads == 1


def test_stale_index_is_rebuilt_before_search():
    clock = FakeClock()
    src = MemorySource(receipts=[{"clientName": "Ana Torres"}])
    eng = AutoCompleteEngine(src, EngineConfig(cache_expiry_ms=1_000), clock=clock)
    eng.initialize()
    src.add_receipt({"clientName": "Andrea Ruiz"})

    clock.now += 1_000  # not older than the expiry yet
    assert not eng.should_update_indexes()
    assert [r.value for r in eng.get_suggestions("clientName", "an")] == ["Ana Torres"]

    clock.now += 1
    assert eng.should_update_indexes()
    values = {r.value for r in eng.get_suggestions("clientName", "an")}
    assert values == {"Ana Torres", "Andrea Ruiz"}
    assert eng.last_index_update == clock.now
    assert eng.state is EngineState.READY


def test_reindex_is_single_flight():
    eng = AutoCompleteEngine(MemorySource(receipts=[{"clientName": "Ana"}]))
    eng.initialize()
    eng._reindex_lock.acquire()
    try:
        assert eng.update_indexes() is False
    finally:
        eng._reindex_lock.release()
    assert eng.update_indexes() is True


def test_results_truncated_to_max_suggestions():
    recs = [{"description": f"Anillo modelo {i:02d}"} for i in range(20)]
    eng = AutoCompleteEngine(MemorySource(receipts=recs), EngineConfig(max_suggestions=3))
    assert len(eng.get_suggestions("description", "anillo")) == 3
    eng2 = AutoCompleteEngine(MemorySource(receipts=recs))
    assert len(eng2.get_suggestions("description", "anillo")) == 8


def test_unknown_field_warns_and_returns_empty(caplog):
    eng = AutoCompleteEngine(MemorySource(receipts=[{"clientName": "Ana"}]))
    with caplog.at_level(logging.WARNING):
        assert eng.get_suggestions("nickname", "an") == []
    assert "nickname" in caplog.text


def test_internal_errors_become_empty_results(monkeypatch):
    eng = AutoCompleteEngine(MemorySource(receipts=[{"clientName": "Ana"}]))
    eng.initialize()

    def boom(*a, **kw):
        raise ZeroDivisionError("bad weights")
    monkeypatch.setattr(eng.ranking_engine, "rank_results", boom)
    assert eng.get_suggestions("clientName", "an") == []


def test_failed_initialize_returns_false_and_never_raises():
    class ExplodingSource:
        def receipts(self):
            raise RuntimeError("storage quota exceeded")

        def quotations(self):
            return []

    eng = AutoCompleteEngine(ExplodingSource())
    assert eng.initialize() is False
    assert eng.state is EngineState.UNINITIALIZED
    assert eng.get_suggestions("clientName", "an") == []


def test_stats_and_shutdown():
    clock = FakeClock(1_704_067_200_000)
    eng = AutoCompleteEngine(MemorySource(receipts=[{"clientName": "Ana", "size": "7"}]), clock=clock)
    stats = eng.get_stats()
    assert stats["initialized"] is False and stats["lastUpdate"] is None

    eng.initialize()
    stats = eng.get_stats()
    assert stats["initialized"] is True
    assert stats["state"] == "ready"
    assert stats["lastUpdate"].startswith("2024-01-01T00:00:00")
    assert stats["indexStats"]["clientName"] == 1
    assert stats["indexStats"]["total"] == 2
    assert stats["config"]["maxSuggestions"] == 8

    eng.shutdown()
    assert eng.state is EngineState.DISPOSED
    assert eng.initialize() is False
    assert eng.get_suggestions("clientName", "an") == []


def test_shutdown_during_reindex_drops_the_rebuilt_index():
    class SlowSource(MemorySource):
        def __init__(self, *a, **kw):
            super().__init__(*a, **kw)
            self.hold = False
            self.entered = threading.Event()
            self.release = threading.Event()

        def receipts(self):
            if self.hold:
                self.entered.set()
                self.release.wait(5)
            return super().receipts()

    src = SlowSource(receipts=[{"clientName": "Ana"}])
    eng = AutoCompleteEngine(src)
    assert eng.initialize() is True

    src.hold = True
    results = []
    t = threading.Thread(target=lambda: results.append(eng.update_indexes()))
    t.start()
    assert src.entered.wait(5)
    eng.shutdown()
    src.release.set()
    t.join(5)

    assert results == [False]
    assert eng.state is EngineState.DISPOSED
    assert eng.index_manager.calculate_total_entries() == 0


def test_update_after_shutdown_does_nothing():
    eng = AutoCompleteEngine(MemorySource(receipts=[{"clientName": "Ana"}]))
    eng.initialize()
    eng.shutdown()
    assert eng.update_indexes() is False
    assert eng.state is EngineState.DISPOSED
    assert eng.index_manager.calculate_total_entries() == 0
