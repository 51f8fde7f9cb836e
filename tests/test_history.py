# tests/test_history.py
from english_tutor.history import ExamHistory
from english_tutor.models import CategoryStats
from english_tutor.performance import PerformanceAggregator


def _history(store, limit=10):
    agg = PerformanceAggregator(store, "alice")
    return ExamHistory(store, "alice", agg, limit=limit), agg


def test_add_result_prepends(store, make_result):
    history, _ = _history(store)
    history.add_result(make_result("s1"))
    history.add_result(make_result("s2"))
    assert [r.session_id for r in history.results()] == ["s2", "s1"]
    assert history.latest().session_id == "s2"


def test_history_is_capped_at_ten(store, make_result):
    history, _ = _history(store)
    for i in range(12):
        history.add_result(make_result(f"s{i:02d}"))
    ids = [r.session_id for r in history.results()]
    assert len(ids) == 10
    assert ids[0] == "s11"
    assert ids[-1] == "s02"


def test_custom_limit(store, make_result):
    history, _ = _history(store, limit=2)
    for i in range(5):
        history.add_result(make_result(f"s{i}"))
    assert [r.session_id for r in history.results()] == ["s4", "s3"]


def test_duplicate_session_is_ignored(store, make_result):
    history, _ = _history(store)
    assert history.add_result(make_result("s1")) is True
    assert history.add_result(make_result("s1")) is False
    assert len(history.results()) == 1


def test_history_persists(store, make_result):
    history, _ = _history(store)
    history.add_result(make_result("s1", score=2, total=3))
    reloaded, _ = _history(store)
    [result] = reloaded.results()
    assert result.session_id == "s1"
    assert result.performance_by_category == {"grammar": CategoryStats(2, 3)}


def test_average_percentage(store, make_result):
    history, _ = _history(store)
    assert history.average_percentage() == 0.0
    history.add_result(make_result("s1", score=1, total=2))
    history.add_result(make_result("s2", score=2, total=2))
    assert history.average_percentage() == 75.0


def test_latest_on_empty_history(store):
    history, _ = _history(store)
    assert history.latest() is None


def test_clear_empties_history_and_zeroes_counters(store, make_result):
    history, agg = _history(store)
    history.add_result(make_result("s1"))
    agg.record("grammar", True)
    agg.record("listening", False)
    history.clear()
    assert history.results() == []
    assert agg.stats() == {}
    reloaded, reloaded_agg = _history(store)
    assert reloaded.results() == []
    assert reloaded_agg.stats() == {}
