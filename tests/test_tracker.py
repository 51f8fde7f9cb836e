# tests/test_tracker.py
import threading

from english_tutor.models import AssessmentResult, CategoryStats
from english_tutor.tracker import ProgressTracker


def test_exercise_completion_updates_counters(store):
    tracker = ProgressTracker(store, "alice")
    tracker.on_exercise_completed("listening", True)
    tracker.on_exercise_completed("listening", False)
    assert tracker.performance.get("listening") == CategoryStats(1, 2)
    [skill] = tracker.tracked_skills()
    assert skill.name == "Listening Comprehension"


def test_finalized_session_goes_to_history_and_counters(store, questions):
    tracker = ProgressTracker(store, "alice")
    tracker.controller.start(questions, 60)
    tracker.controller.record_answer(1, "A")
    tracker.controller.record_answer(3, "C")
    result = tracker.controller.finish()
    assert tracker.history.latest() == result
    assert tracker.performance.get("grammar") == CategoryStats(1, 2)
    assert tracker.performance.get("vocabulary") == CategoryStats(1, 1)


def test_session_adds_to_existing_counters(store, make_question):
    tracker = ProgressTracker(store, "alice")
    tracker.on_exercise_completed("grammar", True)
    tracker.controller.start([make_question(1, "A", "grammar")], 60)
    tracker.controller.record_answer(1, "A")
    tracker.controller.finish()
    assert tracker.performance.get("grammar") == CategoryStats(2, 2)


def test_abandoned_session_records_nothing(store, questions):
    tracker = ProgressTracker(store, "alice")
    tracker.controller.start(questions, 60)
    tracker.controller.record_answer(1, "A")
    tracker.controller.abandon()
    assert tracker.history.results() == []
    assert tracker.performance.stats() == {}


def test_duplicate_finalization_is_not_double_counted(store, make_result):
    tracker = ProgressTracker(store, "alice")
    result = make_result("s1", score=1, total=2)
    tracker.on_session_finalized(result)
    tracker.on_session_finalized(result)
    assert len(tracker.history.results()) == 1
    assert tracker.performance.get("grammar") == CategoryStats(1, 2)


def test_clear_history_resets_skill_tree(store, questions):
    tracker = ProgressTracker(store, "alice")
    tracker.controller.start(questions, 60)
    tracker.controller.finish()
    assert tracker.tracked_skills()
    tracker.clear_history()
    assert tracker.tracked_skills() == []
    assert all(not s.rated for s in tracker.skill_tree())


def test_action_events_drive_challenge(store, today):
    tracker = ProgressTracker(store, "alice", today=today)
    tracker.challenge.set_challenge("dictionary", "Look up 3 new words", 1)
    assert tracker.on_action_performed("analyze") is False
    assert tracker.on_action_performed("dictionary") is True
    assert tracker.challenge.current_streak() == 1


def test_badges_follow_current_data(store):
    tracker = ProgressTracker(store, "alice")
    assert tracker.unlocked_achievements() == []
    tracker.analyses.add("Q", "grammar")
    assert [d.id for d in tracker.unlocked_achievements()] == ["FIRST_ANALYSIS"]
    tracker.analyses.clear()
    assert tracker.unlocked_achievements() == []


def test_users_do_not_share_state(store, questions):
    alice = ProgressTracker(store, "alice")
    alice.controller.start(questions, 60)
    alice.controller.finish()
    bob = ProgressTracker(store, "bob")
    assert bob.history.results() == []
    assert bob.performance.stats() == {}


def test_last_persist_error_is_none_when_healthy(store):
    tracker = ProgressTracker(store, "alice")
    tracker.on_exercise_completed("grammar", True)
    assert tracker.last_persist_error is None


def test_concurrent_updates_are_not_lost(memory_store):
    tracker = ProgressTracker(memory_store, "alice")
    categories = [f"category_{i}" for i in range(20)]

    def practice():
        for category in categories:
            tracker.on_exercise_completed(category, True)

    def finalize(n):
        for i in range(10):
            result = AssessmentResult(
                session_id=f"{n}-{i}", completed_at="2026-01-01T10:00:00", questions=(),
                answers={}, seconds_elapsed=1, score=1, total_questions=1,
                performance_by_category={f"exam_{n}_{i}": CategoryStats(1, 1)},
            )
            tracker.on_session_finalized(result)

    threads = [threading.Thread(target=practice) for _ in range(4)]
    threads += [threading.Thread(target=finalize, args=(n,)) for n in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    stats = tracker.performance.stats()
    assert all(stats[c] == CategoryStats(4, 4) for c in categories)
    assert sum(1 for c in stats if c.startswith("exam_")) == 20
    assert len(tracker.history.results()) == 10
    assert ProgressTracker(memory_store, "alice").performance.stats() == stats


def test_clear_during_finalization_leaves_consistent_state(memory_store, make_result):
    tracker = ProgressTracker(memory_store, "alice", history_limit=1_000_000)
    stop = threading.Event()

    def finalize():
        i = 0
        while not stop.is_set():
            tracker.on_session_finalized(make_result(f"s{i}"))
            i += 1

    worker = threading.Thread(target=finalize)
    worker.start()
    for _ in range(20):
        tracker.clear_history()
    stop.set()
    worker.join()

    # Counters hold exactly the results history still knows about
    kept = tracker.history.results()
    assert tracker.performance.get("grammar").total == sum(r.total_questions for r in kept)
