# tests/test_integration.py
"""End-to-end test of the core workflow."""
import json

from english_tutor.dashboard import get_progress_summary
from english_tutor.importer import load_questions
from english_tutor.models import CategoryStats
from english_tutor.store import PersistentStore
from english_tutor.tracker import ProgressTracker


def test_full_assessment_workflow(tmp_path, tmp_db, today):
    """Take a timed exam, practise, meet a goal and reload everything from disk."""
    exam = tmp_path / "exam.json"
    exam.write_text(json.dumps({
        "category": "grammar",
        "questions": [
            {"prompt": "She ___ to school.", "options": ["goes", "go"], "answer": "A"},
            {"prompt": "They ___ happy.", "options": ["is", "are"], "answer": "B"},
            {"prompt": "Synonym of rapid?", "options": ["slow", "fast"], "answer": "B",
             "category": "vocabulary"},
        ],
    }))

    tracker = ProgressTracker(PersistentStore(tmp_db), "alice", today=today)
    tracker.on_exercise_completed("grammar", True)

    # Timed exam runs out with two answers given
    questions = load_questions(str(exam))
    tracker.controller.start(questions, 5, kind="pdf_exam")
    tracker.controller.record_answer(1, "A")
    tracker.controller.record_answer(3, "A")
    results = [tracker.controller.tick() for _ in range(5)]
    result = results[-1]
    assert results[:-1] == [None] * 4
    assert result.seconds_elapsed == 5
    assert result.score == 1
    assert result.kind == "pdf_exam"

    assert tracker.performance.get("grammar") == CategoryStats(2, 3)
    assert tracker.performance.get("vocabulary") == CategoryStats(0, 1)
    assert [s.name for s in tracker.tracked_skills()] == ["Grammar & Vocabulary"]

    # Daily goal on two consecutive days
    for _ in range(2):
        tracker.challenge.set_challenge("dictionary", "Look up 1 new word", 1)
        tracker.vocabulary.add(f"word-{today().isoformat()}")
        tracker.on_action_performed("dictionary")
        today.advance(1)
    today.advance(-1)
    assert tracker.challenge.current_streak() == 2

    # Everything survives a restart
    reloaded = ProgressTracker(PersistentStore(tmp_db), "alice", today=today)
    assert reloaded.history.latest() == result
    assert reloaded.performance.stats() == tracker.performance.stats()
    assert reloaded.challenge.current_streak() == 2
    summary = get_progress_summary(reloaded)
    assert summary["exams_taken"] == 1
    assert summary["badges_unlocked"] == 1  # FIRST_WORD

    reloaded.clear_history()
    assert reloaded.history.results() == []
    assert reloaded.tracked_skills() == []
    assert reloaded.challenge.current_streak() == 2
