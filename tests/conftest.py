from datetime import date, timedelta

import pytest

from english_tutor.models import AssessmentQuestion, AssessmentResult, CategoryStats, Option
from english_tutor.store import MemoryStore, PersistentStore


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_tutor.db")
    return db_path


@pytest.fixture
def store(tmp_db):
    return PersistentStore(tmp_db)


@pytest.fixture
def memory_store():
    return MemoryStore()


def _make_question(ordinal, correct_key="A", category="grammar", keys="ABCD"):
    return AssessmentQuestion(
        ordinal=ordinal,
        prompt=f"Question {ordinal}",
        options=tuple(Option(key=k, text=f"option {k}") for k in keys),
        correct_key=correct_key,
        category=category,
    )


@pytest.fixture
def make_question():
    return _make_question


@pytest.fixture
def questions():
    return [
        _make_question(1, "A", "grammar"),
        _make_question(2, "B", "grammar"),
        _make_question(3, "C", "vocabulary"),
    ]


def _make_result(session_id, score=1, total=2, category="grammar"):
    return AssessmentResult(
        session_id=session_id,
        completed_at="2026-01-01T10:00:00",
        questions=(),
        answers={},
        seconds_elapsed=30,
        score=score,
        total_questions=total,
        performance_by_category={category: CategoryStats(score, total)},
    )


@pytest.fixture
def make_result():
    return _make_result


class FakeToday:
    """Callable date source tests can move forward."""

    def __init__(self, start):
        self.value = start

    def __call__(self):
        return self.value

    def advance(self, days=1):
        self.value = self.value + timedelta(days=days)


@pytest.fixture
def today():
    return FakeToday(date(2026, 3, 10))
