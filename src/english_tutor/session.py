"""Timed assessment session controller.

One controller owns at most one in-progress session:

    Idle --start--> Active --(tick to 0 | finish)--> Finished --> Idle

``Finished`` is transient: finalization emits exactly one
:class:`AssessmentResult` and immediately clears the controller so a new
``start`` is possible. Answers are not checked for correctness until then.
"""
import itertools
import threading
from datetime import datetime
from typing import Callable, Optional
from uuid import uuid4

from loguru import logger

from english_tutor.errors import (
    InvalidInput, InvalidOption, NotActive, SessionAlreadyActive, UnknownQuestion,
)
from english_tutor.models import (
    AssessmentQuestion, AssessmentResult, CategoryStats, SessionSnapshot, SessionStatus,
)

FinalizedListener = Callable[[AssessmentResult], None]
LifecycleListener = Callable[[str, str], None]

_sequence = itertools.count()


def new_session_id() -> str:
    """Unique token that sorts in creation order."""
    return f"{datetime.now().strftime('%Y%m%dT%H%M%S%f')}-{next(_sequence):06d}-{uuid4().hex[:6]}"


def validate_questions(questions: list[AssessmentQuestion]) -> None:
    if not questions:
        raise InvalidInput("An assessment needs at least one question")
    seen = set()
    for q in questions:
        if isinstance(q.ordinal, bool) or not isinstance(q.ordinal, int) or q.ordinal < 1:
            raise InvalidInput(f"Question ordinal must be a positive integer, got {q.ordinal!r}")
        if q.ordinal in seen:
            raise InvalidInput(f"Duplicate question ordinal {q.ordinal}")
        seen.add(q.ordinal)
        keys = q.option_keys()
        if not keys:
            raise InvalidInput(f"Question {q.ordinal} has no options")
        if len(set(keys)) != len(keys):
            raise InvalidInput(f"Question {q.ordinal} has duplicate option keys")
        if q.correct_key not in keys:
            raise InvalidInput(
                f"Question {q.ordinal} answer key {q.correct_key!r} is not one of {keys}"
            )


def score_answers(questions: list[AssessmentQuestion],
                  answers: dict[int, str]) -> tuple[int, dict[str, CategoryStats]]:
    """Count correct answers and build per-category counts.

    Unanswered questions count as incorrect.
    """
    score = 0
    by_category: dict[str, CategoryStats] = {}
    for q in questions:
        stats = by_category.setdefault(q.category, CategoryStats())
        stats.total += 1
        if answers.get(q.ordinal) == q.correct_key:
            stats.correct += 1
            score += 1
    return score, by_category


class SessionController:
    def __init__(self):
        self.lock = threading.RLock()
        self.status = SessionStatus.IDLE
        self.session_id: Optional[str] = None
        self.kind: Optional[str] = None
        self.questions: list[AssessmentQuestion] = []
        self.answers: dict[int, str] = {}
        self.seconds_remaining = 0
        self.duration_seconds = 0
        self._by_ordinal: dict[int, AssessmentQuestion] = {}
        self._finalized_listeners: list[FinalizedListener] = []
        self._lifecycle_listeners: list[LifecycleListener] = []

    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE

    def on_finalized(self, listener: FinalizedListener) -> None:
        self._finalized_listeners.append(listener)

    def on_lifecycle(self, listener: LifecycleListener) -> None:
        """Subscribe to ``("started" | "closed", session_id)`` messages."""
        self._lifecycle_listeners.append(listener)

    def start(self, questions: list[AssessmentQuestion], duration_seconds: int,
              kind: str = "exam") -> str:
        with self.lock:
            if self.is_active:
                raise SessionAlreadyActive(self.session_id)
            if isinstance(duration_seconds, bool) or not isinstance(duration_seconds, int) \
                    or duration_seconds <= 0:
                raise InvalidInput(f"Duration must be a positive number of seconds, got {duration_seconds!r}")
            questions = list(questions)
            validate_questions(questions)
            self.questions = questions
            self._by_ordinal = {q.ordinal: q for q in questions}
            self.answers = {}
            self.seconds_remaining = duration_seconds
            self.duration_seconds = duration_seconds
            self.kind = kind
            self.session_id = new_session_id()
            self.status = SessionStatus.ACTIVE
            logger.info("Started {} session {} ({} questions, {}s)",
                        kind, self.session_id, len(questions), duration_seconds)
            self._publish("started", self.session_id)
            return self.session_id

    def record_answer(self, ordinal: int, key: str) -> None:
        with self.lock:
            if not self.is_active:
                raise NotActive("record an answer")
            question = self._by_ordinal.get(ordinal)
            if question is None:
                raise UnknownQuestion(ordinal)
            if key not in question.option_keys():
                raise InvalidOption(ordinal, key)
            self.answers[ordinal] = key

    def tick(self) -> Optional[AssessmentResult]:
        """Advance the countdown one second; finalizes when it reaches zero."""
        with self.lock:
            if not self.is_active:
                raise NotActive("tick")
            self.seconds_remaining = max(0, self.seconds_remaining - 1)
            if self.seconds_remaining == 0:
                logger.info("Time is up for session {}", self.session_id)
                return self.finish()
            return None

    def finish(self) -> Optional[AssessmentResult]:
        with self.lock:
            if not self.is_active:
                return None
            score, by_category = score_answers(self.questions, self.answers)
            result = AssessmentResult(
                session_id=self.session_id,
                completed_at=datetime.now().isoformat(),
                questions=tuple(self.questions),
                answers=dict(self.answers),
                seconds_elapsed=self.duration_seconds - self.seconds_remaining,
                score=score,
                total_questions=len(self.questions),
                performance_by_category=by_category,
                kind=self.kind,
            )
            session_id = self.session_id
            self._reset()
            logger.info("Finished session {}: {}/{}", session_id, score, result.total_questions)
            self._publish("closed", session_id)
            for listener in self._finalized_listeners:
                try:
                    listener(result)
                except Exception:
                    logger.exception("Finalized listener failed for session {}", session_id)
            return result

    def abandon(self) -> None:
        with self.lock:
            if not self.is_active:
                return
            session_id = self.session_id
            self._reset()
            logger.info("Abandoned session {}", session_id)
            self._publish("closed", session_id)

    @property
    def answered_count(self) -> int:
        return len(self.answers)

    def unanswered_ordinals(self) -> list[int]:
        with self.lock:
            return [q.ordinal for q in self.questions if q.ordinal not in self.answers]

    def snapshot(self) -> SessionSnapshot:
        with self.lock:
            return SessionSnapshot(
                status=self.status,
                session_id=self.session_id,
                kind=self.kind,
                questions=tuple(self.questions),
                answers=dict(self.answers),
                seconds_remaining=self.seconds_remaining,
                duration_seconds=self.duration_seconds,
            )

    def _reset(self) -> None:
        self.status = SessionStatus.IDLE
        self.session_id = None
        self.kind = None
        self.questions = []
        self._by_ordinal = {}
        self.answers = {}
        self.seconds_remaining = 0
        self.duration_seconds = 0

    def _publish(self, event: str, session_id: str) -> None:
        for listener in self._lifecycle_listeners:
            listener(event, session_id)
