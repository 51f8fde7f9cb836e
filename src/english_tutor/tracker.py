"""Per-user service bundle and the events exercise pages emit."""
from datetime import date
from typing import Callable

from loguru import logger

from english_tutor import skills
from english_tutor.achievements import AchievementDefinition, AchievementStatus, evaluate
from english_tutor.challenge import ChallengeEngine
from english_tutor.errors import PersistenceError
from english_tutor.history import DEFAULT_LIMIT, ExamHistory
from english_tutor.journal import AnalysisLog, Vocabulary
from english_tutor.models import AssessmentResult, SkillStatus
from english_tutor.performance import PerformanceAggregator
from english_tutor.session import SessionController


class ProgressTracker:
    """Wires the services for one user to a session controller.

    Finalized sessions are appended to the exam history and folded into the
    performance counters, the same path single exercises take one answer at
    a time.
    """

    def __init__(self, store, user_id: str, controller: SessionController | None = None,
                 history_limit: int = DEFAULT_LIMIT, today: Callable[[], date] = date.today):
        self.user_id = user_id
        self.performance = PerformanceAggregator(store, user_id)
        self.history = ExamHistory(store, user_id, self.performance, limit=history_limit)
        self.challenge = ChallengeEngine(store, user_id, today=today)
        self.analyses = AnalysisLog(store, user_id)
        self.vocabulary = Vocabulary(store, user_id)
        self.controller = controller or SessionController()
        self.controller.on_finalized(self.on_session_finalized)

    def on_exercise_completed(self, category: str, is_correct: bool) -> None:
        self.performance.record(category, is_correct)

    def on_action_performed(self, action_type: str) -> bool:
        return self.challenge.track(action_type)

    def on_session_finalized(self, result: AssessmentResult) -> None:
        # Same lock order as ExamHistory.clear so a clear never lands in between
        with self.history.lock:
            if not self.history.add_result(result):
                return
            self.performance.bulk_record(result.performance_by_category)
        logger.debug("Recorded {} result {} into history", result.kind, result.session_id)

    def clear_history(self) -> None:
        self.history.clear()

    def skill_tree(self) -> list[SkillStatus]:
        return skills.classify(self.performance.stats())

    def tracked_skills(self) -> list[SkillStatus]:
        return skills.tracked_skills(self.performance.stats())

    def achievements(self) -> list[AchievementStatus]:
        return evaluate(
            self.analyses.items(), self.vocabulary.items(), self.challenge.state()
        )

    def unlocked_achievements(self) -> list[AchievementDefinition]:
        return [s.definition for s in self.achievements() if s.unlocked]

    @property
    def last_persist_error(self) -> PersistenceError | None:
        for service in (self.performance, self.history, self.challenge,
                        self.analyses, self.vocabulary):
            if service.last_persist_error is not None:
                return service.last_persist_error
        return None
