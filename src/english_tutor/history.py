"""Capped, most-recent-first log of finalized assessment results."""
from loguru import logger

from english_tutor.models import AssessmentResult
from english_tutor.performance import PerformanceAggregator
from english_tutor.store import StoredState

DEFAULT_LIMIT = 10


def _decode(raw: list) -> list[AssessmentResult]:
    return [AssessmentResult.from_dict(r) for r in raw]


class ExamHistory(StoredState):
    feature = "exam-history"

    def __init__(self, store, user_id: str, aggregator: PerformanceAggregator,
                 limit: int = DEFAULT_LIMIT):
        super().__init__(store, user_id)
        self.aggregator = aggregator
        self.limit = limit
        self._results = self._load([], _decode)[:limit]

    def add_result(self, result: AssessmentResult) -> bool:
        """Prepend a result; returns False if that session was already recorded."""
        with self.lock:
            if any(r.session_id == result.session_id for r in self._results):
                logger.debug("Ignoring duplicate result for session {}", result.session_id)
                return False
            evicted = self._results[self.limit - 1:]
            self._results = [result] + self._results[: self.limit - 1]
            if evicted:
                logger.debug("Evicted {} old result(s) from history", len(evicted))
            self._save()
            return True

    def results(self) -> list[AssessmentResult]:
        with self.lock:
            return list(self._results)

    def latest(self) -> AssessmentResult | None:
        with self.lock:
            return self._results[0] if self._results else None

    def average_percentage(self) -> float:
        results = self.results()
        if not results:
            return 0.0
        return round(sum(r.percentage for r in results) / len(results), 1)

    def clear(self) -> None:
        """Drop every result and zero the performance counters."""
        with self.lock:
            self._results = []
            self.aggregator.reset_all()
            logger.info("Exam history cleared for {}", self.user_id)
            self._save()

    def _save(self) -> bool:
        return self._persist([r.to_dict() for r in self._results])
