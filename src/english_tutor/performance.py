"""Per-category correctness counters fed by every exercise in the app."""
from loguru import logger

from english_tutor.errors import InvalidInput
from english_tutor.models import CategoryStats
from english_tutor.store import StoredState


def _decode(raw: dict) -> dict[str, CategoryStats]:
    return {cat: CategoryStats.from_dict(data) for cat, data in raw.items()}


class PerformanceAggregator(StoredState):
    """Mapping of category -> {correct, total}.

    Counters only grow through ``record`` and ``bulk_record``; ``reset_all``
    is the single administrative path that lowers them.
    """

    feature = "performance-stats"

    def __init__(self, store, user_id: str):
        super().__init__(store, user_id)
        self._stats: dict[str, CategoryStats] = self._load({}, _decode)

    def record(self, category: str, is_correct: bool) -> CategoryStats:
        with self.lock:
            current = self._stats.setdefault(category, CategoryStats())
            current.total += 1
            if is_correct:
                current.correct += 1
            logger.debug("{} -> {}/{}", category, current.correct, current.total)
            self._save()
            return CategoryStats(current.correct, current.total)

    def bulk_record(self, deltas: dict[str, CategoryStats | dict]) -> None:
        """Add per-category deltas from a finalized assessment in one step."""
        parsed = {}
        for category, delta in deltas.items():
            if isinstance(delta, dict):
                delta = CategoryStats.from_dict(delta)
            if delta.total < 0 or delta.correct < 0 or delta.correct > delta.total:
                raise InvalidInput(
                    f"Invalid counts for {category!r}: {delta.correct}/{delta.total}"
                )
            parsed[category] = delta
        with self.lock:
            for category, delta in parsed.items():
                current = self._stats.setdefault(category, CategoryStats())
                current.correct += delta.correct
                current.total += delta.total
            self._save()

    def reset_all(self) -> None:
        with self.lock:
            self._stats = {}
            logger.info("Performance counters cleared for {}", self.user_id)
            self._save()

    def get(self, category: str) -> CategoryStats:
        with self.lock:
            current = self._stats.get(category)
            if current is None:
                return CategoryStats()
            return CategoryStats(current.correct, current.total)

    def stats(self) -> dict[str, CategoryStats]:
        with self.lock:
            return {cat: CategoryStats(s.correct, s.total) for cat, s in self._stats.items()}

    def _save(self) -> bool:
        return self._persist({cat: s.to_dict() for cat, s in self._stats.items()})
