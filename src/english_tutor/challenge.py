"""Daily goal tracking and day-over-day streaks."""
from datetime import date, timedelta
from typing import Callable

from loguru import logger

from english_tutor.errors import InvalidInput, InvalidTarget
from english_tutor.models import Challenge, ChallengeState
from english_tutor.store import StoredState

ACTION_TYPES = (
    "analyze", "dictionary", "tutor", "reading", "writing", "listening",
    "sentence_ordering", "speaking_simulator", "deconstruction", "diagrammer",
    "cohesion_analyzer", "dialogue_completion",
)

GOAL_PRESETS = (
    {"description": "Analyze 3 questions", "type": "analyze", "target": 3},
    {"description": "Do 1 speaking practice", "type": "speaking_simulator", "target": 1},
    {"description": "Solve 1 sentence ordering exercise", "type": "sentence_ordering", "target": 1},
    {"description": "Look up 3 new words", "type": "dictionary", "target": 3},
    {"description": "Complete 1 reading practice", "type": "reading", "target": 1},
)


def next_streak(streak: int, last_completed: date | None, today: date) -> int:
    """Streak after the first completion on ``today``."""
    if last_completed is None:
        return 1
    gap = (today - last_completed).days
    if gap == 0:
        return streak
    if gap == 1:
        return streak + 1
    return 1


class ChallengeEngine(StoredState):
    """Owns today's goal and the streak counter.

    Day rollover is lazy: a challenge created on an earlier day is hidden
    from ``state()`` and ignored by ``track()``, but it stays in storage
    until ``set_challenge`` replaces it.
    """

    feature = "challenge-state"

    def __init__(self, store, user_id: str, today: Callable[[], date] = date.today):
        super().__init__(store, user_id)
        self.today = today
        self._state = self._load({}, ChallengeState.from_dict)

    def set_challenge(self, type: str, description: str, target: int) -> Challenge:
        if isinstance(target, bool) or not isinstance(target, int):
            raise InvalidInput(f"Target must be an integer, got {target!r}")
        if target < 1:
            raise InvalidTarget(f"Target must be at least 1, got {target}")
        challenge = Challenge(type=type, description=description, target=target,
                              created_on=self.today())
        with self.lock:
            self._state.current_challenge = challenge
            logger.info("Daily goal set: {} ({} x {})", description, target, type)
            self._save()
        return challenge

    def track(self, action_type: str) -> bool:
        """Count one action toward today's goal; returns True if it counted."""
        today = self.today()
        with self.lock:
            challenge = self._state.current_challenge
            if challenge is None or challenge.created_on != today:
                return False
            if challenge.completed or challenge.type != action_type:
                return False
            challenge.progress += 1
            if challenge.completed:
                self._state.streak = next_streak(
                    self._state.streak, self._state.last_completed_date, today
                )
                self._state.last_completed_date = today
                logger.info("Daily goal completed; streak is {}", self._state.streak)
            self._save()
            return True

    def current_challenge(self) -> Challenge | None:
        with self.lock:
            challenge = self._state.current_challenge
            if challenge is None or challenge.created_on != self.today():
                return None
            return Challenge(type=challenge.type, description=challenge.description,
                             target=challenge.target, created_on=challenge.created_on,
                             progress=challenge.reported_progress)

    def current_streak(self) -> int:
        """Streak as displayed: 0 once a whole day has passed without a completion."""
        with self.lock:
            last = self._state.last_completed_date
            if last is None:
                return 0
            if self.today() - last > timedelta(days=1):
                return 0
            return self._state.streak

    def state(self) -> ChallengeState:
        with self.lock:
            return ChallengeState(
                current_challenge=self.current_challenge(),
                streak=self.current_streak(),
                last_completed_date=self._state.last_completed_date,
            )

    def stored_state(self) -> ChallengeState:
        with self.lock:
            return ChallengeState.from_dict(self._state.to_dict())

    def _save(self) -> bool:
        return self._persist(self._state.to_dict())
