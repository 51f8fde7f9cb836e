"""Badges derived from history, vocabulary and streak.

Nothing here is stored: the unlocked set is recomputed from current data on
every read, so clearing data can hide a badge again.
"""
from dataclasses import dataclass
from typing import Callable

from loguru import logger

from english_tutor.models import ChallengeState, HistoryItem, VocabularyItem

UnlockPredicate = Callable[[list[HistoryItem], list[VocabularyItem], ChallengeState], bool]


@dataclass(frozen=True)
class AchievementDefinition:
    id: str
    title: str
    description: str
    icon: str
    predicate: UnlockPredicate


@dataclass(frozen=True)
class AchievementStatus:
    definition: AchievementDefinition
    unlocked: bool


def _distinct_types(history: list[HistoryItem]) -> int:
    return len({item.question_type for item in history if item.question_type})


ACHIEVEMENTS: tuple[AchievementDefinition, ...] = (
    AchievementDefinition("FIRST_ANALYSIS", "First Step", "Analyzed your first question.", "🌱",
                          lambda h, v, c: len(h) >= 1),
    AchievementDefinition("ANALYZER_NOVICE", "Curious Analyst", "Analyzed 10 questions.", "🧐",
                          lambda h, v, c: len(h) >= 10),
    AchievementDefinition("ANALYZER_PRO", "Master Analyst", "Analyzed 50 questions.", "🕵️",
                          lambda h, v, c: len(h) >= 50),
    AchievementDefinition("FIRST_WORD", "Collector", "Saved your first word.", "🔖",
                          lambda h, v, c: len(v) >= 1),
    AchievementDefinition("VOCAB_BUILDER", "Word Hunter", "Saved 25 words.", "📚",
                          lambda h, v, c: len(v) >= 25),
    AchievementDefinition("LEXICOGRAPHER", "Bookworm", "Saved 100 words.", "📕",
                          lambda h, v, c: len(v) >= 100),
    AchievementDefinition("STREAK_3", "Warming Up", "Completed a 3-day streak.", "🔥",
                          lambda h, v, c: c.streak >= 3),
    AchievementDefinition("STREAK_7", "On Fire", "Completed a 7-day streak.", "☄️",
                          lambda h, v, c: c.streak >= 7),
    AchievementDefinition("STREAK_30", "Unstoppable", "Completed a 30-day streak.", "☀️",
                          lambda h, v, c: c.streak >= 30),
    AchievementDefinition("POLYGLOT", "All-Rounder", "Analyzed 5 different question types.", "🎭",
                          lambda h, v, c: _distinct_types(h) >= 5),
    # Proxies: tutor and generator usage are not tracked separately
    AchievementDefinition("TUTOR_CHAT", "Wise Counsel", "Took advice from the AI tutor.", "🎓",
                          lambda h, v, c: len(h) >= 5),
    AchievementDefinition("QUESTION_GENERATOR_USER", "Creative Mind", "Used the question generator.", "💡",
                          lambda h, v, c: len(h) >= 15),
)


def _check(definition: AchievementDefinition, history, vocabulary, challenge_state) -> bool:
    try:
        return bool(definition.predicate(history, vocabulary, challenge_state))
    except Exception as e:
        logger.warning("Achievement {} could not be evaluated: {}", definition.id, e)
        return False


def evaluate(history: list[HistoryItem], vocabulary: list[VocabularyItem],
             challenge_state: ChallengeState,
             definitions: tuple[AchievementDefinition, ...] = ACHIEVEMENTS) -> list[AchievementStatus]:
    return [
        AchievementStatus(d, _check(d, history, vocabulary, challenge_state))
        for d in definitions
    ]


def unlocked(history: list[HistoryItem], vocabulary: list[VocabularyItem],
             challenge_state: ChallengeState,
             definitions: tuple[AchievementDefinition, ...] = ACHIEVEMENTS) -> list[AchievementDefinition]:
    return [s.definition for s in evaluate(history, vocabulary, challenge_state, definitions) if s.unlocked]
