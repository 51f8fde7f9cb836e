# tests/test_skills.py
import pytest

from english_tutor.errors import InvalidInput
from english_tutor.models import CategoryStats
from english_tutor.skills import (
    SKILL_GROUPS, UNRATED, classify, get_band, get_tier, tracked_skills,
    validate_groups, weakest_categories,
)


@pytest.mark.parametrize("total,tier", [
    (1, "Novice"), (9, "Novice"), (10, "Persistent"), (24, "Persistent"),
    (25, "Experienced"), (49, "Experienced"), (50, "Master"), (500, "Master"),
])
def test_tier_boundaries(total, tier):
    assert get_tier(total) == tier


def test_tier_unrated_when_no_attempts():
    assert get_tier(0) == UNRATED


@pytest.mark.parametrize("correct,total,band", [
    (0, 10, "Developing"), (49, 100, "Developing"), (50, 100, "Progressing"),
    (79, 100, "Progressing"), (80, 100, "Strong"), (10, 10, "Strong"),
])
def test_band_boundaries(correct, total, band):
    assert get_band(correct, total) == band


def test_band_unrated_when_no_attempts():
    assert get_band(0, 0) == UNRATED


def test_classify_sums_member_categories():
    stats = {
        "vocabulary": CategoryStats(4, 5),
        "grammar": CategoryStats(3, 5),
        "listening": CategoryStats(1, 4),
        "word_sprint": CategoryStats(9, 9),  # not in any group
    }
    by_name = {s.name: s for s in classify(stats)}
    grammar = by_name["Grammar & Vocabulary"]
    assert (grammar.correct, grammar.total) == (7, 10)
    assert grammar.percentage == 70.0
    assert grammar.tier == "Persistent"
    assert grammar.band == "Progressing"
    listening = by_name["Listening Comprehension"]
    assert listening.band == "Developing"
    assert listening.tier == "Novice"


def test_classify_lists_every_group_in_order():
    result = classify({})
    assert [s.name for s in result] == list(SKILL_GROUPS)
    assert all(s.tier == UNRATED and s.band == UNRATED for s in result)
    assert all(not s.rated for s in result)


def test_tracked_skills_excludes_unrated():
    stats = {"translation": CategoryStats(1, 1)}
    assert [s.name for s in tracked_skills(stats)] == ["Translation"]


def test_classify_is_deterministic():
    stats = {"grammar": CategoryStats(3, 7), "paragraph": CategoryStats(10, 30)}
    assert classify(stats) == classify(dict(reversed(list(stats.items()))))


def test_default_groups_are_disjoint():
    validate_groups(SKILL_GROUPS)


def test_category_in_two_groups_rejected():
    with pytest.raises(InvalidInput):
        classify({}, {"One": ("grammar",), "Two": ("grammar", "vocabulary")})


def test_custom_groups():
    groups = {"Everything": ("grammar", "listening")}
    stats = {"grammar": CategoryStats(5, 5), "listening": CategoryStats(5, 5)}
    [skill] = classify(stats, groups)
    assert skill.total == 10
    assert skill.tier == "Persistent"
    assert skill.band == "Strong"


def test_weakest_categories_sorted_worst_first():
    stats = {
        "grammar": CategoryStats(1, 4),
        "vocabulary": CategoryStats(9, 10),
        "listening": CategoryStats(0, 2),
        "translation": CategoryStats(0, 0),
    }
    weak = weakest_categories(stats)
    assert [w["category"] for w in weak] == ["listening", "grammar"]
    assert weak[0]["score"] == 0.0


def test_weakest_categories_min_total():
    stats = {"grammar": CategoryStats(0, 1), "listening": CategoryStats(1, 5)}
    assert [w["category"] for w in weakest_categories(stats, min_total=3)] == ["listening"]
