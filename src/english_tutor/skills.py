"""Roll per-category counters up into skill groups with proficiency tiers."""
from english_tutor.errors import InvalidInput
from english_tutor.models import CategoryStats, SkillStatus

SKILL_GROUPS: dict[str, tuple[str, ...]] = {
    "Reading Comprehension": (
        "paragraph", "irrelevant_sentence", "paragraph_completion", "reading_comprehension",
    ),
    "Grammar & Vocabulary": ("vocabulary", "grammar", "cloze_test"),
    "Sentence Structure": ("sentence_completion", "restatement"),
    "Translation": ("translation",),
    "Listening Comprehension": ("listening",),
    "Dialogue": ("dialogue_completion",),
}

UNRATED = "Unrated"

# Lower bound of each tier, highest first
TIERS = ((50, "Master"), (25, "Experienced"), (10, "Persistent"), (0, "Novice"))

BAND_DESCRIPTIONS = {
    UNRATED: "No questions answered for this skill yet. Use the related practice tools to get started.",
    "Developing": "You are laying the foundations. Keep practising and both your volume and accuracy will grow.",
    "Progressing": "Steady progress. Find your weak spots and drill them to reach the next level.",
    "Strong": "Impressive mastery. Your high accuracy shows you have this skill under control.",
}


def get_tier(total: int) -> str:
    if total <= 0:
        return UNRATED
    for lower, name in TIERS:
        if total >= lower:
            return name
    return UNRATED


def get_band(correct: int, total: int) -> str:
    if total <= 0:
        return UNRATED
    ratio = correct / total
    if ratio >= 0.8:
        return "Strong"
    elif ratio >= 0.5:
        return "Progressing"
    return "Developing"


def validate_groups(groups: dict[str, tuple[str, ...]]) -> None:
    """Each category may belong to at most one group."""
    owner: dict[str, str] = {}
    for group, categories in groups.items():
        for category in categories:
            if category in owner and owner[category] != group:
                raise InvalidInput(
                    f"Category {category!r} assigned to both {owner[category]!r} and {group!r}"
                )
            owner[category] = group


def classify(stats: dict[str, CategoryStats],
             groups: dict[str, tuple[str, ...]] = SKILL_GROUPS) -> list[SkillStatus]:
    """Sum member counters per group, in the group table's order."""
    validate_groups(groups)
    results = []
    for name, categories in groups.items():
        correct = sum(stats[c].correct for c in categories if c in stats)
        total = sum(stats[c].total for c in categories if c in stats)
        band = get_band(correct, total)
        results.append(SkillStatus(
            name=name,
            categories=tuple(categories),
            correct=correct,
            total=total,
            percentage=round(correct / total * 100, 1) if total else 0.0,
            tier=get_tier(total),
            band=band,
            description=BAND_DESCRIPTIONS[band],
        ))
    return results


def tracked_skills(stats: dict[str, CategoryStats],
                   groups: dict[str, tuple[str, ...]] = SKILL_GROUPS) -> list[SkillStatus]:
    return [s for s in classify(stats, groups) if s.rated]


def weakest_categories(stats: dict[str, CategoryStats], threshold: float = 70.0,
                       min_total: int = 1) -> list[dict]:
    """Categories whose accuracy is below threshold, worst first."""
    weak = [
        {"category": cat, "correct": s.correct, "total": s.total, "score": s.percentage}
        for cat, s in stats.items()
        if s.total >= min_total and s.percentage < threshold
    ]
    return sorted(weak, key=lambda w: (w["score"], -w["total"], w["category"]))
