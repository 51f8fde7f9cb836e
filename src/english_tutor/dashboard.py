"""Progress dashboard summary and display helpers."""
from english_tutor import skills
from english_tutor.tracker import ProgressTracker


def get_band_color(band: str) -> str:
    if band == "Strong":
        return "green"
    elif band == "Progressing":
        return "blue"
    elif band == "Developing":
        return "dark_orange"
    return "grey50"


def get_score_color(percentage: float) -> str:
    if percentage >= 80:
        return "green"
    elif percentage >= 50:
        return "yellow"
    return "red"


def format_clock(seconds: int) -> str:
    minutes, secs = divmod(max(0, seconds), 60)
    return f"{minutes:02d}:{secs:02d}"


def get_progress_summary(tracker: ProgressTracker) -> dict:
    challenge = tracker.challenge.current_challenge()
    latest = tracker.history.latest()
    stats = tracker.performance.stats()
    total = sum(s.total for s in stats.values())
    correct = sum(s.correct for s in stats.values())
    return {
        "streak": tracker.challenge.current_streak(),
        "challenge": challenge,
        "tracked_skills": len(tracker.tracked_skills()),
        "badges_unlocked": len(tracker.unlocked_achievements()),
        "exams_taken": len(tracker.history.results()),
        "avg_exam_score": tracker.history.average_percentage(),
        "latest_exam_score": latest.percentage if latest else None,
        "questions_answered": total,
        "overall_accuracy": round(correct / total * 100, 1) if total else 0.0,
        "weak_categories": skills.weakest_categories(stats, min_total=3)[:3],
    }
