"""Data classes for the progress and assessment domain model."""
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional


class SessionStatus(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    FINISHED = "finished"


class SessionKind:
    """Page families that run timed assessment sessions."""
    PDF_EXAM = "pdf_exam"
    LISTENING = "listening"
    READING = "reading"
    ORDERING = "ordering"


@dataclass(frozen=True)
class Option:
    key: str
    text: str


@dataclass(frozen=True)
class AssessmentQuestion:
    ordinal: int
    prompt: str
    options: tuple[Option, ...]
    correct_key: str
    category: str
    passage: Optional[str] = None

    def option_keys(self) -> list[str]:
        return [o.key for o in self.options]

    def to_dict(self) -> dict:
        return {
            "ordinal": self.ordinal,
            "prompt": self.prompt,
            "passage": self.passage,
            "options": [{"key": o.key, "text": o.text} for o in self.options],
            "correct_key": self.correct_key,
            "category": self.category,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AssessmentQuestion":
        return cls(
            ordinal=int(data["ordinal"]),
            prompt=data["prompt"],
            passage=data.get("passage"),
            options=tuple(Option(key=o["key"], text=o["text"]) for o in data["options"]),
            correct_key=data["correct_key"],
            category=data["category"],
        )


@dataclass
class CategoryStats:
    correct: int = 0
    total: int = 0

    @property
    def percentage(self) -> float:
        if not self.total:
            return 0.0
        return round(self.correct / self.total * 100, 1)

    def to_dict(self) -> dict:
        return {"correct": self.correct, "total": self.total}

    @classmethod
    def from_dict(cls, data: dict) -> "CategoryStats":
        return cls(correct=int(data.get("correct", 0)), total=int(data.get("total", 0)))


@dataclass(frozen=True)
class AssessmentResult:
    session_id: str
    completed_at: str
    questions: tuple[AssessmentQuestion, ...]
    answers: dict[int, str]
    seconds_elapsed: int
    score: int
    total_questions: int
    performance_by_category: dict[str, CategoryStats]
    kind: str = "exam"

    @property
    def percentage(self) -> float:
        if not self.total_questions:
            return 0.0
        return round(self.score / self.total_questions * 100, 1)

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "completed_at": self.completed_at,
            "questions": [q.to_dict() for q in self.questions],
            "answers": {str(k): v for k, v in self.answers.items()},
            "seconds_elapsed": self.seconds_elapsed,
            "score": self.score,
            "total_questions": self.total_questions,
            "performance_by_category": {
                cat: stats.to_dict() for cat, stats in self.performance_by_category.items()
            },
            "kind": self.kind,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AssessmentResult":
        return cls(
            session_id=data["session_id"],
            completed_at=data["completed_at"],
            questions=tuple(AssessmentQuestion.from_dict(q) for q in data["questions"]),
            answers={int(k): v for k, v in data["answers"].items()},
            seconds_elapsed=int(data["seconds_elapsed"]),
            score=int(data["score"]),
            total_questions=int(data["total_questions"]),
            performance_by_category={
                cat: CategoryStats.from_dict(s) for cat, s in data["performance_by_category"].items()
            },
            kind=data.get("kind", "exam"),
        )


@dataclass
class Challenge:
    type: str
    description: str
    target: int
    created_on: date
    progress: int = 0

    @property
    def completed(self) -> bool:
        return self.progress >= self.target

    @property
    def reported_progress(self) -> int:
        return min(self.progress, self.target)

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "description": self.description,
            "target": self.target,
            "created_on": self.created_on.isoformat(),
            "progress": self.progress,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Challenge":
        return cls(
            type=data["type"],
            description=data["description"],
            target=int(data["target"]),
            created_on=date.fromisoformat(data["created_on"]),
            progress=int(data.get("progress", 0)),
        )


@dataclass
class ChallengeState:
    current_challenge: Optional[Challenge] = None
    streak: int = 0
    last_completed_date: Optional[date] = None

    def to_dict(self) -> dict:
        return {
            "current_challenge": self.current_challenge.to_dict() if self.current_challenge else None,
            "streak": self.streak,
            "last_completed_date": self.last_completed_date.isoformat() if self.last_completed_date else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ChallengeState":
        challenge = data.get("current_challenge")
        last = data.get("last_completed_date")
        return cls(
            current_challenge=Challenge.from_dict(challenge) if challenge else None,
            streak=int(data.get("streak", 0)),
            last_completed_date=date.fromisoformat(last) if last else None,
        )


@dataclass(frozen=True)
class HistoryItem:
    id: str
    question: str
    question_type: str
    timestamp: str

    def to_dict(self) -> dict:
        return {"id": self.id, "question": self.question,
                "question_type": self.question_type, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, data: dict) -> "HistoryItem":
        return cls(id=data["id"], question=data["question"],
                   question_type=data.get("question_type", ""), timestamp=data["timestamp"])


@dataclass(frozen=True)
class VocabularyItem:
    id: str
    word: str
    meaning: str = ""

    def to_dict(self) -> dict:
        return {"id": self.id, "word": self.word, "meaning": self.meaning}

    @classmethod
    def from_dict(cls, data: dict) -> "VocabularyItem":
        return cls(id=data["id"], word=data["word"], meaning=data.get("meaning", ""))


@dataclass(frozen=True)
class SkillStatus:
    name: str
    categories: tuple[str, ...]
    correct: int
    total: int
    percentage: float
    tier: str
    band: str
    description: str = ""

    @property
    def rated(self) -> bool:
        return self.total > 0


@dataclass
class SessionSnapshot:
    """Read-only view of the controller for rendering."""
    status: SessionStatus
    session_id: Optional[str] = None
    kind: Optional[str] = None
    questions: tuple[AssessmentQuestion, ...] = ()
    answers: dict[int, str] = field(default_factory=dict)
    seconds_remaining: int = 0
    duration_seconds: int = 0
