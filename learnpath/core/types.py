"""
Shared domain types for the progression engine.

Design:
- LessonStatus: persisted / effective lesson status
- MasteryLevel: derived module-wide summary (never persisted)
- CardState: scheduler state enum, FSRS integer encoding
- Module / Lesson: read-only content graph records
- LessonProgress / CardStateRecord / ReviewLogEntry: snapshot records from the stores
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum


class LessonStatus(str, Enum):
    """
    Lesson progress status.

    Status transitions on the learner-facing side:
        locked -> available -> in-progress -> completed -> mastered
    """

    LOCKED = "locked"
    AVAILABLE = "available"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    MASTERED = "mastered"

    @property
    def is_done(self) -> bool:
        """Completed or mastered; the only gate for unlocking the next lesson."""
        return self in (LessonStatus.COMPLETED, LessonStatus.MASTERED)

    @property
    def is_open(self) -> bool:
        """Whether the learner may enter the lesson."""
        return self is not LessonStatus.LOCKED


class MasteryLevel(str, Enum):
    """Module mastery level, lowest to highest."""

    NEW = "new"
    LEARNING = "learning"
    PROFICIENT = "proficient"
    MASTERED = "mastered"

    @property
    def display_name(self) -> str:
        """Human-readable name."""
        return self.value.title()

    @property
    def score(self) -> int:
        """Numeric score (0-100) for progress bars and sorting."""
        return {
            MasteryLevel.NEW: 0,
            MasteryLevel.LEARNING: 25,
            MasteryLevel.PROFICIENT: 75,
            MasteryLevel.MASTERED: 100,
        }[self]

    @property
    def color(self) -> str:
        """Rich color for CLI display."""
        return {
            MasteryLevel.NEW: "dim",
            MasteryLevel.LEARNING: "yellow",
            MasteryLevel.PROFICIENT: "cyan",
            MasteryLevel.MASTERED: "green",
        }[self]


class CardState(IntEnum):
    """FSRS card state: 0=New, 1=Learning, 2=Review, 3=Relearning."""

    NEW = 0
    LEARNING = 1
    REVIEW = 2
    RELEARNING = 3

    @property
    def bucket(self) -> str:
        """Histogram bucket name."""
        return self.name.lower()


# ============================================================================
# Content graph records
# ============================================================================


@dataclass(frozen=True)
class Lesson:
    """A single learning unit within a module."""

    id: str
    module_id: str
    order: int
    title: str = ""
    estimated_minutes: int = 15
    card_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class Module:
    """A top-level grouping of lessons."""

    id: str
    order: int
    title: str = ""
    lesson_ids: tuple[str, ...] = ()


# ============================================================================
# Store snapshot records
# ============================================================================


@dataclass(frozen=True)
class LessonProgress:
    """Persisted progress for one lesson (latest value)."""

    lesson_id: str
    status: LessonStatus
    quiz_attempts: int = 0
    best_quiz_score: float = 0.0
    last_accessed_at: datetime | None = None
    completed_at: datetime | None = None
    total_time_spent_ms: int = 0


@dataclass(frozen=True)
class CardStateRecord:
    """Scheduler state for a card that has been scheduled at least once."""

    card_id: str
    state: CardState
    due: datetime | None = None


@dataclass(frozen=True)
class ReviewLogEntry:
    """One append-only review event."""

    card_id: str
    timestamp: datetime
    lesson_id: str | None = None
    rating: int | None = None


@dataclass(frozen=True)
class DataIssue:
    """
    A record that references content missing from the content graph.

    Issues never abort a derivation pass; they are returned alongside the
    result so the caller can surface the upstream data bug.
    """

    kind: str  # 'orphan_progress', 'orphan_card_state', 'duplicate_card_state'
    record_id: str
    detail: str = ""


@dataclass(frozen=True)
class ProgressSnapshot:
    """Complete, internally consistent read of the progress store."""

    progress: dict[str, LessonProgress] = field(default_factory=dict)


@dataclass(frozen=True)
class ReviewSnapshot:
    """Complete read of the scheduler state and the review log window."""

    card_states: tuple[CardStateRecord, ...] = ()
    logs: tuple[ReviewLogEntry, ...] = ()
    since: datetime | None = None
    total_reviews: int | None = None  # all-time log size, read in the same transaction
