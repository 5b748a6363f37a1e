"""
Core Module - Shared domain models and errors.

All domain-specific modules (learnpath/progression/, learnpath/analytics/,
learnpath/store/) import from learnpath/core/ rather than redefining the
shared enums and records.
"""

from learnpath.core.errors import CurriculumError, LearnPathError, UnknownLessonError
from learnpath.core.types import (
    CardState,
    CardStateRecord,
    DataIssue,
    Lesson,
    LessonProgress,
    LessonStatus,
    MasteryLevel,
    Module,
    ProgressSnapshot,
    ReviewLogEntry,
    ReviewSnapshot,
)

__all__ = [
    # Enums
    "CardState",
    "LessonStatus",
    "MasteryLevel",
    # Records
    "CardStateRecord",
    "DataIssue",
    "Lesson",
    "LessonProgress",
    "Module",
    "ProgressSnapshot",
    "ReviewLogEntry",
    "ReviewSnapshot",
    # Errors
    "CurriculumError",
    "LearnPathError",
    "UnknownLessonError",
]
