"""Exception hierarchy for learnpath."""

from __future__ import annotations


class LearnPathError(Exception):
    """Base class for learnpath errors."""


class CurriculumError(LearnPathError, ValueError):
    """The content graph is malformed (duplicate ids/orders, dangling references)."""


class UnknownLessonError(LearnPathError, KeyError):
    """A lookup referenced a lesson id that is not in the content graph."""

    def __init__(self, lesson_id: str):
        super().__init__(lesson_id)
        self.lesson_id = lesson_id

    def __str__(self) -> str:
        return f"Unknown lesson id: {self.lesson_id!r}"
