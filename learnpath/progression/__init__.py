"""Lesson progression and module mastery."""

from .engine import (
    CompletionSummary,
    LessonStatusEntry,
    ProgressionResult,
    completion_summary,
    derive_lesson_statuses,
    derive_progression,
    find_orphaned_progress,
    next_lesson_to_study,
    statuses_by_module,
    unlock_step,
)
from .mastery import (
    ModuleMasterySummary,
    module_masteries,
    module_mastery,
    module_mastery_coarse,
    summarize_module,
)

__all__ = [
    "CompletionSummary",
    "LessonStatusEntry",
    "ProgressionResult",
    "completion_summary",
    "derive_lesson_statuses",
    "derive_progression",
    "find_orphaned_progress",
    "next_lesson_to_study",
    "statuses_by_module",
    "unlock_step",
    "ModuleMasterySummary",
    "module_masteries",
    "module_mastery",
    "module_mastery_coarse",
    "summarize_module",
]
