"""
Progression Engine.

Derives each lesson's effective status from persisted progress plus the
sequential-unlock rule:

- A persisted record always wins, even an explicit `locked`.
- Without a record, a lesson is `available` when the lesson immediately
  before it (global curriculum order, across module boundaries) is
  completed or mastered, otherwise `locked`.
- The very first lesson defaults to `available`.

The derivation is a single fold over curriculum order with an explicit
`previous_done` accumulator; nothing is computed per module in isolation.
"""
from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

from loguru import logger

from learnpath.content.graph import CurriculumGraph
from learnpath.core.types import DataIssue, LessonProgress, LessonStatus

ProgressLookup = Callable[[str], LessonProgress | None]


@dataclass(frozen=True)
class LessonStatusEntry:
    """Effective status of one lesson."""

    lesson_id: str
    module_id: str
    status: LessonStatus
    persisted: bool  # True when the status came from a stored record


@dataclass(frozen=True)
class CompletionSummary:
    """Completed-or-mastered lessons against the curriculum total."""

    completed: int
    total: int

    @property
    def percentage(self) -> int:
        """Overall completion, rounded to a whole percent."""
        if self.total <= 0:
            return 0
        # half-up, so 12.5 reads as 13
        return int(self.completed * 100 / self.total + 0.5)


@dataclass
class ProgressionResult:
    """Ordered statuses plus any orphaned progress records that were skipped."""

    entries: list[LessonStatusEntry]
    issues: list[DataIssue] = field(default_factory=list)

    def status_of(self, lesson_id: str) -> LessonStatus | None:
        """Effective status for a lesson id, if present."""
        for entry in self.entries:
            if entry.lesson_id == lesson_id:
                return entry.status
        return None


# ============================================================================
# Fold
# ============================================================================


def unlock_step(
    previous_done: bool,
    record: LessonProgress | None,
) -> tuple[LessonStatus, bool]:
    """
    One step of the unlock fold.

    Args:
        previous_done: Whether the preceding lesson's effective status is done
        record: Persisted progress for the current lesson, if any

    Returns:
        (effective status, accumulator for the next lesson)
    """
    if record is not None:
        status = record.status
    elif previous_done:
        status = LessonStatus.AVAILABLE
    else:
        status = LessonStatus.LOCKED
    return status, status.is_done


def _as_lookup(progress: Mapping[str, LessonProgress] | ProgressLookup) -> ProgressLookup:
    if isinstance(progress, Mapping):
        return progress.get
    return progress


def derive_lesson_statuses(
    graph: CurriculumGraph,
    progress: Mapping[str, LessonProgress] | ProgressLookup,
) -> list[LessonStatusEntry]:
    """
    Walk the full curriculum in order and derive every lesson's status.

    Args:
        graph: Content graph (defines curriculum order)
        progress: Mapping or lookup `lesson_id -> LessonProgress | None`

    Returns:
        One entry per lesson, in curriculum order
    """
    lookup = _as_lookup(progress)
    entries: list[LessonStatusEntry] = []
    previous_done = True  # first lesson of the first module defaults to available

    for lesson in graph.curriculum_order():
        record = lookup(lesson.id)
        status, previous_done = unlock_step(previous_done, record)
        entries.append(
            LessonStatusEntry(
                lesson_id=lesson.id,
                module_id=lesson.module_id,
                status=status,
                persisted=record is not None,
            )
        )

    return entries


def find_orphaned_progress(
    graph: CurriculumGraph,
    progress: Mapping[str, LessonProgress],
) -> list[DataIssue]:
    """Progress records whose lesson id is not in the content graph."""
    issues = []
    for lesson_id in sorted(progress):
        if graph.has_lesson(lesson_id):
            continue
        issues.append(
            DataIssue(
                kind="orphan_progress",
                record_id=lesson_id,
                detail=f"progress record for unknown lesson {lesson_id!r} ignored",
            )
        )
    return issues


def derive_progression(
    graph: CurriculumGraph,
    progress: Mapping[str, LessonProgress],
) -> ProgressionResult:
    """
    Derive statuses and report orphaned progress records.

    Orphans never abort the pass; they are logged at WARNING and returned.
    """
    issues = find_orphaned_progress(graph, progress)
    for issue in issues:
        logger.warning(f"Skipping orphaned lesson progress: {issue.detail}")

    entries = derive_lesson_statuses(graph, progress)
    logger.debug(f"Derived {len(entries)} lesson statuses ({len(issues)} orphaned records)")
    return ProgressionResult(entries=entries, issues=issues)


# ============================================================================
# Projections over a derived pass
# ============================================================================


def statuses_by_module(entries: list[LessonStatusEntry]) -> dict[str, list[LessonStatusEntry]]:
    """Group ordered entries by module, preserving curriculum order."""
    grouped: dict[str, list[LessonStatusEntry]] = {}
    for entry in entries:
        grouped.setdefault(entry.module_id, []).append(entry)
    return grouped


def next_lesson_to_study(entries: list[LessonStatusEntry]) -> LessonStatusEntry | None:
    """
    The lesson to continue with.

    First lesson already in progress, otherwise the first available one.
    """
    for entry in entries:
        if entry.status is LessonStatus.IN_PROGRESS:
            return entry
    for entry in entries:
        if entry.status is LessonStatus.AVAILABLE:
            return entry
    return None


def completion_summary(entries: list[LessonStatusEntry]) -> CompletionSummary:
    """Count completed-or-mastered lessons."""
    completed = sum(1 for entry in entries if entry.status.is_done)
    return CompletionSummary(completed=completed, total=len(entries))
