"""
Module Mastery Aggregation.

Reduces the effective statuses of a module's lessons to one MasteryLevel.

Two rules exist and are kept side by side:

- graded (`module_mastery`): distinguishes mastered from proficient.
- coarse (`module_mastery_coarse`): counts completed-or-mastered lessons
  only and never yields `mastered`.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Literal

from learnpath.content.graph import CurriculumGraph
from learnpath.core.types import LessonStatus, MasteryLevel
from learnpath.progression.engine import LessonStatusEntry, statuses_by_module

MasteryRule = Literal["graded", "coarse"]


@dataclass(frozen=True)
class ModuleMasterySummary:
    """Mastery and completion counts for one module."""

    module_id: str
    lesson_count: int
    completed_count: int
    mastered_count: int
    mastery: MasteryLevel

    @property
    def completion_ratio(self) -> float:
        """Fraction of lessons completed or mastered (0 for empty modules)."""
        if self.lesson_count == 0:
            return 0.0
        return self.completed_count / self.lesson_count


def module_mastery(statuses: Iterable[LessonStatus]) -> MasteryLevel:
    """
    Graded module mastery.

    Evaluated top-down, first match wins:
        no lessons                       -> new
        every lesson mastered            -> mastered
        every lesson completed/mastered  -> proficient
        at least one completed/mastered  -> learning
        otherwise                        -> new
    """
    statuses = list(statuses)
    total = len(statuses)
    if total == 0:
        return MasteryLevel.NEW

    mastered_count = sum(1 for s in statuses if s is LessonStatus.MASTERED)
    done_count = sum(1 for s in statuses if s.is_done)

    if mastered_count == total:
        return MasteryLevel.MASTERED
    if done_count == total:
        return MasteryLevel.PROFICIENT
    if done_count > 0:
        return MasteryLevel.LEARNING
    return MasteryLevel.NEW


def module_mastery_coarse(completed_count: int, lesson_count: int) -> MasteryLevel:
    """
    Coarse module mastery from completed-or-mastered vs total lesson counts.

    0 completed -> new; all completed -> proficient; otherwise learning.
    """
    if completed_count == 0:
        return MasteryLevel.NEW
    if completed_count >= lesson_count:
        return MasteryLevel.PROFICIENT
    return MasteryLevel.LEARNING


def summarize_module(
    module_id: str,
    statuses: list[LessonStatus],
    rule: MasteryRule = "graded",
) -> ModuleMasterySummary:
    """Summarize one module under the selected rule."""
    completed = sum(1 for s in statuses if s.is_done)
    mastered = sum(1 for s in statuses if s is LessonStatus.MASTERED)

    if rule == "graded":
        level = module_mastery(statuses)
    elif rule == "coarse":
        level = module_mastery_coarse(completed, len(statuses))
    else:
        raise ValueError(f"Unknown mastery rule: {rule!r}")

    return ModuleMasterySummary(
        module_id=module_id,
        lesson_count=len(statuses),
        completed_count=completed,
        mastered_count=mastered,
        mastery=level,
    )


def module_masteries(
    graph: CurriculumGraph,
    entries: list[LessonStatusEntry],
    rule: MasteryRule = "graded",
) -> list[ModuleMasterySummary]:
    """
    Per-module mastery for every module, in curriculum order.

    Args:
        graph: Content graph (supplies every module, including empty ones)
        entries: Output of the progression engine
        rule: 'graded' or 'coarse'

    Returns:
        One summary per module
    """
    grouped = statuses_by_module(entries)
    return [
        summarize_module(
            mod.id,
            [entry.status for entry in grouped.get(mod.id, [])],
            rule=rule,
        )
        for mod in graph.ordered_modules()
    ]
