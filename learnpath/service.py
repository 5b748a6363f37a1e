"""
Progress Service.

Async boundary between the stores and the pure derivations.

Each request fetches one complete snapshot, then derives synchronously.
When requests overlap, only the most recently started one delivers a
result; earlier ones resolve to None once they notice they were superseded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol, runtime_checkable

from loguru import logger

from config import Settings, get_settings
from learnpath.analytics.review_stats import (
    ReferenceDay,
    ReviewAnalytics,
    build_review_analytics,
    resolve_timezone,
    window_start,
)
from learnpath.content.graph import CurriculumGraph
from learnpath.core.types import DataIssue, ProgressSnapshot, ReviewSnapshot
from learnpath.progression.engine import (
    CompletionSummary,
    LessonStatusEntry,
    completion_summary,
    derive_progression,
    next_lesson_to_study,
)
from learnpath.progression.mastery import ModuleMasterySummary, module_masteries


# =============================================================================
# Protocols
# =============================================================================


@runtime_checkable
class SnapshotSource(Protocol):
    """Anything that can hand out complete store snapshots."""

    async def fetch_progress_snapshot(self) -> ProgressSnapshot:
        ...

    async def fetch_review_snapshot(self, since: datetime) -> ReviewSnapshot:
        ...


# =============================================================================
# Result Types
# =============================================================================


@dataclass
class LessonOverview:
    """Everything the lessons view needs from one progression pass."""

    entries: list[LessonStatusEntry]
    masteries: list[ModuleMasterySummary]
    completion: CompletionSummary
    next_lesson: LessonStatusEntry | None
    issues: list[DataIssue] = field(default_factory=list)


class LatestResultGate:
    """
    Generation counter for overlapping requests.

    `begin()` hands out a ticket; `is_current(ticket)` is true only for the
    newest ticket issued so far.
    """

    def __init__(self) -> None:
        self._generation = 0

    def begin(self) -> int:
        """Start a request and return its ticket."""
        self._generation += 1
        return self._generation

    def is_current(self, ticket: int) -> bool:
        """True if no newer request has started since `ticket` was issued."""
        return ticket == self._generation

    @property
    def generation(self) -> int:
        """Number of tickets issued so far."""
        return self._generation


# =============================================================================
# Service
# =============================================================================


class ProgressService:
    """
    Learner-facing progress queries.

    Store failures propagate to the caller unchanged; no partial result is
    produced.
    """

    def __init__(
        self,
        graph: CurriculumGraph,
        store: SnapshotSource,
        settings: Settings | None = None,
    ):
        self.graph = graph
        self.store = store
        self.settings = settings or get_settings()
        self._overview_gate = LatestResultGate()
        self._analytics_gate = LatestResultGate()

    async def lesson_overview(self) -> LessonOverview | None:
        """
        Derive lesson statuses, module mastery and completion.

        Returns:
            LessonOverview, or None if a newer request started meanwhile
        """
        ticket = self._overview_gate.begin()
        snapshot = await self.store.fetch_progress_snapshot()
        if not self._overview_gate.is_current(ticket):
            logger.debug(f"Discarding superseded lesson overview #{ticket}")
            return None

        result = derive_progression(self.graph, snapshot.progress)
        return LessonOverview(
            entries=result.entries,
            masteries=module_masteries(self.graph, result.entries, rule=self.settings.mastery_rule),
            completion=completion_summary(result.entries),
            next_lesson=next_lesson_to_study(result.entries),
            issues=result.issues,
        )

    async def refresh(self) -> LessonOverview | None:
        """Re-read the progress store, e.g. after returning from a lesson."""
        return await self.lesson_overview()

    async def review_analytics(self, now: datetime | None = None) -> ReviewAnalytics | None:
        """
        Card-state histogram, weekly activity and heatmap for one reference instant.

        Args:
            now: Override for the reference instant

        Returns:
            ReviewAnalytics, or None if a newer request started meanwhile
        """
        ticket = self._analytics_gate.begin()
        reference = ReferenceDay.capture(resolve_timezone(self.settings.timezone), now=now)
        days = max(self.settings.heatmap_window_days, self.settings.weekly_window_days)
        since = window_start(days, reference)

        snapshot = await self.store.fetch_review_snapshot(since)
        if not self._analytics_gate.is_current(ticket):
            logger.debug(f"Discarding superseded review analytics #{ticket}")
            return None

        return build_review_analytics(
            snapshot.card_states,
            snapshot.logs,
            total_content_cards=self.graph.total_card_count(),
            known_card_ids=self.graph.card_ids(),
            reference=reference,
            weekly_days=self.settings.weekly_window_days,
            heatmap_days=self.settings.heatmap_window_days,
            total_reviews=snapshot.total_reviews,
        )
