"""
Review Analytics.

Pure projections over a scheduler/review-log snapshot:

- Card-state histogram: tracked FSRS states, with never-scheduled cards
  folded into `new` so the total always equals the content card count.
- Weekly activity: review counts for the 7 calendar days ending today.
- Activity heatmap: the same bucketing over 28 days.

Day boundaries are local midnight in one timezone. The reference instant is
captured once per pass (ReferenceDay) and reused for every log entry.

Known limitation: when no IANA zone is configured the system's current UTC
offset is used as a fixed offset, so a DST change inside the window can
shift entries near midnight by one bucket.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, tzinfo
from zoneinfo import ZoneInfo

from loguru import logger

from learnpath.core.types import CardState, CardStateRecord, DataIssue, ReviewLogEntry

WEEKLY_WINDOW_DAYS = 7
HEATMAP_WINDOW_DAYS = 28

DAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


# ============================================================================
# Reference instant
# ============================================================================


def resolve_timezone(name: str | None = None) -> tzinfo:
    """IANA zone by name, or the system local zone when name is None."""
    if name:
        return ZoneInfo(name)
    return datetime.now().astimezone().tzinfo


@dataclass(frozen=True)
class ReferenceDay:
    """The 'now' every bucket of one aggregation pass is measured against."""

    now: datetime
    tz: tzinfo

    @classmethod
    def capture(cls, tz: tzinfo | None = None, now: datetime | None = None) -> ReferenceDay:
        """
        Capture the reference instant.

        Args:
            tz: Zone for day boundaries (system local if None)
            now: Override for the current instant (naive values are read in tz)
        """
        tz = tz or resolve_timezone()
        if now is None:
            now = datetime.now(tz)
        elif now.tzinfo is None:
            now = now.replace(tzinfo=tz)
        else:
            now = now.astimezone(tz)
        return cls(now=now, tz=tz)

    @property
    def today(self) -> date:
        """Local calendar date of the reference instant."""
        return self.now.date()

    def midnight(self, day: date) -> datetime:
        """Local midnight at the start of `day`."""
        return datetime.combine(day, time.min, tzinfo=self.tz)

    def local_date(self, instant: datetime) -> date:
        """Local calendar date of an instant (naive values are read in tz)."""
        if instant.tzinfo is None:
            return instant.replace(tzinfo=self.tz).date()
        return instant.astimezone(self.tz).date()

    def day_offset(self, instant: datetime) -> int:
        """Whole local calendar days between `instant` and today (0 = today)."""
        return (self.today - self.local_date(instant)).days


def window_start(days: int, reference: ReferenceDay) -> datetime:
    """
    Start instant of a `days`-long window ending today.

    This is the lower bound to request from the review log.
    """
    if days < 1:
        raise ValueError(f"Window must span at least one day, got {days}")
    return reference.midnight(reference.today - timedelta(days=days - 1))


# ============================================================================
# Card-state histogram
# ============================================================================


@dataclass(frozen=True)
class CardStateHistogram:
    """Card counts per scheduler state."""

    new: int = 0
    learning: int = 0
    review: int = 0
    relearning: int = 0

    @property
    def total(self) -> int:
        """Sum of all buckets."""
        return self.new + self.learning + self.review + self.relearning

    def to_dict(self) -> dict[str, int]:
        """Convert to dictionary."""
        return {
            "new": self.new,
            "learning": self.learning,
            "review": self.review,
            "relearning": self.relearning,
        }


def reconcile_card_states(
    card_states: Iterable[CardStateRecord],
    known_card_ids: Iterable[str] | None = None,
) -> tuple[list[CardStateRecord], list[DataIssue]]:
    """
    Drop orphaned and duplicate tracked states.

    Args:
        card_states: Scheduler states as read from the store
        known_card_ids: Card ids defined by content (None skips the orphan check)

    Returns:
        (tracked states, one per known card id; issues found)
    """
    known = set(known_card_ids) if known_card_ids is not None else None
    by_card: dict[str, CardStateRecord] = {}
    issues: list[DataIssue] = []

    for record in card_states:
        if known is not None and record.card_id not in known:
            issues.append(
                DataIssue(
                    kind="orphan_card_state",
                    record_id=record.card_id,
                    detail=f"card state for unknown card {record.card_id!r} ignored",
                )
            )
            continue
        if record.card_id in by_card:
            issues.append(
                DataIssue(
                    kind="duplicate_card_state",
                    record_id=record.card_id,
                    detail=f"card {record.card_id!r} tracked more than once; latest record kept",
                )
            )
        by_card[record.card_id] = record

    for issue in issues:
        logger.warning(f"Card state reconciliation: {issue.detail}")

    return list(by_card.values()), issues


def card_state_histogram(
    card_states: Iterable[CardStateRecord],
    total_content_cards: int,
) -> CardStateHistogram:
    """
    Tally tracked states and fold untracked cards into `new`.

    A card id tracked more than once counts once (last record wins). Orphans
    are not filtered here; pass states through reconcile_card_states first so
    that the sum of the buckets equals `total_content_cards`.
    """
    latest = {record.card_id: record.state for record in card_states}
    counts = {state.bucket: 0 for state in CardState}
    for state in latest.values():
        counts[state.bucket] += 1
    tracked_count = len(latest)

    untracked = total_content_cards - tracked_count
    if untracked > 0:
        counts["new"] += untracked
    elif untracked < 0:
        logger.warning(
            f"{tracked_count} tracked cards exceed the {total_content_cards} defined by content"
        )

    return CardStateHistogram(**counts)


# ============================================================================
# Activity series
# ============================================================================


@dataclass(frozen=True)
class DayBucket:
    """Review count for one local calendar day."""

    date: datetime  # local midnight
    count: int

    @property
    def day_label(self) -> str:
        """Short weekday name, e.g. 'Mon'."""
        return DAY_LABELS[self.date.weekday()]


def bucket_by_day(
    logs: Iterable[ReviewLogEntry],
    days: int,
    reference: ReferenceDay,
) -> list[DayBucket]:
    """
    Count log entries per local day over a window ending today.

    Entries with 0 <= day_offset < days increment bucket `days - 1 - day_offset`;
    entries outside the window (including future ones) are excluded.

    Returns:
        `days` buckets ordered oldest to newest
    """
    if days < 1:
        raise ValueError(f"Window must span at least one day, got {days}")

    counts = [0] * days
    for entry in logs:
        offset = reference.day_offset(entry.timestamp)
        if 0 <= offset < days:
            counts[days - 1 - offset] += 1

    return [
        DayBucket(
            date=reference.midnight(reference.today - timedelta(days=days - 1 - idx)),
            count=count,
        )
        for idx, count in enumerate(counts)
    ]


def weekly_activity(
    logs: Iterable[ReviewLogEntry],
    reference: ReferenceDay,
    days: int = WEEKLY_WINDOW_DAYS,
) -> list[DayBucket]:
    """Review counts for the last 7 calendar days, oldest first."""
    return bucket_by_day(logs, days, reference)


def activity_heatmap(
    logs: Iterable[ReviewLogEntry],
    reference: ReferenceDay,
    days: int = HEATMAP_WINDOW_DAYS,
) -> list[DayBucket]:
    """Review counts for the last 28 calendar days, oldest first."""
    return bucket_by_day(logs, days, reference)


def has_activity(series: list[DayBucket]) -> bool:
    """False when every bucket is zero (rendered as 'no activity')."""
    return any(bucket.count for bucket in series)


def today_review_count(logs: Iterable[ReviewLogEntry], reference: ReferenceDay) -> int:
    """Number of reviews logged on the reference day."""
    return sum(1 for entry in logs if reference.day_offset(entry.timestamp) == 0)


def review_counts(logs: Iterable[ReviewLogEntry], reference: ReferenceDay) -> tuple[int, int]:
    """(reviews today, reviews in the snapshot)."""
    logs = list(logs)
    return today_review_count(logs, reference), len(logs)



# ============================================================================
# Due cards
# ============================================================================


def due_count(card_states: Iterable[CardStateRecord], reference: ReferenceDay) -> int:
    """
    Cards due for review at the reference instant.

    A card is due when it has left the New state and its due date is at or
    before `reference.now`. New cards are never due, whatever their due date.
    Naive due dates are read in the reference zone.
    """
    latest = {record.card_id: record for record in card_states}
    count = 0
    for record in latest.values():
        if record.state is CardState.NEW or record.due is None:
            continue
        due = record.due if record.due.tzinfo else record.due.replace(tzinfo=reference.tz)
        if due <= reference.now:
            count += 1
    return count


# ============================================================================
# Bundled pass
# ============================================================================


@dataclass
class ReviewAnalytics:
    """Every review projection computed against one reference instant."""

    reference: ReferenceDay
    histogram: CardStateHistogram
    weekly: list[DayBucket]
    heatmap: list[DayBucket]
    today_count: int
    total_reviews: int  # all-time, not just the window
    due_count: int = 0
    issues: list[DataIssue] = field(default_factory=list)

    @property
    def weekly_total(self) -> int:
        """Reviews in the weekly window."""
        return sum(bucket.count for bucket in self.weekly)

    @property
    def heatmap_total(self) -> int:
        """Reviews in the heatmap window."""
        return sum(bucket.count for bucket in self.heatmap)


def build_review_analytics(
    card_states: Iterable[CardStateRecord],
    logs: Iterable[ReviewLogEntry],
    total_content_cards: int,
    known_card_ids: Iterable[str],
    reference: ReferenceDay | None = None,
    weekly_days: int = WEEKLY_WINDOW_DAYS,
    heatmap_days: int = HEATMAP_WINDOW_DAYS,
    total_reviews: int | None = None,
) -> ReviewAnalytics:
    """
    Run every review projection in one pass.

    Args:
        card_states: Scheduler states snapshot
        logs: Review log snapshot (should cover the heatmap window)
        total_content_cards: Cards defined by content
        known_card_ids: Content card ids; states for any other id are orphans
        reference: Shared reference instant (captured now if None)
        weekly_days: Weekly window length
        heatmap_days: Heatmap window length
        total_reviews: All-time review count (defaults to the entries in `logs`)

    Returns:
        ReviewAnalytics bundle
    """
    reference = reference or ReferenceDay.capture()
    logs = list(logs)

    tracked, issues = reconcile_card_states(card_states, known_card_ids)
    histogram = card_state_histogram(tracked, total_content_cards)
    weekly = weekly_activity(logs, reference, days=weekly_days)
    heatmap = activity_heatmap(logs, reference, days=heatmap_days)
    today_count, window_reviews = review_counts(logs, reference)

    logger.debug(
        f"Review analytics at {reference.now.isoformat()}: "
        f"{histogram.total} cards, {len(logs)} log entries"
    )

    return ReviewAnalytics(
        reference=reference,
        histogram=histogram,
        weekly=weekly,
        heatmap=heatmap,
        today_count=today_count,
        total_reviews=window_reviews if total_reviews is None else total_reviews,
        due_count=due_count(tracked, reference),
        issues=issues,
    )
