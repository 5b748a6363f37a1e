"""
Snapshot Store.

Adapter over the progress / scheduler / review-log tables.

Reads come in two flavours:
- point lookups (`get_progress`, `get_all_card_states`, `get_logs_in_range`)
- async snapshot reads (`fetch_progress_snapshot`, `fetch_review_snapshot`),
  each a single transaction run off the event loop, returning a complete
  snapshot before any derivation starts.

The write helpers belong to the learner-facing side (lesson player, review
session); the engine itself never calls them.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from learnpath.core.types import (
    CardState,
    CardStateRecord,
    LessonProgress,
    LessonStatus,
    ProgressSnapshot,
    ReviewLogEntry,
    ReviewSnapshot,
)
from learnpath.store.database import init_db, session_scope
from learnpath.store.models import CardStateRow, LessonProgressRow, ReviewLogRow


def _to_storage(instant: datetime | None) -> datetime | None:
    """
    Aware -> naive UTC.

    Naive values are rejected; their zone is ambiguous and every value read
    back is returned as aware UTC.
    """
    if instant is None:
        return None
    if instant.tzinfo is None:
        raise ValueError(f"Timestamp {instant.isoformat()} has no timezone")
    return instant.astimezone(UTC).replace(tzinfo=None)


def _from_storage(instant: datetime | None) -> datetime | None:
    if instant is None:
        return None
    return instant.replace(tzinfo=UTC)


def _progress_from_row(row: LessonProgressRow) -> LessonProgress:
    return LessonProgress(
        lesson_id=row.lesson_id,
        status=LessonStatus(row.status),
        quiz_attempts=row.quiz_attempts or 0,
        best_quiz_score=row.best_quiz_score or 0.0,
        last_accessed_at=_from_storage(row.last_accessed_at),
        completed_at=_from_storage(row.completed_at),
        total_time_spent_ms=row.total_time_spent_ms or 0,
    )


def _card_state_from_row(row: CardStateRow) -> CardStateRecord:
    return CardStateRecord(
        card_id=row.card_id,
        state=CardState(row.state),
        due=_from_storage(row.due),
    )


def _log_from_row(row: ReviewLogRow) -> ReviewLogEntry:
    return ReviewLogEntry(
        card_id=row.card_id,
        timestamp=_from_storage(row.timestamp),
        lesson_id=row.lesson_id,
        rating=row.rating,
    )


class SnapshotStore:
    """
    SQLAlchemy-backed access to the progress and review stores.

    Read failures propagate unchanged; nothing is cached between reads.
    """

    def __init__(self, engine: Engine, create_tables: bool = False):
        """
        Initialize the store.

        Args:
            engine: SQLAlchemy engine (see learnpath.store.database.make_engine)
            create_tables: Create missing tables on startup
        """
        self.engine = engine
        if create_tables:
            init_db(engine)

    # =========================================================================
    # Progress store
    # =========================================================================

    def get_progress(self, lesson_id: str) -> LessonProgress | None:
        """Latest progress for a lesson, or None if never touched."""
        with session_scope(self.engine) as session:
            row = session.get(LessonProgressRow, lesson_id)
            return _progress_from_row(row) if row is not None else None

    def get_all_progress(self) -> dict[str, LessonProgress]:
        """Every persisted progress record keyed by lesson id."""
        with session_scope(self.engine) as session:
            return self._read_progress(session)

    def save_lesson_progress(self, progress: LessonProgress) -> None:
        """Insert or replace the progress record for a lesson."""
        with session_scope(self.engine) as session:
            row = session.get(LessonProgressRow, progress.lesson_id)
            if row is None:
                row = LessonProgressRow(lesson_id=progress.lesson_id)
                session.add(row)
            row.status = progress.status.value
            row.quiz_attempts = progress.quiz_attempts
            row.best_quiz_score = progress.best_quiz_score
            row.last_accessed_at = _to_storage(progress.last_accessed_at)
            row.completed_at = _to_storage(progress.completed_at)
            row.total_time_spent_ms = progress.total_time_spent_ms

    # =========================================================================
    # Scheduler store
    # =========================================================================

    def get_all_card_states(self) -> list[CardStateRecord]:
        """Every tracked card state."""
        with session_scope(self.engine) as session:
            return self._read_card_states(session)

    def save_card_state(self, record: CardStateRecord) -> None:
        """Insert or replace scheduler output for a card."""
        with session_scope(self.engine) as session:
            row = session.get(CardStateRow, record.card_id)
            if row is None:
                row = CardStateRow(card_id=record.card_id)
                session.add(row)
            row.state = int(record.state)
            row.due = _to_storage(record.due)

    # =========================================================================
    # Review log
    # =========================================================================

    def get_logs_in_range(self, start: datetime) -> list[ReviewLogEntry]:
        """Review log entries at or after `start`, oldest first."""
        with session_scope(self.engine) as session:
            return self._read_logs(session, start)

    def count_reviews(self) -> int:
        """Total number of review log entries."""
        with session_scope(self.engine) as session:
            return self._count_reviews(session)

    def append_review_log(self, entry: ReviewLogEntry, context: str | None = None) -> int:
        """
        Append a review event.

        Returns:
            Review log row id
        """
        with session_scope(self.engine) as session:
            row = ReviewLogRow(
                card_id=entry.card_id,
                lesson_id=entry.lesson_id,
                rating=entry.rating,
                timestamp=_to_storage(entry.timestamp),
                context=context,
            )
            session.add(row)
            session.flush()
            return row.id

    # =========================================================================
    # Snapshots
    # =========================================================================

    async def fetch_progress_snapshot(self) -> ProgressSnapshot:
        """Read every progress record in one transaction."""
        return await asyncio.to_thread(self._progress_snapshot)

    async def fetch_review_snapshot(self, since: datetime) -> ReviewSnapshot:
        """Read card states and the log window in one transaction."""
        return await asyncio.to_thread(self._review_snapshot, since)

    def _progress_snapshot(self) -> ProgressSnapshot:
        with session_scope(self.engine) as session:
            progress = self._read_progress(session)
        logger.debug(f"Progress snapshot: {len(progress)} records")
        return ProgressSnapshot(progress=progress)

    def _review_snapshot(self, since: datetime) -> ReviewSnapshot:
        with session_scope(self.engine) as session:
            card_states = self._read_card_states(session)
            logs = self._read_logs(session, since)
            total_reviews = self._count_reviews(session)
        logger.debug(f"Review snapshot: {len(card_states)} card states, {len(logs)} log entries since {since}")
        return ReviewSnapshot(
            card_states=tuple(card_states),
            logs=tuple(logs),
            since=since,
            total_reviews=total_reviews,
        )

    @staticmethod
    def _count_reviews(session: Session) -> int:
        return session.scalar(select(func.count()).select_from(ReviewLogRow)) or 0

    @staticmethod
    def _read_progress(session: Session) -> dict[str, LessonProgress]:
        rows = session.scalars(select(LessonProgressRow)).all()
        return {row.lesson_id: _progress_from_row(row) for row in rows}

    @staticmethod
    def _read_card_states(session: Session) -> list[CardStateRecord]:
        rows = session.scalars(select(CardStateRow).order_by(CardStateRow.card_id)).all()
        return [_card_state_from_row(row) for row in rows]

    @staticmethod
    def _read_logs(session: Session, start: datetime) -> list[ReviewLogEntry]:
        stmt = (
            select(ReviewLogRow)
            .where(ReviewLogRow.timestamp >= _to_storage(start))
            .order_by(ReviewLogRow.timestamp, ReviewLogRow.id)
        )
        return [_log_from_row(row) for row in session.scalars(stmt).all()]
