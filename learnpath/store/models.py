"""
Store Models.

SQLAlchemy models for the external stores the engine reads from:
- Lesson progress (latest status per lesson)
- Scheduler card state (one row per scheduled card)
- Review log (append-only)

Timestamps are stored as naive UTC.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Float, Index, Integer, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for store tables."""


class LessonProgressRow(Base):
    """Persisted progress for one lesson."""

    __tablename__ = "lesson_progress"

    lesson_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False)
    quiz_attempts: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    best_quiz_score: Mapped[float] = mapped_column(Float, default=0.0, server_default="0")
    last_accessed_at: Mapped[datetime | None] = mapped_column(DateTime)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime)
    total_time_spent_ms: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<LessonProgressRow lesson={self.lesson_id} status={self.status}>"


class CardStateRow(Base):
    """Scheduler output for a card that has been scheduled at least once."""

    __tablename__ = "card_states"

    card_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    state: Mapped[int] = mapped_column(Integer, nullable=False)  # 0=New 1=Learning 2=Review 3=Relearning
    due: Mapped[datetime | None] = mapped_column(DateTime)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (Index("idx_card_states_state", "state"),)

    def __repr__(self) -> str:
        return f"<CardStateRow card={self.card_id} state={self.state}>"


class ReviewLogRow(Base):
    """One review event. Rows are only ever inserted."""

    __tablename__ = "review_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    card_id: Mapped[str] = mapped_column(String(128), nullable=False)
    lesson_id: Mapped[str | None] = mapped_column(String(128))
    rating: Mapped[int | None] = mapped_column(Integer)  # 1=Again 2=Hard 3=Good 4=Easy
    timestamp: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    context: Mapped[str | None] = mapped_column(Text)  # 'inline', 'quiz', 'review-session'

    __table_args__ = (
        Index("idx_review_logs_timestamp", "timestamp"),
        Index("idx_review_logs_card", "card_id"),
    )

    def __repr__(self) -> str:
        return f"<ReviewLogRow card={self.card_id} at={self.timestamp}>"
