"""Persistence adapters for the progress, scheduler and review-log stores."""

from .database import init_db, make_engine, session_scope
from .models import Base, CardStateRow, LessonProgressRow, ReviewLogRow
from .snapshot_store import SnapshotStore

__all__ = [
    "Base",
    "CardStateRow",
    "LessonProgressRow",
    "ReviewLogRow",
    "SnapshotStore",
    "init_db",
    "make_engine",
    "session_scope",
]
