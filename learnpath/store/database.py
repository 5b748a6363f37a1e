from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from config import get_settings
from learnpath.store.models import Base


def make_engine(database_url: str | None = None, echo: bool | None = None) -> Engine:
    """
    Create an engine for the progress store.

    SQLite connections are shared across threads so snapshot reads can run
    off the event loop; in-memory databases use a single static connection.
    """
    settings = get_settings()
    url = database_url or settings.database_url
    if echo is None:
        echo = settings.log_level == "DEBUG"

    if url.startswith("sqlite"):
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        else:
            _, _, raw_path = url.partition(":///")
            if raw_path:
                Path(raw_path).expanduser().parent.mkdir(parents=True, exist_ok=True)
        return create_engine(url, echo=echo, **kwargs)

    return create_engine(url, echo=echo, pool_pre_ping=True)


def init_db(engine: Engine) -> None:
    """Initialize database tables."""
    Base.metadata.create_all(bind=engine)
    logger.info(f"Progress store tables initialized ({engine.url.render_as_string(hide_password=True)})")


@contextmanager
def session_scope(engine: Engine) -> Generator[Session, None, None]:
    """Provide a transactional scope around a series of operations."""
    session = sessionmaker(bind=engine, autoflush=False)()
    try:
        yield session
        session.commit()
    except Exception:  # Intentionally broad - rollback on any error before re-raising
        session.rollback()
        raise
    finally:
        session.close()
