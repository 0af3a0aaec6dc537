"""Database engine and session management."""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from briefing_db.models import Base

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///briefings.db"

_engines: dict[str, Engine] = {}


def get_database_url() -> str:
    return os.environ.get("DATABASE_URL", DEFAULT_DATABASE_URL)


def get_engine(url: str | None = None) -> Engine:
    """Return a cached engine for the given URL (defaults to DATABASE_URL)."""
    url = url or get_database_url()
    if url not in _engines:
        _engines[url] = create_engine(url, future=True)
    return _engines[url]


def init_db(engine: Engine | None = None) -> Engine:
    """Create the articles and briefings tables if they do not exist."""
    engine = engine or get_engine()
    Base.metadata.create_all(engine)
    logger.info("Initialized database at %s", engine.url.render_as_string(hide_password=True))
    return engine


@contextmanager
def get_session(engine: Engine | None = None) -> Iterator[Session]:
    """Yield a session bound to the engine, rolling back on error."""
    factory = sessionmaker(bind=engine or get_engine(), expire_on_commit=False)
    session = factory()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
