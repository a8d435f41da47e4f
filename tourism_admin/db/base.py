"""SQLAlchemy engine construction.

The service targets PostgreSQL in production but supports SQLite for local
development and CI. No declarative models are defined here; this module only
manages connection lifecycle.
"""

from __future__ import annotations

import logging
import os
from typing import Dict

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


def _db_url() -> str:
    return (
        os.getenv("TEST_DATABASE_URL")
        or os.getenv("DATABASE_URL")
        or "sqlite+pysqlite:///:memory:"
    )


# Engines are cached per URL so repeated app construction reuses the pool
_ENGINES: Dict[str, Engine] = {}


def get_engine(url: str | None = None) -> Engine:
    """Return a shared SQLAlchemy Engine for the given URL.

    For SQLite in-memory URLs, use a StaticPool to keep a single connection
    alive across sessions and threads during tests.
    """
    resolved_url = url or _db_url()
    engine = _ENGINES.get(resolved_url)
    if engine is not None:
        return engine

    kwargs: dict = {"future": True, "pool_pre_ping": True}
    if resolved_url.startswith("sqlite"):
        # FastAPI runs sync handlers in a threadpool
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in resolved_url:
            kwargs["poolclass"] = StaticPool
    engine = create_engine(resolved_url, **kwargs)
    _ENGINES[resolved_url] = engine
    logger.info("db.engine.created dialect=%s", engine.dialect.name)
    return engine


def dispose_engines() -> None:
    for engine in _ENGINES.values():
        engine.dispose()
    _ENGINES.clear()


__all__ = ["get_engine", "dispose_engines"]
