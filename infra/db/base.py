# infra/db/base.py
from __future__ import annotations
import logging
import os

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from infra.path import default_db_url

logger = logging.getLogger(__name__)

Base = declarative_base()

DEFAULT_STORE_TIMEOUT_SECONDS = 5.0


def store_timeout_seconds() -> float:
    raw = (os.getenv("PM_STORE_TIMEOUT_SECONDS") or "").strip()
    if not raw:
        return DEFAULT_STORE_TIMEOUT_SECONDS
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring invalid PM_STORE_TIMEOUT_SECONDS=%r", raw)
        return DEFAULT_STORE_TIMEOUT_SECONDS
    return value if value > 0 else DEFAULT_STORE_TIMEOUT_SECONDS


def create_store_engine(db_url: str | None = None) -> Engine:
    """Engine for the entity store; SQLite waits up to the store timeout on a locked file."""
    url = db_url or default_db_url()
    connect_args: dict = {}
    if url.startswith("sqlite"):
        connect_args["timeout"] = store_timeout_seconds()
    logger.info("Using entity store at: %s", url.split("@")[-1])
    return create_engine(url, echo=False, future=True, connect_args=connect_args)


_engine: Engine | None = None
SessionLocal = sessionmaker(autoflush=False, autocommit=False)


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = create_store_engine()
        SessionLocal.configure(bind=_engine)
    return _engine


def open_session():
    get_engine()
    return SessionLocal()


__all__ = [
    "Base",
    "DEFAULT_STORE_TIMEOUT_SECONDS",
    "SessionLocal",
    "create_store_engine",
    "get_engine",
    "open_session",
    "store_timeout_seconds",
]
