"""Engine, session factory and schema helpers for the admin store."""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from moments_admin.core.settings import settings


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models."""


# Model modules register their tables on Base.metadata at import time.
import moments_admin.models  # noqa: E402,F401


def enable_sqlite_foreign_keys(target: Engine) -> Engine:
    """Turn on foreign key enforcement for every new SQLite connection."""

    @event.listens_for(target, "connect")
    def _set_pragma(dbapi_connection: Any, _record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return target


engine = create_engine(
    settings.effective_database_url,
    pool_pre_ping=True,
    echo=settings.sql_debug,
)
if engine.dialect.name == "sqlite":
    enable_sqlite_foreign_keys(engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Request-scoped session; closed once the response is sent."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(bind: Engine | Connection | None = None) -> None:
    """Create any missing admin tables on ``bind`` (the app engine by default)."""
    Base.metadata.create_all(bind=bind if bind is not None else engine)


def drop_tables(bind: Engine | Connection | None = None) -> None:
    Base.metadata.drop_all(bind=bind if bind is not None else engine)
