# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from itertools import count
from typing import Any

import pytest

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from moments_admin.core import security
from moments_admin.db import Base, create_tables, drop_tables
from moments_admin.db import get_db as app_get_session
from moments_admin.main import app as fastapi_app
from moments_admin.models import (
    AuditLogEntry,
    Report,
    ReportContentType,
    ReportStatus,
    User,
    WaitlistEntry,
    WaitlistStatus,
)
from moments_admin.services.entity_store import EntityStore
from moments_admin.services.invite_delivery import InviteDelivery
from moments_admin.services.invites import InviteIssuer
from moments_admin.services.lifecycle import LifecycleEngine, build_engine
from moments_admin.services.results import AdminContext

TEST_DB_URL = "sqlite://"
ADMIN_ACCESS_KEY = "correct-horse-battery"

_PHONE_COUNTER = count(1)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(engine)
    try:
        yield engine
    finally:
        drop_tables(engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def db_session(engine: Engine, session_factory: sessionmaker[Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()
        # The store commits, so each test wipes every table afterwards.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test", follow_redirects=False) as test_client:
        yield test_client


@pytest.fixture()
def store(db_session: Session) -> EntityStore:
    return EntityStore(db_session)


@pytest.fixture()
def delivery() -> InviteDelivery:
    """Delivery without a webhook: invites are only logged."""
    return InviteDelivery(webhook_url=None)


@pytest.fixture()
def lifecycle(store: EntityStore, delivery: InviteDelivery) -> LifecycleEngine:
    return build_engine(store, InviteIssuer(store, delivery))


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory persisting users with unique phone numbers."""

    def _make(
        *,
        is_admin: bool = False,
        is_banned: bool = False,
        access_key: str | None = None,
        name: str | None = None,
    ) -> User:
        user = User(
            phone=f"+1555{next(_PHONE_COUNTER):07d}",
            name=name,
            is_admin=is_admin,
            is_banned=is_banned,
            access_key_hash=security.hash_key(access_key) if access_key else None,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture()
def admin_access_key() -> str:
    return ADMIN_ACCESS_KEY


@pytest.fixture()
def admin_user(make_user: Callable[..., User]) -> User:
    return make_user(is_admin=True, access_key=ADMIN_ACCESS_KEY, name="Operator")


@pytest.fixture()
def regular_user(make_user: Callable[..., User]) -> User:
    return make_user(access_key=ADMIN_ACCESS_KEY, name="Member")


@pytest.fixture()
def admin_context(admin_user: User) -> AdminContext:
    return AdminContext(subject_id=admin_user.id)


@pytest.fixture()
def admin_headers(admin_user: User) -> dict[str, str]:
    """Authorization headers for the admin user."""
    token = security.create_session_token(admin_user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def regular_headers(regular_user: User) -> dict[str, str]:
    """Authorization headers for a valid but non-admin identity."""
    token = security.create_session_token(regular_user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def make_waitlist_entry(db_session: Session) -> Callable[..., WaitlistEntry]:
    """Return a factory persisting waitlist entries in an arbitrary state."""

    def _make(
        *,
        email: str | None = "someone@example.com",
        phone: str | None = None,
        status: WaitlistStatus = WaitlistStatus.PENDING,
        invite_code: str | None = None,
    ) -> WaitlistEntry:
        entry = WaitlistEntry(email=email, phone=phone, status=status, invite_code=invite_code)
        db_session.add(entry)
        db_session.commit()
        db_session.refresh(entry)
        return entry

    return _make


@pytest.fixture()
def make_report(db_session: Session) -> Callable[..., Report]:
    """Return a factory persisting pending reports."""

    def _make(
        *,
        content_type: ReportContentType = ReportContentType.POST,
        content_id: str = "post-1",
        reporter_id: str | None = None,
        reason: str = "spam",
        status: ReportStatus = ReportStatus.PENDING,
    ) -> Report:
        report = Report(
            content_type=content_type,
            content_id=content_id,
            reporter_id=reporter_id,
            reason=reason,
            status=status,
        )
        db_session.add(report)
        db_session.commit()
        db_session.refresh(report)
        return report

    return _make


@pytest.fixture()
def audit_entries(db_session: Session) -> Callable[..., list[AuditLogEntry]]:
    """Return a helper listing audit records, optionally for one entity."""

    def _list(entity_id: str | None = None) -> list[AuditLogEntry]:
        query = db_session.query(AuditLogEntry)
        if entity_id is not None:
            query = query.filter(AuditLogEntry.entity_id == entity_id)
        return list(query.order_by(AuditLogEntry.id).all())

    return _list


@pytest.fixture()
def row_snapshot(db_session: Session) -> Callable[[], dict[str, Any]]:
    """Return a helper capturing every mutable row for before/after comparisons."""

    def _snapshot() -> dict[str, Any]:
        db_session.expire_all()
        return {
            "users": [
                (u.id, u.is_admin, u.is_banned, u.banned_at, u.ban_reason)
                for u in db_session.query(User).order_by(User.id)
            ],
            "waitlist": [
                (w.id, w.status, w.invite_code)
                for w in db_session.query(WaitlistEntry).order_by(WaitlistEntry.id)
            ],
            "reports": [
                (r.id, r.status, r.reviewed_by)
                for r in db_session.query(Report).order_by(Report.id)
            ],
            "audit": db_session.query(AuditLogEntry).count(),
        }

    return _snapshot
