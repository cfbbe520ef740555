"""Data access for users, waitlist entries, reports and audit records.

Every state change goes through a single ``UPDATE ... WHERE`` statement that
also matches the expected prior state, so the database linearizes competing
transitions on the same row. Callers never read a row, modify it in Python
and write it back.

Methods return the entity on success and an ``AdminError`` instance (not
raised) when the row is missing, the precondition failed, or the database
rejected the statement.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any, TypeVar

from sqlalchemy import ColumnElement, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from moments_admin.core.errors import (
    AdminError,
    ConflictError,
    DuplicateKeyError,
    NotFoundError,
    StoreError,
)
from moments_admin.models import (
    AuditLogEntry,
    Report,
    ReportContentType,
    ReportStatus,
    User,
    UserFlags,
    WaitlistEntry,
    WaitlistStatus,
)

__all__ = ["EntityStore"]

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", User, WaitlistEntry, Report)


class EntityStore:
    """Thin wrapper around a SQLAlchemy session for admin entities."""

    def __init__(self, db: Session) -> None:
        """Initialize the store with a request-scoped session."""
        self.db = db

    # ------------------------------------------------------------------ users

    def get_user(self, user_id: str) -> User | AdminError:
        """Return a user freshly loaded from the database."""
        try:
            user = self.db.get(User, user_id, populate_existing=True)
        except SQLAlchemyError as err:
            return self._store_failure("load user", err)
        if user is None:
            return NotFoundError("User not found")
        return user

    def find_user_by_phone(self, phone: str) -> User | AdminError:
        """Return the user owning ``phone``."""
        try:
            user = self.db.scalars(select(User).where(User.phone == phone)).first()
        except SQLAlchemyError as err:
            return self._store_failure("load user by phone", err)
        if user is None:
            return NotFoundError("User not found")
        return user

    def compare_and_set_user_flags(
        self,
        user_id: str,
        expected: UserFlags,
        values: Mapping[str, Any],
    ) -> User | AdminError:
        """Write ``values`` only if the user's flags still equal ``expected``."""
        return self._compare_and_set(
            User,
            user_id,
            (User.is_admin == expected.is_admin, User.is_banned == expected.is_banned),
            values,
            describe=lambda user: f"User flags are now {user.flags}; expected {expected}",
        )

    def set_access_key_hash(self, user_id: str, access_key_hash: str) -> User | AdminError:
        """Replace the stored operator access key hash."""
        return self._compare_and_set(
            User,
            user_id,
            (),
            {"access_key_hash": access_key_hash},
            describe=lambda _user: "User changed concurrently",
        )

    # --------------------------------------------------------------- waitlist

    def get_waitlist_entry(self, entry_id: str) -> WaitlistEntry | AdminError:
        try:
            entry = self.db.get(WaitlistEntry, entry_id, populate_existing=True)
        except SQLAlchemyError as err:
            return self._store_failure("load waitlist entry", err)
        if entry is None:
            return NotFoundError("Waitlist entry not found")
        return entry

    def find_waitlist_entry_by_code(self, invite_code: str) -> WaitlistEntry | AdminError:
        try:
            entry = self.db.scalars(
                select(WaitlistEntry).where(WaitlistEntry.invite_code == invite_code)
            ).first()
        except SQLAlchemyError as err:
            return self._store_failure("load waitlist entry by code", err)
        if entry is None:
            return NotFoundError("Invite code not found")
        return entry

    def create_waitlist_entry(self, values: Mapping[str, Any]) -> WaitlistEntry | AdminError:
        """Insert a new pending waitlist entry."""
        entry = WaitlistEntry(status=WaitlistStatus.PENDING, **values)
        try:
            self.db.add(entry)
            self.db.commit()
            self.db.refresh(entry)
        except SQLAlchemyError as err:
            return self._store_failure("create waitlist entry", err)
        return entry

    def compare_and_set_waitlist_status(
        self,
        entry_id: str,
        expected_status: WaitlistStatus,
        next_status: WaitlistStatus,
        fields: Mapping[str, Any] | None = None,
    ) -> WaitlistEntry | AdminError:
        """Move an entry to ``next_status`` if it is still in ``expected_status``."""
        values = {**(fields or {}), "status": next_status}
        return self._compare_and_set(
            WaitlistEntry,
            entry_id,
            (WaitlistEntry.status == expected_status,),
            values,
            describe=lambda entry: (
                f"Waitlist entry is {entry.status.value}; expected {expected_status.value}"
            ),
        )

    def list_waitlist(
        self,
        status: WaitlistStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Sequence[WaitlistEntry] | AdminError:
        stmt = select(WaitlistEntry)
        if status is not None:
            stmt = stmt.where(WaitlistEntry.status == status)
        stmt = stmt.order_by(WaitlistEntry.created_at.desc()).offset(offset).limit(limit)
        try:
            return self.db.scalars(stmt).all()
        except SQLAlchemyError as err:
            return self._store_failure("list waitlist", err)

    def count_waitlist_by_status(self) -> dict[str, int] | AdminError:
        return self._count_by(WaitlistEntry.status, WaitlistStatus, "count waitlist")

    # ---------------------------------------------------------------- reports

    def get_report(self, report_id: str) -> Report | AdminError:
        try:
            report = self.db.get(Report, report_id, populate_existing=True)
        except SQLAlchemyError as err:
            return self._store_failure("load report", err)
        if report is None:
            return NotFoundError("Report not found")
        return report

    def compare_and_set_report_status(
        self,
        report_id: str,
        expected_status: ReportStatus,
        next_status: ReportStatus,
        fields: Mapping[str, Any] | None = None,
    ) -> Report | AdminError:
        """Move a report to ``next_status`` if it is still in ``expected_status``."""
        values = {**(fields or {}), "status": next_status}
        return self._compare_and_set(
            Report,
            report_id,
            (Report.status == expected_status,),
            values,
            describe=lambda report: (
                f"Report is {report.status.value}; expected {expected_status.value}"
            ),
        )

    def list_reports(
        self,
        status: ReportStatus | None = None,
        content_type: ReportContentType | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Sequence[Report] | AdminError:
        stmt = select(Report)
        if status is not None:
            stmt = stmt.where(Report.status == status)
        if content_type is not None:
            stmt = stmt.where(Report.content_type == content_type)
        stmt = stmt.order_by(Report.created_at.desc()).offset(offset).limit(limit)
        try:
            return self.db.scalars(stmt).all()
        except SQLAlchemyError as err:
            return self._store_failure("list reports", err)

    def reports_about_user(self, user_id: str) -> Sequence[Report] | AdminError:
        stmt = (
            select(Report)
            .where(Report.content_type == ReportContentType.USER, Report.content_id == user_id)
            .order_by(Report.created_at.desc())
        )
        try:
            return self.db.scalars(stmt).all()
        except SQLAlchemyError as err:
            return self._store_failure("list reports about user", err)

    def count_reports_by_status(self) -> dict[str, int] | AdminError:
        return self._count_by(Report.status, ReportStatus, "count reports")

    # ------------------------------------------------------------------ audit

    def append_audit_entry(self, entry: AuditLogEntry) -> AuditLogEntry | AdminError:
        """Insert one audit record in its own transaction."""
        try:
            self.db.add(entry)
            self.db.commit()
        except SQLAlchemyError as err:
            return self._store_failure("append audit entry", err)
        return entry

    def list_audit_entries(
        self,
        limit: int = 50,
        before_id: int | None = None,
        entity_type: str | None = None,
        entity_id: str | None = None,
    ) -> Sequence[AuditLogEntry] | AdminError:
        stmt = select(AuditLogEntry)
        if before_id is not None:
            stmt = stmt.where(AuditLogEntry.id < before_id)
        if entity_type is not None:
            stmt = stmt.where(AuditLogEntry.entity_type == entity_type)
        if entity_id is not None:
            stmt = stmt.where(AuditLogEntry.entity_id == entity_id)
        stmt = stmt.order_by(AuditLogEntry.id.desc()).limit(limit)
        try:
            return self.db.scalars(stmt).all()
        except SQLAlchemyError as err:
            return self._store_failure("list audit entries", err)

    # -------------------------------------------------------------- dashboard

    def count_users(self) -> dict[str, int] | AdminError:
        stmt = select(
            func.count(User.id),
            func.count(User.id).filter(User.is_banned),
            func.count(User.id).filter(User.is_admin),
        )
        try:
            total, banned, admins = self.db.execute(stmt).one()
        except SQLAlchemyError as err:
            return self._store_failure("count users", err)
        return {"total": int(total), "banned": int(banned), "admins": int(admins)}

    # --------------------------------------------------------------- internal

    def _compare_and_set(
        self,
        model: type[ModelT],
        entity_id: str,
        conditions: Sequence[ColumnElement[bool]],
        values: Mapping[str, Any],
        *,
        describe: Callable[[ModelT], str],
    ) -> ModelT | AdminError:
        stmt = (
            update(model)
            .where(model.id == entity_id, *conditions)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        try:
            result = self.db.execute(stmt)
            if result.rowcount != 1:
                self.db.rollback()
                current = self.db.get(model, entity_id, populate_existing=True)
                if current is None:
                    return NotFoundError(f"{model.__name__} not found")
                detail = describe(current)
                logger.info("Compare-and-set rejected on %s %s: %s", model.__name__, entity_id, detail)
                return ConflictError(detail)
            self.db.commit()
            entity = self.db.get(model, entity_id, populate_existing=True)
        except IntegrityError as err:
            self.db.rollback()
            return DuplicateKeyError(str(err.orig) if err.orig is not None else None)
        except SQLAlchemyError as err:
            return self._store_failure(f"update {model.__name__}", err)
        if entity is None:  # pragma: no cover - deleted between commit and reload
            return NotFoundError(f"{model.__name__} not found")
        return entity

    def _count_by(
        self,
        column: Any,
        members: Any,
        operation: str,
    ) -> dict[str, int] | AdminError:
        try:
            rows = self.db.execute(select(column, func.count()).group_by(column)).all()
        except SQLAlchemyError as err:
            return self._store_failure(operation, err)
        counts = {member.value: 0 for member in members}
        for state, count in rows:
            counts[state.value] = int(count)
        return counts

    def _store_failure(self, operation: str, err: SQLAlchemyError) -> StoreError:
        logger.error("Store failure during %s: %s", operation, err, exc_info=True)
        try:
            self.db.rollback()
        except SQLAlchemyError:  # pragma: no cover - connection already gone
            logger.warning("Rollback after failed %s also failed", operation)
        return StoreError(f"Storage unavailable during {operation}")
