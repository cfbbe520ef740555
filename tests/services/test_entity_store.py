# tests/services/test_entity_store.py
"""Tests for the compare-and-set entity store."""

from __future__ import annotations

from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from moments_admin.core.errors import ConflictError, NotFoundError, StoreError
from moments_admin.models import (
    AuditLogEntry,
    ReportContentType,
    ReportStatus,
    UserFlags,
    WaitlistStatus,
)


def _operational_error() -> OperationalError:
    return OperationalError("SELECT 1", {}, Exception("database is locked"))


class TestCompareAndSet:
    def test_waitlist_status_moves_when_expected(self, store, make_waitlist_entry):
        entry = make_waitlist_entry()

        outcome = store.compare_and_set_waitlist_status(
            entry.id, WaitlistStatus.PENDING, WaitlistStatus.DECLINED
        )

        assert outcome.status is WaitlistStatus.DECLINED

    def test_waitlist_status_conflict_reports_current_state(self, store, make_waitlist_entry):
        entry = make_waitlist_entry(status=WaitlistStatus.DECLINED)

        outcome = store.compare_and_set_waitlist_status(
            entry.id, WaitlistStatus.PENDING, WaitlistStatus.DECLINED
        )

        assert isinstance(outcome, ConflictError)
        assert outcome.detail == "Waitlist entry is declined; expected pending"

    def test_missing_row_is_not_found(self, store):
        outcome = store.compare_and_set_report_status(
            "missing", ReportStatus.PENDING, ReportStatus.REVIEWED
        )
        assert isinstance(outcome, NotFoundError)

    def test_user_flags_conflict(self, store, make_user):
        user = make_user(is_banned=True)

        outcome = store.compare_and_set_user_flags(
            user.id, UserFlags(is_admin=False, is_banned=False), {"is_banned": True}
        )

        assert isinstance(outcome, ConflictError)

    def test_database_failure_becomes_store_error(self, store, db_session, make_waitlist_entry, caplog):
        entry = make_waitlist_entry()

        with patch.object(db_session, "execute", side_effect=_operational_error()):
            outcome = store.compare_and_set_waitlist_status(
                entry.id, WaitlistStatus.PENDING, WaitlistStatus.DECLINED
            )

        assert isinstance(outcome, StoreError)
        assert outcome.status_code == 503
        assert "Store failure" in caplog.text
        assert store.get_waitlist_entry(entry.id).status is WaitlistStatus.PENDING


class TestReads:
    def test_get_user_not_found(self, store):
        assert isinstance(store.get_user("nobody"), NotFoundError)

    def test_get_user_failure(self, store, db_session):
        with patch.object(db_session, "get", side_effect=_operational_error()):
            assert isinstance(store.get_user("anyone"), StoreError)

    def test_list_waitlist_filters_by_status(self, store, make_waitlist_entry):
        pending = make_waitlist_entry(email="a@example.com")
        make_waitlist_entry(email="b@example.com", status=WaitlistStatus.DECLINED)

        rows = store.list_waitlist(WaitlistStatus.PENDING)

        assert [row.id for row in rows] == [pending.id]

    def test_counts_include_empty_states(self, store, make_waitlist_entry):
        make_waitlist_entry()
        make_waitlist_entry(status=WaitlistStatus.INVITED, invite_code="CODE00000001")

        counts = store.count_waitlist_by_status()

        assert counts == {"pending": 1, "invited": 1, "registered": 0, "declined": 0}

    def test_reports_about_user(self, store, make_report, regular_user):
        about = make_report(content_type=ReportContentType.USER, content_id=regular_user.id)
        make_report(content_type=ReportContentType.POST, content_id=regular_user.id)

        rows = store.reports_about_user(regular_user.id)

        assert [row.id for row in rows] == [about.id]

    def test_count_users(self, store, make_user):
        make_user(is_admin=True)
        make_user(is_banned=True)
        make_user()

        assert store.count_users() == {"total": 3, "banned": 1, "admins": 1}

    def test_audit_paging_newest_first(self, store):
        for index in range(5):
            store.append_audit_entry(
                AuditLogEntry(
                    admin_id=None,
                    action="waitlist.create",
                    entity_type="waitlist",
                    entity_id=f"entry-{index}",
                )
            )

        first_page = store.list_audit_entries(limit=2)
        second_page = store.list_audit_entries(limit=2, before_id=first_page[-1].id)

        assert [e.entity_id for e in first_page] == ["entry-4", "entry-3"]
        assert [e.entity_id for e in second_page] == ["entry-2", "entry-1"]
