# tests/v1/test_waitlist.py
"""Tests for waitlist endpoints."""

from __future__ import annotations

import asyncio
from unittest.mock import patch

import httpx
import pytest
from fastapi import status

from moments_admin.api.v1.dependencies import get_invite_delivery_dep
from moments_admin.core.errors import StoreError
from moments_admin.models import WaitlistStatus
from moments_admin.services.entity_store import EntityStore
from moments_admin.services.invite_delivery import InviteDelivery

WAITLIST_URL = "/api/v1/waitlist"


class TestInvite:
    def test_invite_pending_entry(self, client, admin_headers, make_waitlist_entry, audit_entries):
        entry = make_waitlist_entry()

        response = client.post(f"{WAITLIST_URL}/{entry.id}/invite", headers=admin_headers)

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["warnings"] == []
        assert body["data"]["status"] == "invited"
        assert len(body["data"]["invite_code"]) == 12
        assert body["data"]["invited_at"] is not None
        assert [r.action for r in audit_entries(entry.id)] == ["waitlist.invite"]

    def test_second_invite_is_stale_conflict(self, client, admin_headers, make_waitlist_entry):
        entry = make_waitlist_entry()
        client.post(f"{WAITLIST_URL}/{entry.id}/invite", headers=admin_headers)

        response = client.post(f"{WAITLIST_URL}/{entry.id}/invite", headers=admin_headers)

        assert response.status_code == status.HTTP_409_CONFLICT
        detail = response.json()["detail"]
        assert detail["stale"] is True
        assert "invited" in detail["message"]

    def test_webhook_delivery_runs_off_the_event_loop(
        self, app, client, admin_headers, make_waitlist_entry
    ):
        loop_running: list[bool] = []

        def handler(request: httpx.Request) -> httpx.Response:
            try:
                asyncio.get_running_loop()
            except RuntimeError:
                loop_running.append(False)
            else:
                loop_running.append(True)
            return httpx.Response(202)

        delivery = InviteDelivery(
            "https://hooks.example.com/invites", transport=httpx.MockTransport(handler)
        )
        app.dependency_overrides[get_invite_delivery_dep] = lambda: delivery
        try:
            entry = make_waitlist_entry()
            response = client.post(f"{WAITLIST_URL}/{entry.id}/invite", headers=admin_headers)
        finally:
            app.dependency_overrides.pop(get_invite_delivery_dep, None)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["warnings"] == []
        assert loop_running == [False]

    def test_invite_unknown_entry(self, client, admin_headers):
        response = client.post(f"{WAITLIST_URL}/missing/invite", headers=admin_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_audit_failure_is_reported_as_warning(
        self, client, admin_headers, make_waitlist_entry, db_session
    ):
        entry = make_waitlist_entry()

        with patch.object(EntityStore, "append_audit_entry", return_value=StoreError()):
            response = client.post(f"{WAITLIST_URL}/{entry.id}/invite", headers=admin_headers)

        assert response.status_code == status.HTTP_200_OK
        warnings = response.json()["warnings"]
        assert len(warnings) == 1
        assert "not audited" in warnings[0]
        db_session.expire_all()
        assert db_session.get(type(entry), entry.id).status is WaitlistStatus.INVITED


class TestDecline:
    def test_decline_pending_entry(self, client, admin_headers, make_waitlist_entry):
        entry = make_waitlist_entry()

        response = client.post(f"{WAITLIST_URL}/{entry.id}/decline", headers=admin_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["status"] == "declined"
        assert response.json()["data"]["invite_code"] is None

    def test_decline_declined_entry(self, client, admin_headers, make_waitlist_entry, audit_entries):
        entry = make_waitlist_entry(status=WaitlistStatus.DECLINED)

        response = client.post(f"{WAITLIST_URL}/{entry.id}/decline", headers=admin_headers)

        assert response.status_code == status.HTTP_409_CONFLICT
        assert audit_entries(entry.id) == []


class TestCreate:
    def test_create_entry(self, client, admin_headers, admin_user, audit_entries):
        response = client.post(
            WAITLIST_URL,
            json={"email": "Friend@Example.com", "source": "referral"},
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()["data"]
        assert data["status"] == "pending"
        assert data["email"] == "friend@example.com"
        records = audit_entries(data["id"])
        assert records[0].action == "waitlist.create"
        assert records[0].admin_id == admin_user.id

    def test_create_without_contact(self, client, admin_headers):
        response = client.post(WAITLIST_URL, json={"source": "referral"}, headers=admin_headers)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    @pytest.mark.parametrize(
        "email", ["not-an-email", "a@b..c", "a@-b.c", "a@b.c.", "a@b_.c"]
    )
    def test_create_with_bad_email(self, client, admin_headers, row_snapshot, email):
        before = row_snapshot()
        response = client.post(WAITLIST_URL, json={"email": email}, headers=admin_headers)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert row_snapshot() == before


class TestReads:
    def test_list_with_status_filter(self, client, admin_headers, make_waitlist_entry):
        pending = make_waitlist_entry(email="p@example.com")
        make_waitlist_entry(email="d@example.com", status=WaitlistStatus.DECLINED)

        response = client.get(WAITLIST_URL, params={"status": "pending"}, headers=admin_headers)

        assert response.status_code == status.HTTP_200_OK
        assert [row["id"] for row in response.json()] == [pending.id]

    def test_unknown_status_is_rejected(self, client, admin_headers):
        response = client.get(WAITLIST_URL, params={"status": "approved"}, headers=admin_headers)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_stats(self, client, admin_headers, make_waitlist_entry):
        make_waitlist_entry()
        make_waitlist_entry(status=WaitlistStatus.REGISTERED, invite_code="DONE00000001")

        response = client.get(f"{WAITLIST_URL}/stats", headers=admin_headers)

        assert response.json() == {
            "total": 2,
            "by_status": {"pending": 1, "invited": 0, "registered": 1, "declined": 0},
        }
