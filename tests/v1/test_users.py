# tests/v1/test_users.py
"""Tests for user trust endpoints."""

from __future__ import annotations

from fastapi import status

from moments_admin.models import ReportContentType

USERS_URL = "/api/v1/users"


class TestBanToggle:
    def test_ban_and_unban(self, client, admin_headers, regular_user) -> None:
        url = f"{USERS_URL}/{regular_user.id}/ban"

        banned = client.post(url, headers=admin_headers).json()["data"]
        unbanned = client.post(url, headers=admin_headers).json()["data"]

        assert (banned["is_banned"], banned["ban_reason"]) == (True, "Banned by admin")
        assert banned["banned_at"] is not None
        assert (unbanned["is_banned"], unbanned["banned_at"], unbanned["ban_reason"]) == (
            False,
            None,
            None,
        )

    def test_ban_with_reason(self, client, admin_headers, regular_user) -> None:
        response = client.post(
            f"{USERS_URL}/{regular_user.id}/ban",
            json={"reason": "Spam account"},
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["ban_reason"] == "Spam account"

    def test_ban_unknown_user(self, client, admin_headers) -> None:
        response = client.post(f"{USERS_URL}/nobody/ban", headers=admin_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_response_hides_access_key_hash(self, client, admin_headers, regular_user) -> None:
        data = client.post(f"{USERS_URL}/{regular_user.id}/ban", headers=admin_headers).json()["data"]
        assert "access_key_hash" not in data


class TestAdminToggle:
    def test_grant_and_revoke(self, client, admin_headers, regular_user, audit_entries) -> None:
        url = f"{USERS_URL}/{regular_user.id}/admin"

        assert client.post(url, headers=admin_headers).json()["data"]["is_admin"] is True
        assert client.post(url, headers=admin_headers).json()["data"]["is_admin"] is False
        assert [r.action for r in audit_entries(regular_user.id)] == [
            "user.grant_admin",
            "user.revoke_admin",
        ]

    def test_self_revoke_locks_out_next_request(self, client, admin_headers, admin_user) -> None:
        client.post(f"{USERS_URL}/{admin_user.id}/admin", headers=admin_headers)

        response = client.get("/api/v1/dashboard", headers=admin_headers)

        assert response.status_code == status.HTTP_303_SEE_OTHER
        assert response.headers["location"].endswith("?error=unauthorized")


def test_user_detail(client, admin_headers, regular_user, make_report) -> None:
    report = make_report(content_type=ReportContentType.USER, content_id=regular_user.id)
    make_report(content_id="unrelated-post")
    client.post(f"{USERS_URL}/{regular_user.id}/ban", headers=admin_headers)

    response = client.get(f"{USERS_URL}/{regular_user.id}", headers=admin_headers)

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["user"]["id"] == regular_user.id
    assert body["user"]["is_banned"] is True
    assert [r["id"] for r in body["reports"]] == [report.id]
    assert [entry["action"] for entry in body["audit"]] == ["user.ban"]


def test_user_detail_unknown(client, admin_headers) -> None:
    response = client.get(f"{USERS_URL}/nobody", headers=admin_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND
