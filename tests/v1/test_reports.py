# tests/v1/test_reports.py
"""Tests for report moderation endpoints."""

from __future__ import annotations

from fastapi import status

from moments_admin.models import ReportContentType, ReportStatus

REPORTS_URL = "/api/v1/reports"


def test_resolve_with_remedy(client, admin_headers, admin_user, make_report, audit_entries) -> None:
    report = make_report()

    response = client.post(
        f"{REPORTS_URL}/{report.id}/resolve",
        json={"resolution": "action_taken", "remedy": "Content removed"},
        headers=admin_headers,
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()["data"]
    assert data["status"] == "action_taken"
    assert data["reviewed_by"] == admin_user.id
    assert data["reviewed_at"] is not None
    assert data["action_taken"] == "Content removed"
    assert [r.action for r in audit_entries(report.id)] == ["report.resolve"]


def test_resolve_twice_conflicts(client, admin_headers, make_report) -> None:
    report = make_report()
    url = f"{REPORTS_URL}/{report.id}/resolve"
    client.post(url, json={"resolution": "dismissed"}, headers=admin_headers)

    response = client.post(url, json={"resolution": "reviewed"}, headers=admin_headers)

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["detail"]["stale"] is True


def test_pending_resolution_is_invalid(client, admin_headers, make_report, audit_entries) -> None:
    report = make_report()

    response = client.post(
        f"{REPORTS_URL}/{report.id}/resolve",
        json={"resolution": "pending"},
        headers=admin_headers,
    )

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert audit_entries(report.id) == []


def test_unknown_resolution_is_invalid(client, admin_headers, make_report) -> None:
    report = make_report()
    response = client.post(
        f"{REPORTS_URL}/{report.id}/resolve",
        json={"resolution": "escalated"},
        headers=admin_headers,
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_list_filters(client, admin_headers, make_report) -> None:
    message_report = make_report(content_type=ReportContentType.MESSAGE, content_id="m-1")
    make_report(content_type=ReportContentType.POST, content_id="p-1")
    make_report(content_type=ReportContentType.MESSAGE, content_id="m-2", status=ReportStatus.DISMISSED)

    response = client.get(
        REPORTS_URL,
        params={"status": "pending", "content_type": "message"},
        headers=admin_headers,
    )

    assert response.status_code == status.HTTP_200_OK
    assert [row["id"] for row in response.json()] == [message_report.id]


def test_stats(client, admin_headers, make_report) -> None:
    make_report()
    make_report(content_id="p-2")

    response = client.get(f"{REPORTS_URL}/stats", headers=admin_headers)

    body = response.json()
    assert body["total"] == 2
    assert body["by_status"]["pending"] == 2
    assert body["by_status"]["dismissed"] == 0
