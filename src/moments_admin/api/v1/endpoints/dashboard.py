"""Landing view for signed-in admins."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from moments_admin.api.v1.dependencies import StoreDep, get_admin_context, value_or_raise
from moments_admin.schemas.audit import AuditLogEntryResponse

router = APIRouter(
    prefix="/dashboard",
    tags=["dashboard"],
    dependencies=[Depends(get_admin_context)],
)

RECENT_ACTIVITY_LIMIT = 10


@router.get("")
async def get_dashboard(store: StoreDep) -> dict[str, Any]:
    """Summarize the queues an operator works through."""
    waitlist = value_or_raise(store.count_waitlist_by_status())
    reports = value_or_raise(store.count_reports_by_status())
    users = value_or_raise(store.count_users())
    recent = value_or_raise(store.list_audit_entries(limit=RECENT_ACTIVITY_LIMIT))
    return {
        "waitlist": {"total": sum(waitlist.values()), "by_status": waitlist},
        "reports": {"total": sum(reports.values()), "by_status": reports},
        "users": users,
        "recent_activity": [AuditLogEntryResponse.model_validate(entry) for entry in recent],
    }
