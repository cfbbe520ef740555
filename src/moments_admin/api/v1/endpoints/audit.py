"""Read-only view over the audit log."""

from __future__ import annotations

from collections.abc import Sequence

from fastapi import APIRouter, Depends, Query

from moments_admin.api.v1.dependencies import StoreDep, get_admin_context, value_or_raise
from moments_admin.core.settings import settings
from moments_admin.models import AuditLogEntry
from moments_admin.schemas.audit import AuditLogEntryResponse

router = APIRouter(
    prefix="/audit-log",
    tags=["audit"],
    dependencies=[Depends(get_admin_context)],
)


@router.get("", response_model=list[AuditLogEntryResponse])
async def list_audit_log(
    store: StoreDep,
    limit: int | None = Query(None, ge=1, le=500),
    before_id: int | None = Query(None, ge=1),
    entity_type: str | None = Query(None),
    entity_id: str | None = Query(None),
) -> Sequence[AuditLogEntry]:
    """Return audit records newest first.

    Pass the smallest ``id`` of a page as ``before_id`` to fetch the next one.
    """
    return value_or_raise(
        store.list_audit_entries(
            limit=limit or settings.audit_page_size,
            before_id=before_id,
            entity_type=entity_type,
            entity_id=entity_id,
        )
    )
