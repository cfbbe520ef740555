"""Content report moderation endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from moments_admin.api.v1.dependencies import (
    AdminContextDep,
    EngineDep,
    StoreDep,
    get_admin_context,
    unwrap,
    value_or_raise,
)
from moments_admin.models import Report, ReportContentType, ReportStatus
from moments_admin.schemas.common import ActionResponse, CountSummary
from moments_admin.schemas.report import ReportResolution, ReportResponse

router = APIRouter(
    prefix="/reports",
    tags=["moderation"],
    dependencies=[Depends(get_admin_context)],
)


@router.get("", response_model=list[ReportResponse])
async def list_reports(
    store: StoreDep,
    status_filter: ReportStatus | None = Query(None, alias="status"),
    content_type: ReportContentType | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
) -> list[Report]:
    """List reports, newest first."""
    return list(
        value_or_raise(
            store.list_reports(status_filter, content_type, limit=limit, offset=offset)
        )
    )


@router.get("/stats", response_model=CountSummary)
async def report_stats(store: StoreDep) -> CountSummary:
    """Count reports per status."""
    counts = value_or_raise(store.count_reports_by_status())
    return CountSummary(total=sum(counts.values()), by_status=counts)


@router.post("/{report_id}/resolve", response_model=ActionResponse[ReportResponse])
async def resolve_report(
    report_id: str,
    payload: ReportResolution,
    context: AdminContextDep,
    engine: EngineDep,
) -> ActionResponse[ReportResponse]:
    """Close a pending report with the chosen resolution."""
    report, warnings = unwrap(
        engine.resolve_report(context, report_id, payload.resolution, payload.remedy)
    )
    return ActionResponse[ReportResponse](
        data=ReportResponse.model_validate(report),
        warnings=warnings,
    )
