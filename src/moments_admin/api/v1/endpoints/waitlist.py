"""Waitlist management endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from moments_admin.api.v1.dependencies import (
    AdminContextDep,
    EngineDep,
    StoreDep,
    get_admin_context,
    unwrap,
    value_or_raise,
)
from moments_admin.models import WaitlistEntry, WaitlistStatus
from moments_admin.schemas.common import ActionResponse, CountSummary
from moments_admin.schemas.waitlist import WaitlistCreate, WaitlistEntryResponse

router = APIRouter(
    prefix="/waitlist",
    tags=["waitlist"],
    dependencies=[Depends(get_admin_context)],
)


def _respond(entry: WaitlistEntry, warnings: list[str]) -> ActionResponse[WaitlistEntryResponse]:
    return ActionResponse[WaitlistEntryResponse](
        data=WaitlistEntryResponse.model_validate(entry),
        warnings=warnings,
    )


@router.get("", response_model=list[WaitlistEntryResponse])
async def list_waitlist(
    store: StoreDep,
    status_filter: WaitlistStatus | None = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
) -> list[WaitlistEntry]:
    """List waitlist entries, newest first."""
    return list(value_or_raise(store.list_waitlist(status_filter, limit=limit, offset=offset)))


@router.get("/stats", response_model=CountSummary)
async def waitlist_stats(store: StoreDep) -> CountSummary:
    """Count waitlist entries per status."""
    counts = value_or_raise(store.count_waitlist_by_status())
    return CountSummary(total=sum(counts.values()), by_status=counts)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ActionResponse[WaitlistEntryResponse],
)
async def create_waitlist_entry(
    payload: WaitlistCreate,
    context: AdminContextDep,
    engine: EngineDep,
) -> ActionResponse[WaitlistEntryResponse]:
    """Add a signup to the waitlist on someone's behalf."""
    entry, warnings = unwrap(engine.create_waitlist_entry(context, payload))
    return _respond(entry, warnings)


# Plain def: webhook delivery blocks, so this runs in the threadpool.
@router.post("/{entry_id}/invite", response_model=ActionResponse[WaitlistEntryResponse])
def invite_waitlist_entry(
    entry_id: str,
    context: AdminContextDep,
    engine: EngineDep,
) -> ActionResponse[WaitlistEntryResponse]:
    """Issue an invite code to a pending entry."""
    entry, warnings = unwrap(engine.invite_waitlist_entry(context, entry_id))
    return _respond(entry, warnings)


@router.post("/{entry_id}/decline", response_model=ActionResponse[WaitlistEntryResponse])
async def decline_waitlist_entry(
    entry_id: str,
    context: AdminContextDep,
    engine: EngineDep,
) -> ActionResponse[WaitlistEntryResponse]:
    """Decline a pending entry."""
    entry, warnings = unwrap(engine.decline_waitlist_entry(context, entry_id))
    return _respond(entry, warnings)
