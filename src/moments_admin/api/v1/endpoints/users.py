"""User trust endpoints: detail view and the ban/admin toggles."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends

from moments_admin.api.v1.dependencies import (
    AdminContextDep,
    EngineDep,
    StoreDep,
    get_admin_context,
    unwrap,
    value_or_raise,
)
from moments_admin.models import User
from moments_admin.schemas.audit import AuditLogEntryResponse
from moments_admin.schemas.common import ActionResponse
from moments_admin.schemas.report import ReportResponse
from moments_admin.schemas.user import BanToggleRequest, UserResponse

router = APIRouter(
    prefix="/users",
    tags=["users"],
    dependencies=[Depends(get_admin_context)],
)

# Number of audit records shown next to a user.
USER_HISTORY_LIMIT = 20


def _respond(user: User, warnings: list[str]) -> ActionResponse[UserResponse]:
    return ActionResponse[UserResponse](data=UserResponse.model_validate(user), warnings=warnings)


@router.get("/{user_id}")
async def get_user_detail(user_id: str, store: StoreDep) -> dict[str, Any]:
    """Return a user with the reports filed about them and their audit history.

    The three reads are independent; they share one session and run in turn.
    """
    user = value_or_raise(store.get_user(user_id))
    reports = value_or_raise(store.reports_about_user(user_id))
    history = value_or_raise(
        store.list_audit_entries(
            limit=USER_HISTORY_LIMIT,
            entity_type="user",
            entity_id=user_id,
        )
    )
    return {
        "user": UserResponse.model_validate(user),
        "reports": [ReportResponse.model_validate(report) for report in reports],
        "audit": [AuditLogEntryResponse.model_validate(entry) for entry in history],
    }


@router.post("/{user_id}/ban", response_model=ActionResponse[UserResponse])
async def toggle_ban(
    user_id: str,
    context: AdminContextDep,
    engine: EngineDep,
    payload: BanToggleRequest | None = Body(None),
) -> ActionResponse[UserResponse]:
    """Ban the user if they are not banned, otherwise lift the ban."""
    reason = payload.reason if payload is not None else None
    user, warnings = unwrap(engine.toggle_ban(context, user_id, reason))
    return _respond(user, warnings)


@router.post("/{user_id}/admin", response_model=ActionResponse[UserResponse])
async def toggle_admin(
    user_id: str,
    context: AdminContextDep,
    engine: EngineDep,
) -> ActionResponse[UserResponse]:
    """Grant or revoke admin rights."""
    user, warnings = unwrap(engine.toggle_admin(context, user_id))
    return _respond(user, warnings)
