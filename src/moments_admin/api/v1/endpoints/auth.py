"""Login surface for operators."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, Response, status
from fastapi.responses import JSONResponse, RedirectResponse

from moments_admin.api.v1.dependencies import (
    GateDecisionDep,
    GateRedirect,
    StoreDep,
    set_session_cookie,
)
from moments_admin.core import security
from moments_admin.core.errors import AdminError, NotFoundError
from moments_admin.core.settings import settings
from moments_admin.schemas.user import LoginRequest, LoginResponse
from moments_admin.services.gate import UNAUTHORIZED_REASON, GateDecision, GateOutcome

router = APIRouter(prefix="/auth", tags=["authentication"])


def _invalid_credentials() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid phone number or access key",
        headers={"WWW-Authenticate": "Bearer"},
    )


@router.get("/login", summary="Describe the login surface")
async def login_page(
    decision: GateDecisionDep,
    error: str | None = Query(None),
) -> Response:
    """Return login instructions, or send a signed-in caller to the dashboard."""
    if decision.outcome is GateOutcome.REDIRECT_TO_LANDING:
        raise GateRedirect(decision)

    response = JSONResponse(
        {
            "login": settings.login_path,
            "method": "POST",
            "fields": ["phone", "access_key"],
            "error": error,
        }
    )
    if decision.clear_session:
        response.delete_cookie(settings.session_cookie_name)
    return response


@router.post("/login", response_model=LoginResponse, summary="Sign in as an admin")
async def login(payload: LoginRequest, store: StoreDep, response: Response) -> LoginResponse:
    """Verify operator credentials and open a session.

    Valid credentials that belong to a non-admin are sent back to the login
    surface with the ``unauthorized`` marker and no session.
    """
    user = store.find_user_by_phone(payload.phone)
    if isinstance(user, NotFoundError):
        raise _invalid_credentials()
    if isinstance(user, AdminError):
        raise HTTPException(status_code=user.status_code, detail=user.detail)
    if not security.verify_access_key(payload.access_key, user.access_key_hash):
        raise _invalid_credentials()

    if not user.is_admin:
        raise GateRedirect(
            GateDecision(
                GateOutcome.REDIRECT_TO_LOGIN,
                subject_id=user.id,
                reason=UNAUTHORIZED_REASON,
                clear_session=True,
            )
        )

    token = security.create_session_token(user.id)
    set_session_cookie(response, token)
    return LoginResponse(
        access_token=token,
        subject_id=user.id,
        redirect_to=settings.landing_path,
    )


@router.post("/logout", summary="End the current session")
async def logout() -> Response:
    response = RedirectResponse(settings.login_path, status_code=status.HTTP_303_SEE_OTHER)
    response.delete_cookie(settings.session_cookie_name)
    return response
