"""Shared API dependencies for the admin gate and the lifecycle engine."""

from typing import Annotated, Any, NoReturn, TypeVar, cast

from fastapi import Depends, HTTPException, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from moments_admin.core.errors import AdminError, ConflictError
from moments_admin.core.settings import settings
from moments_admin.db.session import get_db
from moments_admin.services.entity_store import EntityStore
from moments_admin.services.gate import AuthorizationGate, GateDecision
from moments_admin.services.invite_delivery import InviteDelivery, get_invite_delivery
from moments_admin.services.invites import InviteIssuer
from moments_admin.services.lifecycle import LifecycleEngine, build_engine
from moments_admin.services.results import ActionResult, AdminContext

T = TypeVar("T")

# Bearer tokens are accepted alongside the session cookie for scripted access.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


class GateRedirect(Exception):
    """Raised by the gate dependency to turn a decision into a redirect."""

    def __init__(self, decision: GateDecision) -> None:
        super().__init__(decision.outcome.value)
        self.decision = decision


def get_session_token(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> str | None:
    """Return the session token from the Authorization header or the cookie."""
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.session_cookie_name)


def get_store(db: SessionDep) -> EntityStore:
    return EntityStore(db)


StoreDep = Annotated[EntityStore, Depends(get_store)]
SessionTokenDep = Annotated[str | None, Depends(get_session_token)]


def get_gate_decision(
    request: Request,
    token: SessionTokenDep,
    store: StoreDep,
) -> GateDecision:
    """Evaluate the authorization gate for the current request."""
    return AuthorizationGate(store).evaluate(request.url.path, token)


GateDecisionDep = Annotated[GateDecision, Depends(get_gate_decision)]


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.access_token_expire_minutes * 60,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )


def get_admin_context(decision: GateDecisionDep, response: Response) -> AdminContext:
    """Admit only admins; everyone else is redirected to the login surface.

    Raises:
        GateRedirect: If the gate did not allow the request.
    """
    if not decision.allowed or decision.subject_id is None:
        raise GateRedirect(decision)
    if decision.refreshed_token:
        set_session_cookie(response, decision.refreshed_token)
    return AdminContext(subject_id=decision.subject_id)


# Type alias for the admin context dependency
AdminContextDep = Annotated[AdminContext, Depends(get_admin_context)]


def get_invite_delivery_dep() -> InviteDelivery:
    return get_invite_delivery()


def get_engine(
    store: StoreDep,
    delivery: Annotated[InviteDelivery, Depends(get_invite_delivery_dep)],
) -> LifecycleEngine:
    return build_engine(store, InviteIssuer(store, delivery))


EngineDep = Annotated[LifecycleEngine, Depends(get_engine)]


def raise_for_error(error: AdminError) -> NoReturn:
    """Translate an ``AdminError`` into an ``HTTPException``."""
    detail: Any = error.detail
    if isinstance(error, ConflictError):
        detail = {"message": error.detail, "stale": True}
    raise HTTPException(status_code=error.status_code, detail=detail)


def unwrap(result: ActionResult[T]) -> tuple[T, list[str]]:
    """Return the value and warning messages of a result, or raise its error."""
    if result.error is not None:
        raise_for_error(result.error)
    return cast(T, result.value), [warning.detail for warning in result.warnings]


def value_or_raise(outcome: T | AdminError) -> T:
    """Return ``outcome`` unless it is an ``AdminError``."""
    if isinstance(outcome, AdminError):
        raise_for_error(outcome)
    return outcome  # type: ignore[return-value]
