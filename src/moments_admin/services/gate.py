"""Authorization gate deciding whether a request may reach the admin surface.

The gate is evaluated on every request. It never trusts an admin claim from
the token or from an earlier request: the ``is_admin`` flag is read from the
users table each time, and any failure while reading it denies access.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from moments_admin.core import security
from moments_admin.core.errors import (
    AdminError,
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
)
from moments_admin.core.settings import settings
from moments_admin.services.entity_store import EntityStore

logger = logging.getLogger(__name__)

UNAUTHORIZED_REASON = "unauthorized"


class RouteKind(enum.Enum):
    """How the gate treats a request path."""

    PUBLIC = "public"
    LOGIN = "login"
    PROTECTED = "protected"


class GateOutcome(enum.Enum):
    ALLOW = "allow"
    REDIRECT_TO_LOGIN = "redirect_to_login"
    REDIRECT_TO_LANDING = "redirect_to_landing"


@dataclass(frozen=True)
class GateDecision:
    """Result of evaluating one request.

    Attributes:
        outcome: What the caller should do with the request.
        subject_id: Resolved identity when one exists.
        reason: ``"unauthorized"`` when a valid identity lacks admin rights.
        clear_session: Drop the session cookie before redirecting.
        refreshed_token: New session token to hand back on an allowed request.
        error: The taxonomy error behind a redirect to the login surface.
    """

    outcome: GateOutcome
    subject_id: str | None = None
    reason: str | None = None
    clear_session: bool = False
    refreshed_token: str | None = None
    error: AdminError | None = None

    @property
    def allowed(self) -> bool:
        return self.outcome is GateOutcome.ALLOW

    @property
    def location(self) -> str | None:
        """Redirect target for non-allow outcomes."""
        if self.outcome is GateOutcome.REDIRECT_TO_LANDING:
            return settings.landing_path
        if self.outcome is GateOutcome.REDIRECT_TO_LOGIN:
            if self.reason:
                return f"{settings.login_path}?error={self.reason}"
            return settings.login_path
        return None


def classify_route(path: str) -> RouteKind:
    """Place ``path`` on the public, login or protected surface."""
    normalized = path.rstrip("/") or "/"
    if normalized == settings.login_path.rstrip("/"):
        return RouteKind.LOGIN
    if normalized in {public.rstrip("/") or "/" for public in settings.public_paths}:
        return RouteKind.PUBLIC
    return RouteKind.PROTECTED


class AuthorizationGate:
    """Maps a request path and session token to a ``GateDecision``."""

    def __init__(self, store: EntityStore) -> None:
        self.store = store

    def evaluate(self, path: str, token: str | None) -> GateDecision:
        kind = classify_route(path)
        claims = security.decode_session_token(token) if token else None

        if kind is RouteKind.PUBLIC:
            return GateDecision(GateOutcome.ALLOW, subject_id=claims.subject_id if claims else None)

        if claims is None:
            if kind is RouteKind.LOGIN:
                # Anonymous callers may always see the login surface. A stale
                # cookie is cleared so the browser stops sending it.
                return GateDecision(GateOutcome.ALLOW, clear_session=token is not None)
            return GateDecision(
                GateOutcome.REDIRECT_TO_LOGIN,
                clear_session=token is not None,
                error=AuthenticationError(),
            )

        if kind is RouteKind.LOGIN:
            return GateDecision(GateOutcome.REDIRECT_TO_LANDING, subject_id=claims.subject_id)

        if not self._is_admin(claims.subject_id):
            return GateDecision(
                GateOutcome.REDIRECT_TO_LOGIN,
                subject_id=claims.subject_id,
                reason=UNAUTHORIZED_REASON,
                clear_session=True,
                error=AuthorizationError(),
            )

        refreshed = None
        if security.needs_refresh(claims):
            refreshed = security.create_session_token(claims.subject_id)
        return GateDecision(
            GateOutcome.ALLOW,
            subject_id=claims.subject_id,
            refreshed_token=refreshed,
        )

    def _is_admin(self, subject_id: str) -> bool:
        try:
            user = self.store.get_user(subject_id)
        except Exception:  # noqa: BLE001 - any failure here must deny
            logger.exception("Admin lookup raised for subject %s; denying", subject_id)
            return False
        if isinstance(user, NotFoundError):
            logger.info("Session subject %s no longer exists; denying", subject_id)
            return False
        if isinstance(user, AdminError):
            logger.warning("Admin lookup failed for subject %s (%s); denying", subject_id, user.detail)
            return False
        if not user.is_admin:
            logger.info("Subject %s is not an admin; denying", subject_id)
            return False
        return True
