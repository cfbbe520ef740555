"""Credential hashing and session token helpers."""
from __future__ import annotations

import hashlib
import hmac
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from moments_admin.core.settings import settings


@dataclass(frozen=True)
class SessionClaims:
    """Verified contents of a session token."""

    subject_id: str
    expires_at: datetime


def hash_key(access_key: str) -> str:
    """Return a SHA-256 hash of the provided access key."""
    return hashlib.sha256(access_key.encode("utf-8")).hexdigest()


def verify_access_key(access_key: str, hashed_key: str | None) -> bool:
    """Compare an access key against a stored hash in constant time."""
    if not hashed_key:
        return False
    return hmac.compare_digest(hash_key(access_key), hashed_key)


def create_session_token(subject_id: str, expires_minutes: int | None = None) -> str:
    """Create a signed session token for the given user id.

    The token carries identity only. Admin status is deliberately absent and
    is looked up on every request.
    """
    lifetime = expires_minutes if expires_minutes is not None else settings.access_token_expire_minutes
    expire = datetime.now(UTC) + timedelta(minutes=lifetime)
    to_encode: dict[str, object] = {"sub": subject_id, "exp": expire}
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


def decode_session_token(token: str) -> SessionClaims | None:
    """Return the claims of a valid token, or ``None`` for anything else."""
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        return None

    subject = payload.get("sub")
    exp = payload.get("exp")
    if not isinstance(subject, str) or not subject or exp is None:
        return None
    return SessionClaims(
        subject_id=subject,
        expires_at=datetime.fromtimestamp(int(exp), UTC),
    )


def needs_refresh(claims: SessionClaims, now: datetime | None = None) -> bool:
    """Return True when the session is close enough to expiry to re-issue."""
    now = now or datetime.now(UTC)
    return claims.expires_at - now <= timedelta(minutes=settings.session_refresh_minutes)
