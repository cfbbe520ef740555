"""Error taxonomy shared by the gate, the lifecycle engine and the store."""

from __future__ import annotations

from fastapi import status


class AdminError(Exception):
    """Base class for errors produced by admin operations.

    Instances are usually returned inside an ``ActionResult`` rather than
    raised; the HTTP layer decides how each one is presented.
    """

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_detail = "Admin action failed"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class AuthenticationError(AdminError):
    """No valid identity is attached to the request."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Not authenticated"


class AuthorizationError(AdminError):
    """The identity is valid but is not an admin (or could not be checked)."""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Admin access required"


class ConflictError(AdminError):
    """The expected prior state of an entity no longer holds."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "Entity changed since it was loaded; refresh and try again"


class ValidationError(AdminError):
    """Malformed input rejected before the store is touched."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_detail = "Invalid input"


class NotFoundError(AdminError):
    """The requested entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class StoreError(AdminError):
    """The backing store is unavailable or rejected the statement."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Storage unavailable"


class AuditWriteError(AdminError):
    """The audit append failed after a successful mutation. Non-fatal."""

    status_code = status.HTTP_200_OK
    default_detail = "Action applied but the audit record could not be written"


class DuplicateKeyError(StoreError):
    """A unique constraint rejected the write."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "A unique value collided with an existing row"


class DeliveryError(AdminError):
    """Invitation delivery failed after the invite was issued. Non-fatal."""

    status_code = status.HTTP_200_OK
    default_detail = "Invite issued but delivery failed"
