"""Hands issued invite codes to the outside world."""

from __future__ import annotations

import logging

import httpx

from moments_admin.core.errors import DeliveryError
from moments_admin.core.settings import settings
from moments_admin.models import WaitlistEntry

logger = logging.getLogger(__name__)

HTTP_OK = 200
HTTP_MULTIPLE_CHOICES = 300


class InviteDelivery:
    """Posts invitations to a webhook, or only logs them when none is configured.

    Delivery happens after the invite is committed; a failure is reported as
    a ``DeliveryError`` warning and never undoes the invite.
    """

    def __init__(
        self,
        webhook_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.webhook_url = webhook_url
        self.timeout = timeout if timeout is not None else settings.invite_webhook_timeout_seconds
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.webhook_url)

    def deliver(self, entry: WaitlistEntry) -> DeliveryError | None:
        """Send the invitation for ``entry``; return a warning on failure."""
        if not self.enabled:
            logger.info("Invite issued for waitlist entry %s (no webhook configured)", entry.id)
            return None

        payload = {
            "waitlist_id": entry.id,
            "email": entry.email,
            "phone": entry.phone,
            "invite_code": entry.invite_code,
            "invited_at": entry.invited_at.isoformat() if entry.invited_at else None,
        }
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(self.webhook_url, json=payload)  # type: ignore[arg-type]
        except httpx.HTTPError as exc:
            logger.warning("Invite delivery for %s failed: %s", entry.id, exc)
            return DeliveryError(f"Invite issued but delivery failed: {exc}")

        if not HTTP_OK <= response.status_code < HTTP_MULTIPLE_CHOICES:
            logger.warning(
                "Invite delivery for %s rejected with HTTP %d", entry.id, response.status_code
            )
            return DeliveryError(
                f"Invite issued but delivery was rejected (HTTP {response.status_code})"
            )
        return None


def get_invite_delivery() -> InviteDelivery:
    """Build the delivery client from settings."""
    return InviteDelivery(webhook_url=settings.invite_webhook_url)
