"""Issues invite codes for pending waitlist entries."""

from __future__ import annotations

import logging
import secrets
from collections.abc import Callable

from moments_admin.core.errors import AdminError, DuplicateKeyError, StoreError
from moments_admin.core.settings import settings
from moments_admin.db.time import utcnow
from moments_admin.models import WaitlistEntry, WaitlistStatus
from moments_admin.services.entity_store import EntityStore
from moments_admin.services.invite_delivery import InviteDelivery
from moments_admin.services.results import ActionResult

logger = logging.getLogger(__name__)


def generate_invite_code(length: int | None = None, alphabet: str | None = None) -> str:
    """Return a random invite code drawn from ``alphabet``."""
    length = length or settings.invite_code_length
    alphabet = alphabet or settings.invite_code_alphabet
    return "".join(secrets.choice(alphabet) for _ in range(length))


class InviteIssuer:
    """Moves a waitlist entry from pending to invited together with its code.

    The code, the status and ``invited_at`` are written by one conditional
    update, so no reader ever sees an invited entry without a code. When two
    operators invite the same entry, the second update matches no pending row
    and comes back as a ``ConflictError``.
    """

    def __init__(
        self,
        store: EntityStore,
        delivery: InviteDelivery,
        code_factory: Callable[[], str] = generate_invite_code,
        max_attempts: int | None = None,
    ) -> None:
        self.store = store
        self.delivery = delivery
        self.code_factory = code_factory
        self.max_attempts = max_attempts or settings.invite_code_max_attempts

    def issue(self, entry_id: str) -> ActionResult[WaitlistEntry]:
        outcome = self._claim(entry_id)
        if isinstance(outcome, AdminError):
            return ActionResult.failure(outcome)
        return ActionResult.success(outcome).with_warnings(self.delivery.deliver(outcome))

    def _claim(self, entry_id: str) -> WaitlistEntry | AdminError:
        for attempt in range(1, self.max_attempts + 1):
            now = utcnow()
            outcome = self.store.compare_and_set_waitlist_status(
                entry_id,
                WaitlistStatus.PENDING,
                WaitlistStatus.INVITED,
                {"invite_code": self.code_factory(), "invited_at": now, "updated_at": now},
            )
            if not isinstance(outcome, DuplicateKeyError):
                return outcome
            logger.warning(
                "Invite code collision for waitlist entry %s (attempt %d/%d)",
                entry_id,
                attempt,
                self.max_attempts,
            )
        return StoreError("Could not generate a unique invite code")
