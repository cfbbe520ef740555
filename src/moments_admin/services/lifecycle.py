"""State machines for waitlist entries, reports and user trust flags.

Every transition is applied by a single compare-and-set in the store and,
when it succeeds, documented by exactly one audit entry. Rejected
transitions (terminal states, stale pre-state, validation failures) leave
both the entity and the audit log untouched.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Mapping

from moments_admin.core.errors import AdminError, ConflictError, NotFoundError, ValidationError
from moments_admin.core.settings import settings
from moments_admin.db.time import utcnow
from moments_admin.models import (
    Report,
    ReportStatus,
    User,
    UserFlags,
    WaitlistEntry,
    WaitlistStatus,
)
from moments_admin.schemas.waitlist import WaitlistCreate
from moments_admin.services.audit import AuditRecorder, snapshot
from moments_admin.services.entity_store import EntityStore
from moments_admin.services.invite_delivery import get_invite_delivery
from moments_admin.services.invites import InviteIssuer
from moments_admin.services.results import ActionResult, AdminContext

logger = logging.getLogger(__name__)

# Legal next states per current state. Absent targets are rejected.
WAITLIST_TRANSITIONS: Mapping[WaitlistStatus, frozenset[WaitlistStatus]] = {
    WaitlistStatus.PENDING: frozenset({WaitlistStatus.INVITED, WaitlistStatus.DECLINED}),
    # Reached when the invitee signs up with the code; never by an admin.
    WaitlistStatus.INVITED: frozenset({WaitlistStatus.REGISTERED}),
    WaitlistStatus.REGISTERED: frozenset(),
    WaitlistStatus.DECLINED: frozenset(),
}

REPORT_TRANSITIONS: Mapping[ReportStatus, frozenset[ReportStatus]] = {
    ReportStatus.PENDING: frozenset(
        {ReportStatus.REVIEWED, ReportStatus.ACTION_TAKEN, ReportStatus.DISMISSED}
    ),
    ReportStatus.REVIEWED: frozenset(),
    ReportStatus.ACTION_TAKEN: frozenset(),
    ReportStatus.DISMISSED: frozenset(),
}

WAITLIST_AUDIT_FIELDS = ("status", "invite_code", "invited_at", "registered_at")
REPORT_AUDIT_FIELDS = ("status", "reviewed_by", "reviewed_at", "action_taken")
BAN_AUDIT_FIELDS = ("is_banned", "banned_at", "ban_reason")
ADMIN_AUDIT_FIELDS = ("is_admin",)


def _check_exhaustive(
    table: Mapping[enum.Enum, frozenset[enum.Enum]],
    states: type[enum.Enum],
) -> None:
    members = set(states)
    if set(table) != members:
        missing = sorted(member.value for member in members - set(table))
        raise RuntimeError(f"Transition table for {states.__name__} misses states {missing}")
    for source, targets in table.items():
        if not targets <= members:
            raise RuntimeError(f"Transition table for {states.__name__} has unknown targets")
        if source in targets:
            raise RuntimeError(f"{states.__name__}.{source.name} may not transition to itself")


_check_exhaustive(WAITLIST_TRANSITIONS, WaitlistStatus)
_check_exhaustive(REPORT_TRANSITIONS, ReportStatus)


def is_terminal(status: WaitlistStatus | ReportStatus) -> bool:
    """Return True for states with no outgoing transition."""
    if isinstance(status, WaitlistStatus):
        return not WAITLIST_TRANSITIONS[status]
    return not REPORT_TRANSITIONS[status]


def _illegal(current: enum.Enum, target: enum.Enum) -> ConflictError:
    return ConflictError(
        f"Cannot move {type(current).__name__} from {current.value} to {target.value}"
    )


class LifecycleEngine:
    """Applies admin transitions and records them in the audit log."""

    def __init__(
        self,
        store: EntityStore,
        recorder: AuditRecorder,
        issuer: InviteIssuer,
    ) -> None:
        self.store = store
        self.recorder = recorder
        self.issuer = issuer

    # --------------------------------------------------------------- waitlist

    def create_waitlist_entry(
        self,
        context: AdminContext,
        payload: WaitlistCreate,
    ) -> ActionResult[WaitlistEntry]:
        """Add a pending signup. Email or phone must be present."""
        if payload.email is None and payload.phone is None:
            return ActionResult.failure(
                ValidationError("A waitlist entry needs an email address or a phone number")
            )
        outcome = self.store.create_waitlist_entry(payload.model_dump())
        if isinstance(outcome, AdminError):
            return ActionResult.failure(outcome)
        warning = self.recorder.record(
            context,
            "waitlist.create",
            "waitlist",
            outcome.id,
            None,
            snapshot(outcome, ("email", "phone", "status", "source")),
        )
        return ActionResult.success(outcome).with_warnings(warning)

    def invite_waitlist_entry(
        self,
        context: AdminContext,
        entry_id: str,
    ) -> ActionResult[WaitlistEntry]:
        """Issue an invite code to a pending entry."""
        result = self.issuer.issue(entry_id)
        if not result.ok or result.value is None:
            return result
        warning = self.recorder.record(
            context,
            "waitlist.invite",
            "waitlist",
            entry_id,
            {"status": WaitlistStatus.PENDING, "invite_code": None, "invited_at": None},
            snapshot(result.value, WAITLIST_AUDIT_FIELDS),
        )
        return result.with_warnings(warning)

    def decline_waitlist_entry(
        self,
        context: AdminContext,
        entry_id: str,
    ) -> ActionResult[WaitlistEntry]:
        """Decline a pending entry. Declined is terminal."""
        return self._transition_waitlist(
            context,
            entry_id,
            WaitlistStatus.PENDING,
            WaitlistStatus.DECLINED,
            {"updated_at": utcnow()},
            action="waitlist.decline",
        )

    def register_invite(self, context: AdminContext, invite_code: str) -> ActionResult[WaitlistEntry]:
        """Mark the entry holding ``invite_code`` as registered.

        Called when the invitee completes signup; normally a system action.
        """
        entry = self.store.find_waitlist_entry_by_code(invite_code)
        if isinstance(entry, AdminError):
            return ActionResult.failure(entry)
        now = utcnow()
        return self._transition_waitlist(
            context,
            entry.id,
            WaitlistStatus.INVITED,
            WaitlistStatus.REGISTERED,
            {"registered_at": now, "updated_at": now},
            action="waitlist.register",
        )

    def _transition_waitlist(
        self,
        context: AdminContext,
        entry_id: str,
        expected: WaitlistStatus,
        target: WaitlistStatus,
        fields: Mapping[str, object],
        *,
        action: str,
    ) -> ActionResult[WaitlistEntry]:
        if target not in WAITLIST_TRANSITIONS[expected]:
            return ActionResult.failure(_illegal(expected, target))
        outcome = self.store.compare_and_set_waitlist_status(entry_id, expected, target, fields)
        if isinstance(outcome, AdminError):
            return ActionResult.failure(outcome)
        warning = self.recorder.record(
            context,
            action,
            "waitlist",
            entry_id,
            {"status": expected},
            snapshot(outcome, WAITLIST_AUDIT_FIELDS),
        )
        return ActionResult.success(outcome).with_warnings(warning)

    # ---------------------------------------------------------------- reports

    def resolve_report(
        self,
        context: AdminContext,
        report_id: str,
        resolution: ReportStatus,
        remedy: str | None = None,
    ) -> ActionResult[Report]:
        """Close a pending report as reviewed, action_taken or dismissed."""
        if context.is_system:
            return ActionResult.failure(ValidationError("Reports can only be resolved by an admin"))
        if resolution not in REPORT_TRANSITIONS[ReportStatus.PENDING]:
            return ActionResult.failure(
                ValidationError(f"{resolution.value} is not a valid resolution")
            )
        remedy = remedy.strip() if remedy else None
        outcome = self.store.compare_and_set_report_status(
            report_id,
            ReportStatus.PENDING,
            resolution,
            {
                "reviewed_by": context.subject_id,
                "reviewed_at": utcnow(),
                "action_taken": remedy or None,
            },
        )
        if isinstance(outcome, AdminError):
            return ActionResult.failure(outcome)
        warning = self.recorder.record(
            context,
            "report.resolve",
            "report",
            report_id,
            {"status": ReportStatus.PENDING, "reviewed_by": None, "reviewed_at": None},
            snapshot(outcome, REPORT_AUDIT_FIELDS),
        )
        return ActionResult.success(outcome).with_warnings(warning)

    # ------------------------------------------------------------------ users

    def toggle_ban(
        self,
        context: AdminContext,
        user_id: str,
        reason: str | None = None,
    ) -> ActionResult[User]:
        """Ban an unbanned user or unban a banned one.

        Banning stamps ``banned_at`` and ``ban_reason``; unbanning clears all
        three fields in the same statement.
        """
        user = self.store.get_user(user_id)
        if isinstance(user, AdminError):
            return ActionResult.failure(user)

        before = snapshot(user, BAN_AUDIT_FIELDS)
        banning = not user.is_banned
        values: dict[str, object] = {
            "is_banned": banning,
            "banned_at": utcnow() if banning else None,
            "ban_reason": (reason or settings.default_ban_reason) if banning else None,
        }
        return self._toggle(
            context,
            user,
            values,
            action="user.ban" if banning else "user.unban",
            before=before,
            fields=BAN_AUDIT_FIELDS,
        )

    def toggle_admin(self, context: AdminContext, user_id: str) -> ActionResult[User]:
        """Grant admin rights to a regular user or revoke them from an admin."""
        user = self.store.get_user(user_id)
        if isinstance(user, AdminError):
            return ActionResult.failure(user)

        before = snapshot(user, ADMIN_AUDIT_FIELDS)
        granting = not user.is_admin
        return self._toggle(
            context,
            user,
            {"is_admin": granting},
            action="user.grant_admin" if granting else "user.revoke_admin",
            before=before,
            fields=ADMIN_AUDIT_FIELDS,
        )

    def _toggle(
        self,
        context: AdminContext,
        user: User,
        values: Mapping[str, object],
        *,
        action: str,
        before: Mapping[str, object],
        fields: tuple[str, ...],
    ) -> ActionResult[User]:
        expected: UserFlags = user.flags
        outcome = self.store.compare_and_set_user_flags(user.id, expected, values)
        if isinstance(outcome, AdminError):
            if isinstance(outcome, (ConflictError, NotFoundError)):
                logger.info("%s on user %s rejected: %s", action, user.id, outcome.detail)
            return ActionResult.failure(outcome)
        warning = self.recorder.record(
            context,
            action,
            "user",
            outcome.id,
            before,
            snapshot(outcome, fields),
        )
        return ActionResult.success(outcome).with_warnings(warning)


def build_engine(store: EntityStore, issuer: InviteIssuer | None = None) -> LifecycleEngine:
    """Wire an engine around ``store`` with the default collaborators."""
    return LifecycleEngine(
        store=store,
        recorder=AuditRecorder(store),
        issuer=issuer or InviteIssuer(store, get_invite_delivery()),
    )
