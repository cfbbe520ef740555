# src/moments_admin/services/__init__.py
"""Business logic services for the Moments admin application."""

from .audit import AuditRecorder
from .entity_store import EntityStore
from .gate import AuthorizationGate
from .invite_delivery import InviteDelivery
from .invites import InviteIssuer
from .lifecycle import LifecycleEngine
from .results import ActionResult, AdminContext

__all__ = [
    "ActionResult",
    "AdminContext",
    "AuditRecorder",
    "AuthorizationGate",
    "EntityStore",
    "InviteDelivery",
    "InviteIssuer",
    "LifecycleEngine",
]
