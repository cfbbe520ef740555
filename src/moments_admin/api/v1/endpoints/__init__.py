"""API endpoint modules for version 1."""

from .audit import router as audit_router
from .auth import router as auth_router
from .dashboard import router as dashboard_router
from .reports import router as reports_router
from .users import router as users_router
from .waitlist import router as waitlist_router

__all__ = [
    "auth_router",
    "dashboard_router",
    "waitlist_router",
    "reports_router",
    "users_router",
    "audit_router",
]
