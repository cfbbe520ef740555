"""Version 1 API endpoints."""

from .endpoints import (
    audit_router,
    auth_router,
    dashboard_router,
    reports_router,
    users_router,
    waitlist_router,
)

__all__ = [
    "auth_router",
    "dashboard_router",
    "waitlist_router",
    "reports_router",
    "users_router",
    "audit_router",
]
