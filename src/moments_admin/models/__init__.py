"""SQLAlchemy models for the Moments admin service."""

from .audit_log import AuditLogEntry
from .report import Report, ReportContentType, ReportStatus
from .user import User, UserFlags
from .waitlist import WaitlistEntry, WaitlistStatus

__all__ = [
    "AuditLogEntry",
    "Report", "ReportContentType", "ReportStatus",
    "User", "UserFlags",
    "WaitlistEntry", "WaitlistStatus",
]
