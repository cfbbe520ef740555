"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .audit import AuditLogEntryResponse
from .common import ActionResponse, CountSummary
from .report import ReportResolution, ReportResponse
from .user import BanToggleRequest, LoginRequest, LoginResponse, UserResponse
from .waitlist import WaitlistCreate, WaitlistEntryResponse

__all__ = [
    "ActionResponse", "CountSummary",
    "AuditLogEntryResponse",
    "BanToggleRequest", "LoginRequest", "LoginResponse", "UserResponse",
    "ReportResolution", "ReportResponse",
    "WaitlistCreate", "WaitlistEntryResponse",
]
