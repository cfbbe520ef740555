"""User-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    """Operator credentials submitted to the login surface."""

    phone: str = Field(..., min_length=3, max_length=32)
    access_key: str = Field(..., min_length=8, max_length=256)


class LoginResponse(BaseModel):
    """Session issued after a successful admin login."""

    access_token: str
    token_type: str = "bearer"
    subject_id: str
    redirect_to: str


class BanToggleRequest(BaseModel):
    """Optional body for the ban toggle; the reason only applies when banning."""

    reason: str | None = Field(None, min_length=1, max_length=500)


class UserResponse(BaseModel):
    """User as shown to operators. The access key hash is never exposed."""

    id: str
    phone: str
    name: str | None
    is_admin: bool
    is_banned: bool
    banned_at: datetime | None
    ban_reason: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
