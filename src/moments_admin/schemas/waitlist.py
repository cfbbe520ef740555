"""Waitlist-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from moments_admin.models.waitlist import WaitlistStatus


class WaitlistCreate(BaseModel):
    """Signup added to the waitlist by an operator.

    At least one of email/phone is required; that rule is enforced by the
    waitlist service so every entry point shares it.
    """

    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=32)
    source: str | None = Field(None, max_length=64)
    notes: str | None = Field(None, max_length=2000)

    @field_validator("email", "phone", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("email")
    @classmethod
    def _lowercase_email(cls, value: str | None) -> str | None:
        return value.lower() if value else value


class WaitlistEntryResponse(BaseModel):
    """Waitlist entry returned by the API."""

    id: str
    email: str | None
    phone: str | None
    status: WaitlistStatus
    source: str | None
    notes: str | None
    invite_code: str | None
    invited_at: datetime | None
    registered_at: datetime | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
