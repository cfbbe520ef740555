"""SQLAlchemy model for application users as seen by the admin surface."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from moments_admin.db.session import Base
from moments_admin.db.time import utcnow


def new_id() -> str:
    """Return a fresh string identifier for a new row."""
    return str(uuid.uuid4())


@dataclass(frozen=True)
class UserFlags:
    """The two mutable trust flags of a user, compared as a unit."""

    is_admin: bool
    is_banned: bool


class User(Base):
    """Application user keyed by an immutable id and a unique phone number."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    phone: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    name: Mapped[str | None] = mapped_column(Text, nullable=True)
    # SHA-256 of the operator access key; only admins ever need one.
    access_key_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # banned_at/ban_reason are set exactly when is_banned is true.
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_banned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    banned_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    ban_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    @property
    def flags(self) -> UserFlags:
        """Return the trust flags used as the compare-and-set precondition."""
        return UserFlags(is_admin=self.is_admin, is_banned=self.is_banned)
