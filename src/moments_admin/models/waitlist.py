"""Models for signup waitlist entries."""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Enum, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from moments_admin.db.session import Base
from moments_admin.db.time import utcnow
from moments_admin.models.user import new_id


class WaitlistStatus(str, enum.Enum):
    """Lifecycle states of a waitlist entry."""

    PENDING = "pending"
    INVITED = "invited"
    REGISTERED = "registered"
    DECLINED = "declined"


# States in which an entry must carry an invite code.
CODE_BEARING_STATES = frozenset({WaitlistStatus.INVITED, WaitlistStatus.REGISTERED})
_CODELESS_STATES = ", ".join(
    f"'{state.value}'" for state in WaitlistStatus if state not in CODE_BEARING_STATES
)


class WaitlistEntry(Base):
    """A person who asked for access, identified by email and/or phone."""

    __tablename__ = "waitlist"
    __table_args__ = (
        CheckConstraint(
            "email IS NOT NULL OR phone IS NOT NULL",
            name="ck_waitlist_contact_present",
        ),
        CheckConstraint(
            f"(invite_code IS NULL) = (status IN ({_CODELESS_STATES}))",
            name="ck_waitlist_invite_code_matches_status",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    status: Mapped[WaitlistStatus] = mapped_column(
        Enum(
            WaitlistStatus,
            name="waitlist_status",
            native_enum=False,
            length=16,
            values_callable=lambda members: [member.value for member in members],
            validate_strings=True,
        ),
        nullable=False,
        default=WaitlistStatus.PENDING,
    )
    source: Mapped[str | None] = mapped_column(String(64), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Unique once set; never rewritten after the invite is issued.
    invite_code: Mapped[str | None] = mapped_column(String(64), unique=True, nullable=True)
    invited_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    registered_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
