"""Models for user-submitted content reports."""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from moments_admin.db.session import Base
from moments_admin.db.time import utcnow
from moments_admin.models.user import new_id


class ReportStatus(str, enum.Enum):
    """Review states of a report. Only ``PENDING`` is non-terminal."""

    PENDING = "pending"
    REVIEWED = "reviewed"
    ACTION_TAKEN = "action_taken"
    DISMISSED = "dismissed"


class ReportContentType(str, enum.Enum):
    """Kinds of content a report can point at."""

    POST = "post"
    MESSAGE = "message"
    USER = "user"
    PROFILE = "profile"


def _enum_column(enum_cls: type[enum.Enum], name: str) -> Enum:
    return Enum(
        enum_cls,
        name=name,
        native_enum=False,
        length=16,
        values_callable=lambda members: [member.value for member in members],
        validate_strings=True,
    )


class Report(Base):
    """A report filed against a post, message, user or profile."""

    __tablename__ = "reports"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    # Anonymous reports have no reporter.
    reporter_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    content_type: Mapped[ReportContentType] = mapped_column(
        _enum_column(ReportContentType, "report_content_type"),
        nullable=False,
    )
    content_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    reason: Mapped[str] = mapped_column(String(64), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[ReportStatus] = mapped_column(
        _enum_column(ReportStatus, "report_status"),
        nullable=False,
        default=ReportStatus.PENDING,
    )
    # reviewed_by/reviewed_at are null exactly while the report is pending.
    reviewed_by: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=True,
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    action_taken: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
