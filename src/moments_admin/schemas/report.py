"""Report-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from moments_admin.models.report import ReportContentType, ReportStatus


class ReportResolution(BaseModel):
    """Outcome chosen by an operator for a pending report."""

    resolution: ReportStatus = Field(..., description="reviewed, action_taken or dismissed")
    remedy: str | None = Field(None, max_length=1000, description="What was done about it")

    @field_validator("resolution")
    @classmethod
    def _must_leave_pending(cls, value: ReportStatus) -> ReportStatus:
        if value is ReportStatus.PENDING:
            raise ValueError("resolution must be reviewed, action_taken or dismissed")
        return value


class ReportResponse(BaseModel):
    """Report returned by the API."""

    id: str
    reporter_id: str | None
    content_type: ReportContentType
    content_id: str
    reason: str
    description: str | None
    status: ReportStatus
    reviewed_by: str | None
    reviewed_at: datetime | None
    action_taken: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
