"""Shared Pydantic schemas for action responses."""
from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ActionResponse(BaseModel, Generic[T]):
    """Envelope returned by every state-changing admin endpoint."""

    data: T
    warnings: list[str] = Field(
        default_factory=list,
        description="Non-fatal problems, e.g. the audit record could not be written.",
    )


class CountSummary(BaseModel):
    """Per-status counts for a list view."""

    total: int
    by_status: dict[str, int]
