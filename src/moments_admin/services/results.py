"""Request-scoped context and result values passed between services."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Generic, TypeVar

from moments_admin.core.errors import AdminError

T = TypeVar("T")


@dataclass(frozen=True)
class AdminContext:
    """Identity resolved by the gate for a single request.

    ``subject_id`` is ``None`` for system-initiated actions (CLI, signup
    redemption); such actions are audited with a null admin id.
    """

    subject_id: str | None

    @classmethod
    def system(cls) -> AdminContext:
        return cls(subject_id=None)

    @property
    def is_system(self) -> bool:
        return self.subject_id is None


@dataclass(frozen=True)
class ActionResult(Generic[T]):
    """Outcome of an admin action: a value or an error, plus warnings.

    Warnings accompany a successful value when a side effect (audit append,
    invite delivery) failed after the mutation was committed.
    """

    value: T | None = None
    error: AdminError | None = None
    warnings: tuple[AdminError, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T, warnings: tuple[AdminError, ...] = ()) -> ActionResult[T]:
        return cls(value=value, warnings=warnings)

    @classmethod
    def failure(cls, error: AdminError) -> ActionResult[T]:
        return cls(error=error)

    def with_warnings(self, *warnings: AdminError | None) -> ActionResult[T]:
        """Return a copy with the non-empty ``warnings`` appended."""
        extra = tuple(warning for warning in warnings if warning is not None)
        if not extra:
            return self
        return replace(self, warnings=self.warnings + extra)
