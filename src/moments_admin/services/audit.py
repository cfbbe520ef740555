"""Append-only audit trail for admin mutations."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from fastapi.encoders import jsonable_encoder

from moments_admin.core.errors import AdminError, AuditWriteError
from moments_admin.models import AuditLogEntry
from moments_admin.services.entity_store import EntityStore
from moments_admin.services.results import AdminContext

logger = logging.getLogger(__name__)


def snapshot(entity: object, fields: Iterable[str]) -> dict[str, Any]:
    """Capture the named attributes of ``entity`` as JSON-safe values."""
    return jsonable_encoder({name: getattr(entity, name) for name in fields})


class AuditRecorder:
    """Writes one immutable ``AuditLogEntry`` per successful transition.

    The entity mutation has already been committed when ``record`` runs. A
    failed append is therefore reported back as an ``AuditWriteError`` for the
    operator to see; the mutation itself stands.
    """

    def __init__(self, store: EntityStore) -> None:
        self.store = store

    def record(
        self,
        context: AdminContext,
        action: str,
        entity_type: str,
        entity_id: str,
        old_values: Mapping[str, Any] | None,
        new_values: Mapping[str, Any] | None,
    ) -> AuditWriteError | None:
        """Append an audit entry; return a warning instead of raising on failure."""
        entry = AuditLogEntry(
            admin_id=context.subject_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            old_values=jsonable_encoder(dict(old_values)) if old_values is not None else None,
            new_values=jsonable_encoder(dict(new_values)) if new_values is not None else None,
        )
        outcome = self.store.append_audit_entry(entry)
        if isinstance(outcome, AdminError):
            logger.error(
                "Audit append failed for %s on %s %s by %s: %s",
                action,
                entity_type,
                entity_id,
                context.subject_id or "system",
                outcome.detail,
            )
            return AuditWriteError(
                f"{action} on {entity_type} {entity_id} was applied but not audited"
            )
        return None
