"""Audit logging service.

Records immutable before/after snapshots for membership and committee changes.
Entries are added to the caller's session and committed with the change they
describe, so a rolled-back change never leaves an audit entry behind.
"""

import enum
import uuid
from typing import Any

from pydantic_core import to_jsonable_python
from sqlalchemy.ext.asyncio import AsyncSession

from committee_engine.models.audit_log import AuditLog


class AuditAction(enum.StrEnum):
    """Audited membership and committee events."""

    MEMBER_SUBMITTED = "MEMBER_SUBMITTED"
    MEMBER_CONFIRMED = "MEMBER_CONFIRMED"
    MEMBER_ACTIVATED = "MEMBER_ACTIVATED"
    MEMBER_REJECTED = "MEMBER_REJECTED"
    MEMBER_REMOVED = "MEMBER_REMOVED"
    MEMBER_RESIGNED = "MEMBER_RESIGNED"
    ELIGIBILITY_OVERRIDDEN = "ELIGIBILITY_OVERRIDDEN"
    PETITION_RECORDED = "PETITION_RECORDED"
    LTED_WEIGHT_UPDATED = "LTED_WEIGHT_UPDATED"


def _snapshot(value: dict[str, Any] | None) -> dict[str, Any] | None:
    if value is None:
        return None
    return to_jsonable_python(value)


async def log_event(
    session: AsyncSession,
    *,
    actor_id: uuid.UUID,
    action: AuditAction,
    entity_type: str,
    entity_id: uuid.UUID,
    before: dict[str, Any] | None = None,
    after: dict[str, Any] | None = None,
    metadata: dict[str, Any] | None = None,
) -> AuditLog:
    """Add an audit log record to the session without committing.

    Args:
        session: The database session carrying the audited change.
        actor_id: The acting user's ID.
        action: The audited event.
        entity_type: Affected entity type (e.g. "Membership").
        entity_id: Affected entity ID.
        before: State before the change.
        after: State after the change.
        metadata: Additional context (meeting, override reason, source).

    Returns:
        The pending AuditLog record.
    """
    audit_log = AuditLog(
        actor_id=actor_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        before_value=_snapshot(before),
        after_value=_snapshot(after),
        event_metadata=_snapshot(metadata),
    )
    session.add(audit_log)
    return audit_log
