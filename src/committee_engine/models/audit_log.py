"""AuditLog model for immutable membership change tracking."""

import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, String, func
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from committee_engine.models.base import Base, UUIDMixin

_JSON = JSON().with_variant(JSONB(), "postgresql")


class AuditLog(Base, UUIDMixin):
    """Immutable before/after record of a membership or committee change. Write-only."""

    __tablename__ = "audit_logs"

    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )
    actor_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False, index=True)
    action: Mapped[str] = mapped_column(String(40), nullable=False, index=True)
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    entity_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False, index=True)
    before_value: Mapped[dict | None] = mapped_column(_JSON, nullable=True)
    after_value: Mapped[dict | None] = mapped_column(_JSON, nullable=True)
    event_metadata: Mapped[dict | None] = mapped_column(_JSON, nullable=True)
