"""Seat model — a pre-materialized, numbered slot within a committee+term.

Seat numbers form the dense range ``1..max_seats_per_lted`` once materialized.
``weight`` stays null until the committee's LTED weight is set.
"""

import uuid
from decimal import Decimal

from sqlalchemy import Boolean, ForeignKey, Integer, Numeric, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from committee_engine.models.base import Base, TimestampMixin, UUIDMixin


class Seat(Base, UUIDMixin, TimestampMixin):
    """A committee seat."""

    __tablename__ = "seats"

    committee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("committees.id"), nullable=False, index=True
    )
    term_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("terms.id"), nullable=False)
    seat_number: Mapped[int] = mapped_column(Integer, nullable=False)
    is_petitioned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    weight: Mapped[Decimal | None] = mapped_column(Numeric(14, 8), nullable=True)

    __table_args__ = (UniqueConstraint("committee_id", "term_id", "seat_number", name="uq_seat_committee_term_number"),)
