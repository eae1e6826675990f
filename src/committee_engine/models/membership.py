"""Membership model — a voter's seat-holding relationship with a committee+term.

Memberships are never hard-deleted; removal and resignation are status
transitions. A partial unique index allows at most one ACTIVE membership per
``(committee_id, term_id, seat_number)``, so two writers racing for the same
seat fail with an IntegrityError instead of double-booking.
"""

import enum
import uuid
from datetime import date, datetime

from sqlalchemy import Date, DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from committee_engine.models.base import Base, TimestampMixin, UUIDMixin


class MembershipStatus(enum.StrEnum):
    """Membership lifecycle status."""

    SUBMITTED = "SUBMITTED"
    ACTIVE = "ACTIVE"
    REJECTED = "REJECTED"
    REMOVED = "REMOVED"
    RESIGNED = "RESIGNED"
    PETITIONED_TIE = "PETITIONED_TIE"
    PETITIONED_LOST = "PETITIONED_LOST"


class MembershipType(enum.StrEnum):
    """How the member arrived on the committee."""

    APPOINTED = "APPOINTED"
    PETITIONED = "PETITIONED"


class Membership(Base, UUIDMixin, TimestampMixin):
    """Join between a Voter and a Committee for one term.

    Attributes:
        voter_id: FK to the voter.
        committee_id: FK to the committee.
        term_id: FK to the term.
        status: Lifecycle status (see MembershipStatus).
        membership_type: APPOINTED or PETITIONED.
        seat_number: Occupied seat; null unless the membership holds a seat.
        override_reason: Justification recorded when hard stops were bypassed.
    """

    __tablename__ = "committee_memberships"

    voter_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("voters.id"), nullable=False, index=True)
    committee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("committees.id"), nullable=False, index=True
    )
    term_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("terms.id"), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=MembershipStatus.SUBMITTED, index=True)
    membership_type: Mapped[str] = mapped_column(String(20), nullable=False, default=MembershipType.APPOINTED)
    seat_number: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Decision workflow
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    confirmed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    activated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejected_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejection_note: Mapped[str | None] = mapped_column(Text, nullable=True)
    override_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Removal / resignation
    removed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    resigned_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, index=True)
    removal_reason: Mapped[str | None] = mapped_column(String(50), nullable=True)
    removal_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    resignation_method: Mapped[str | None] = mapped_column(String(10), nullable=True)
    resignation_date_received: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Petition outcome
    petition_seat_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    petition_primary_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    petition_vote_count: Mapped[int | None] = mapped_column(Integer, nullable=True)

    __table_args__ = (
        UniqueConstraint("voter_id", "committee_id", "term_id", name="uq_membership_voter_committee_term"),
        Index(
            "uq_membership_active_seat",
            "committee_id",
            "term_id",
            "seat_number",
            unique=True,
            postgresql_where=text("status = 'ACTIVE'"),
            sqlite_where=text("status = 'ACTIVE'"),
        ),
        Index("ix_memberships_committee_term_status", "committee_id", "term_id", "status"),
    )
