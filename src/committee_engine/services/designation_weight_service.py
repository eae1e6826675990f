"""Designation weight service -- how much petition weight a committee contributes.

A seat contributes its weight iff it is petitioned, occupied by an ACTIVE
membership, and has a non-null weight. The occupant's membership type does
not matter: an APPOINTED member sitting in a petitioned seat contributes the
same as a PETITIONED one. Read-only.
"""

import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from committee_engine.core.exceptions import DataIntegrityError
from committee_engine.models.membership import Membership, MembershipStatus, MembershipType
from committee_engine.models.seat import Seat
from committee_engine.services.governance_service import get_active_term_id


@dataclass(frozen=True)
class SeatInput:
    """Seat fields the computation needs."""

    seat_number: int
    is_petitioned: bool
    weight: Decimal | None


@dataclass(frozen=True)
class OccupantInput:
    """ACTIVE membership fields the computation needs."""

    seat_number: int | None
    membership_type: str | None
    voter_id: uuid.UUID | None = None


@dataclass(frozen=True)
class SeatContribution:
    """Per-seat breakdown row."""

    seat_number: int
    is_petitioned: bool
    is_occupied: bool
    occupant_membership_type: MembershipType | None
    seat_weight: Decimal | None
    contributes: bool
    contribution_weight: Decimal
    occupant_voter_id: uuid.UUID | None = None


@dataclass(frozen=True)
class DesignationWeightResult:
    """Committee total plus per-seat breakdown.

    ``missing_weight_seat_numbers`` lists petitioned seats whose weight has not
    been set; they are excluded from the total rather than counted as zero.
    """

    total_weight: Decimal
    total_contributing_seats: int
    seats: list[SeatContribution] = field(default_factory=list)
    missing_weight_seat_numbers: list[int] = field(default_factory=list)


def _normalize_membership_type(value: str | None) -> MembershipType | None:
    try:
        return MembershipType(value) if value is not None else None
    except ValueError:
        return None


def compute_designation_weight(
    committee_id: uuid.UUID,
    term_id: uuid.UUID,
    seats: Sequence[SeatInput | Seat],
    active_memberships: Sequence[OccupantInput | Membership],
) -> DesignationWeightResult:
    """Compute designation weight from already-loaded seats and ACTIVE memberships.

    Args:
        committee_id: Committee UUID (for error messages).
        term_id: Term UUID (for error messages).
        seats: Seats of the committee+term, in display order.
        active_memberships: ACTIVE memberships of the same committee+term.

    Returns:
        The DesignationWeightResult.

    Raises:
        DataIntegrityError: If two ACTIVE memberships claim the same seat number.
    """
    occupants: dict[int, OccupantInput | Membership] = {}
    for membership in active_memberships:
        if membership.seat_number is None:
            continue
        if membership.seat_number in occupants:
            logger.error(
                f"Duplicate active memberships on seat {membership.seat_number} "
                f"for committee {committee_id} term {term_id}"
            )
            raise DataIntegrityError(committee_id, term_id, membership.seat_number)
        occupants[membership.seat_number] = membership

    total_weight = Decimal(0)
    total_contributing_seats = 0
    missing_weight_seat_numbers: list[int] = []
    contributions: list[SeatContribution] = []

    for seat in seats:
        occupant = occupants.get(seat.seat_number)
        is_occupied = occupant is not None
        occupant_type = _normalize_membership_type(occupant.membership_type) if occupant is not None else None
        seat_weight = Decimal(str(seat.weight)) if seat.weight is not None else None

        if seat.is_petitioned and seat_weight is None:
            missing_weight_seat_numbers.append(seat.seat_number)

        contributes = seat.is_petitioned and is_occupied and seat_weight is not None
        contribution_weight = seat_weight if contributes else Decimal(0)
        if contributes:
            total_weight += contribution_weight
            total_contributing_seats += 1

        contributions.append(
            SeatContribution(
                seat_number=seat.seat_number,
                is_petitioned=seat.is_petitioned,
                is_occupied=is_occupied,
                occupant_membership_type=occupant_type,
                seat_weight=seat_weight,
                contributes=contributes,
                contribution_weight=contribution_weight,
                occupant_voter_id=occupant.voter_id if occupant is not None else None,
            )
        )

    return DesignationWeightResult(
        total_weight=total_weight,
        total_contributing_seats=total_contributing_seats,
        seats=contributions,
        missing_weight_seat_numbers=missing_weight_seat_numbers,
    )


async def calculate_designation_weight(
    session: AsyncSession,
    committee_id: uuid.UUID,
    term_id: uuid.UUID | None = None,
) -> DesignationWeightResult:
    """Load seats and ACTIVE memberships for a committee+term and compute its weight.

    Args:
        session: Database session.
        committee_id: Committee UUID.
        term_id: Term UUID; defaults to the active term.

    Returns:
        The DesignationWeightResult.

    Raises:
        ConfigurationError: If term_id is omitted and no term is active.
        DataIntegrityError: If two ACTIVE memberships claim the same seat.
    """
    if term_id is None:
        term_id = await get_active_term_id(session)

    seats = (
        await session.execute(
            select(Seat)
            .where(Seat.committee_id == committee_id, Seat.term_id == term_id)
            .order_by(Seat.seat_number)
        )
    ).scalars().all()
    memberships = (
        await session.execute(
            select(Membership).where(
                Membership.committee_id == committee_id,
                Membership.term_id == term_id,
                Membership.status == MembershipStatus.ACTIVE,
                Membership.seat_number.is_not(None),
            )
        )
    ).scalars().all()

    result = compute_designation_weight(committee_id, term_id, seats, memberships)
    logger.info(
        f"Designation weight for committee {committee_id} term {term_id}: "
        f"{result.total_weight} from {result.total_contributing_seats} seats"
    )
    return result
