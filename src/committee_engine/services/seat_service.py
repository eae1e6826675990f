"""Seat service -- seat materialization, seat assignment and seat-weight recompute.

None of these functions commit. Seat assignment is read-then-decide: the
caller must run it and the membership write that claims the seat in one
transaction, and rely on the ``uq_membership_active_seat`` index to reject a
concurrent claim of the same seat.
"""

import uuid
from collections.abc import Iterable
from decimal import Decimal

from loguru import logger
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from committee_engine.core.exceptions import SeatCapacityError
from committee_engine.models.committee import Committee
from committee_engine.models.governance_config import GovernanceConfig
from committee_engine.models.membership import Membership, MembershipStatus
from committee_engine.models.seat import Seat
from committee_engine.services.governance_service import get_governance_config

# Matches the scale of the Numeric(14, 8) weight columns.
WEIGHT_QUANTUM = Decimal("0.00000001")


async def _resolve_config(session: AsyncSession, config: GovernanceConfig | None) -> GovernanceConfig:
    if config is not None:
        return config
    return await get_governance_config(session)


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


def next_available_seat_number(occupied: Iterable[int | None], max_seats: int) -> int | None:
    """Return the smallest seat number in ``1..max_seats`` not in *occupied*.

    Returns:
        The seat number, or None when every seat is taken.
    """
    taken = {n for n in occupied if n is not None}
    for seat_number in range(1, max_seats + 1):
        if seat_number not in taken:
            return seat_number
    return None


def compute_seat_weight(lted_weight: Decimal | int | str | None, max_seats: int) -> Decimal | None:
    """Split an LTED weight evenly across *max_seats* seats using decimal arithmetic.

    Args:
        lted_weight: Committee weight, or None when not yet set.
        max_seats: Seat cap from the governance config.

    Returns:
        Per-seat weight quantized to the column scale, or None.
    """
    if lted_weight is None:
        return None
    return (Decimal(str(lted_weight)) / Decimal(max_seats)).quantize(WEIGHT_QUANTUM)


# ---------------------------------------------------------------------------
# Database operations
# ---------------------------------------------------------------------------


async def ensure_seats_exist(
    session: AsyncSession,
    committee_id: uuid.UUID,
    term_id: uuid.UUID,
    *,
    config: GovernanceConfig | None = None,
) -> int:
    """Create any missing seat rows for a committee+term up to the seat cap.

    Idempotent: when the committee already has ``max_seats_per_lted`` seats this
    issues one count query and creates nothing.

    Args:
        session: Database session (transaction owned by the caller).
        committee_id: Committee UUID.
        term_id: Term UUID.
        config: Governance config; read from the database when omitted.

    Returns:
        Number of seat rows created.
    """
    config = await _resolve_config(session, config)
    max_seats = config.max_seats_per_lted

    scope = (Seat.committee_id == committee_id, Seat.term_id == term_id)
    existing_count = (await session.execute(select(func.count(Seat.id)).where(*scope))).scalar_one()
    if existing_count >= max_seats:
        return 0

    result = await session.execute(select(Seat.seat_number).where(*scope))
    existing_numbers = set(result.scalars().all())

    new_seats = [
        Seat(
            committee_id=committee_id,
            term_id=term_id,
            seat_number=seat_number,
            is_petitioned=False,
            weight=None,
        )
        for seat_number in range(1, max_seats + 1)
        if seat_number not in existing_numbers
    ]
    if new_seats:
        session.add_all(new_seats)
        await session.flush()
        logger.info(f"Created {len(new_seats)} seats for committee {committee_id} term {term_id}")
    return len(new_seats)


async def assign_next_available_seat(
    session: AsyncSession,
    committee_id: uuid.UUID,
    term_id: uuid.UUID,
    *,
    config: GovernanceConfig | None = None,
) -> int:
    """Return the lowest seat number not held by an ACTIVE membership.

    Args:
        session: Database session (transaction owned by the caller).
        committee_id: Committee UUID.
        term_id: Term UUID.
        config: Governance config; read from the database when omitted.

    Returns:
        A seat number in ``1..max_seats_per_lted``.

    Raises:
        SeatCapacityError: If every seat is occupied.
    """
    config = await _resolve_config(session, config)
    max_seats = config.max_seats_per_lted

    result = await session.execute(
        select(Membership.seat_number).where(
            Membership.committee_id == committee_id,
            Membership.term_id == term_id,
            Membership.status == MembershipStatus.ACTIVE,
            Membership.seat_number.is_not(None),
        )
    )
    seat_number = next_available_seat_number(result.scalars().all(), max_seats)
    if seat_number is None:
        logger.warning(f"No free seat for committee {committee_id} term {term_id} (cap {max_seats})")
        raise SeatCapacityError(committee_id, term_id, max_seats)
    return seat_number


async def recompute_seat_weights(
    session: AsyncSession,
    committee_id: uuid.UUID,
    *,
    config: GovernanceConfig | None = None,
) -> None:
    """Set every seat's weight to ``lted_weight / max_seats_per_lted`` (or null).

    A missing committee is a no-op; callers validate existence upstream.

    Args:
        session: Database session (transaction owned by the caller).
        committee_id: Committee UUID.
        config: Governance config; read from the database when omitted.
    """
    committee = (
        await session.execute(select(Committee).where(Committee.id == committee_id))
    ).scalar_one_or_none()
    if committee is None:
        logger.debug(f"Skipping seat weight recompute: committee {committee_id} not found")
        return

    config = await _resolve_config(session, config)
    seat_weight = compute_seat_weight(committee.lted_weight, config.max_seats_per_lted)

    await session.execute(
        update(Seat).where(Seat.committee_id == committee_id).values(weight=seat_weight),
        execution_options={"synchronize_session": "fetch"},
    )
    await session.flush()
    logger.info(f"Recomputed seat weights for committee {committee_id}: {seat_weight}")
