"""Membership workflows -- submit, add, decide, remove, resign, petition outcomes, LTED weight.

Each public function is one unit of work: it evaluates eligibility, claims a
seat when needed, writes the membership change and its audit entries, then
commits once. Any failure rolls the whole unit back. Eligibility is evaluated
again at decision time because active counts can change between submission
and confirmation.

A lost seat race surfaces as SeatClaimConflictError. ``claim_with_retry``
re-runs the whole unit in a fresh session.
"""

import enum
import uuid
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import TypeVar

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from committee_engine.core.exceptions import (
    IneligibleError,
    MembershipStateError,
    NotFoundError,
    SeatCapacityError,
    SeatClaimConflictError,
)
from committee_engine.models.committee import Committee
from committee_engine.models.governance_config import GovernanceConfig
from committee_engine.models.membership import Membership, MembershipStatus, MembershipType
from committee_engine.models.seat import Seat
from committee_engine.models.voter import Voter
from committee_engine.services.audit_service import AuditAction, log_event
from committee_engine.services.eligibility_service import (
    DEFAULT_RECENT_RESIGNATION_DAYS,
    EligibilityOptions,
    EligibilityResult,
    IneligibilityReason,
    resolve_override_result,
    validate_eligibility,
)
from committee_engine.services.governance_service import get_governance_config
from committee_engine.services.seat_service import (
    assign_next_available_seat,
    ensure_seats_exist,
    recompute_seat_weights,
)

T = TypeVar("T")

_ENTITY = "Membership"


class Decision(enum.StrEnum):
    """Outcome of a committee meeting vote on a submission."""

    CONFIRM = "confirm"
    REJECT = "reject"


class PetitionOutcome(enum.StrEnum):
    """Primary election outcome for one candidate."""

    WON_PRIMARY = "WON_PRIMARY"
    UNOPPOSED = "UNOPPOSED"
    LOST_PRIMARY = "LOST_PRIMARY"
    TIE = "TIE"


_OUTCOME_STATUS: dict[PetitionOutcome, MembershipStatus] = {
    PetitionOutcome.WON_PRIMARY: MembershipStatus.ACTIVE,
    PetitionOutcome.UNOPPOSED: MembershipStatus.ACTIVE,
    PetitionOutcome.LOST_PRIMARY: MembershipStatus.PETITIONED_LOST,
    PetitionOutcome.TIE: MembershipStatus.PETITIONED_TIE,
}


@dataclass(frozen=True)
class MembershipDecision:
    """One confirm/reject request in a bulk decision."""

    membership_id: uuid.UUID
    decision: Decision
    rejection_note: str | None = None


@dataclass(frozen=True)
class DecisionResult:
    """Per-item result of a bulk decision."""

    membership_id: uuid.UUID
    decision: Decision
    success: bool
    error: str | None = None
    seat_number: int | None = None


@dataclass(frozen=True)
class PetitionCandidate:
    """One candidate's primary result for a seat."""

    voter_registration_number: str
    outcome: PetitionOutcome
    vote_count: int | None = None


def _now() -> datetime:
    return datetime.now(UTC)


def _membership_snapshot(membership: Membership) -> dict:
    return {
        "status": membership.status,
        "membership_type": membership.membership_type,
        "seat_number": membership.seat_number,
    }


@asynccontextmanager
async def _unit_of_work(session: AsyncSession, description: str) -> AsyncIterator[None]:
    """Commit on success, roll back on any failure, translate unique-index violations."""
    try:
        yield
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        logger.warning(f"{description}: concurrent write conflict, rolled back")
        msg = f"{description}: conflicting concurrent write (seat or membership already claimed)"
        raise SeatClaimConflictError(msg) from e
    except BaseException:
        await session.rollback()
        raise


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


async def _get_committee(session: AsyncSession, committee_id: uuid.UUID) -> Committee:
    committee = (
        await session.execute(select(Committee).where(Committee.id == committee_id))
    ).scalar_one_or_none()
    if committee is None:
        msg = f"Committee {committee_id} not found"
        raise NotFoundError(msg)
    return committee


async def _get_voter(session: AsyncSession, voter_registration_number: str) -> Voter:
    voter = (
        await session.execute(select(Voter).where(Voter.voter_registration_number == voter_registration_number))
    ).scalar_one_or_none()
    if voter is None:
        msg = f"Voter {voter_registration_number} not found"
        raise NotFoundError(msg)
    return voter


async def _find_membership(
    session: AsyncSession, voter_id: uuid.UUID, committee_id: uuid.UUID, term_id: uuid.UUID
) -> Membership | None:
    result = await session.execute(
        select(Membership).where(
            Membership.voter_id == voter_id,
            Membership.committee_id == committee_id,
            Membership.term_id == term_id,
        )
    )
    return result.scalar_one_or_none()


async def _require_eligible(
    session: AsyncSession,
    voter_registration_number: str,
    committee: Committee,
    options: EligibilityOptions | None,
    config: GovernanceConfig,
    recent_resignation_days: int,
) -> EligibilityResult:
    result = await validate_eligibility(
        session,
        voter_registration_number,
        committee.id,
        committee.term_id,
        options,
        config=config,
        recent_resignation_days=recent_resignation_days,
    )
    if not result.eligible:
        raise IneligibleError(result)
    return result


async def _log_override(
    session: AsyncSession,
    membership: Membership,
    eligibility: EligibilityResult,
    options: EligibilityOptions | None,
    actor_id: uuid.UUID,
) -> None:
    if not eligibility.bypassed_reasons:
        return
    await log_event(
        session,
        actor_id=actor_id,
        action=AuditAction.ELIGIBILITY_OVERRIDDEN,
        entity_type=_ENTITY,
        entity_id=membership.id,
        metadata={
            "bypassed_reasons": [str(r) for r in eligibility.bypassed_reasons],
            "override_reason": options.override_reason if options else None,
        },
    )


async def _open_membership(
    session: AsyncSession,
    voter: Voter,
    committee: Committee,
) -> tuple[Membership, dict | None]:
    """Return a new or reusable membership row plus its prior snapshot.

    A previous REJECTED, REMOVED, RESIGNED or lost/tied petition row for the
    same committee+term is reused as an appointment; SUBMITTED and ACTIVE rows
    are refused. Only decision-cycle and petition fields are reset; removal and
    resignation history stays.
    """
    existing = await _find_membership(session, voter.id, committee.id, committee.term_id)
    if existing is None:
        membership = Membership(
            id=uuid.uuid4(),
            voter_id=voter.id,
            committee_id=committee.id,
            term_id=committee.term_id,
            membership_type=MembershipType.APPOINTED,
        )
        session.add(membership)
        return membership, None
    if existing.status in (MembershipStatus.SUBMITTED, MembershipStatus.ACTIVE):
        msg = f"Voter {voter.voter_registration_number} already has a {existing.status} membership in this committee"
        raise MembershipStateError(msg)
    before = _membership_snapshot(existing)
    existing.seat_number = None
    existing.rejected_at = None
    existing.rejection_note = None
    existing.membership_type = MembershipType.APPOINTED
    existing.petition_seat_number = None
    existing.petition_primary_date = None
    existing.petition_vote_count = None
    return existing, before


# ---------------------------------------------------------------------------
# Submission and direct add
# ---------------------------------------------------------------------------


async def submit_membership(
    session: AsyncSession,
    *,
    voter_registration_number: str,
    committee_id: uuid.UUID,
    actor_id: uuid.UUID,
    options: EligibilityOptions | None = None,
    config: GovernanceConfig | None = None,
    recent_resignation_days: int = DEFAULT_RECENT_RESIGNATION_DAYS,
) -> tuple[Membership, EligibilityResult]:
    """Create (or resubmit) a SUBMITTED membership awaiting a committee decision.

    Raises:
        NotFoundError: If the committee or voter does not exist.
        IneligibleError: If eligibility fails and is not overridden.
        MembershipStateError: If the voter already has a pending or active membership here.
    """
    async with _unit_of_work(session, "Submit membership"):
        committee = await _get_committee(session, committee_id)
        if config is None:
            config = await get_governance_config(session)
        eligibility = await _require_eligible(
            session, voter_registration_number, committee, options, config, recent_resignation_days
        )
        voter = await _get_voter(session, voter_registration_number)
        membership, before = await _open_membership(session, voter, committee)

        membership.status = MembershipStatus.SUBMITTED
        membership.submitted_at = _now()
        membership.override_reason = options.override_reason if eligibility.bypassed_reasons and options else None
        await session.flush()

        await log_event(
            session,
            actor_id=actor_id,
            action=AuditAction.MEMBER_SUBMITTED,
            entity_type=_ENTITY,
            entity_id=membership.id,
            before=before,
            after=_membership_snapshot(membership),
            metadata={"warnings": [str(w.code) for w in eligibility.warnings]},
        )
        await _log_override(session, membership, eligibility, options, actor_id)

    logger.info(f"Submitted membership {membership.id} for voter {voter_registration_number}")
    return membership, eligibility


async def add_member(
    session: AsyncSession,
    *,
    voter_registration_number: str,
    committee_id: uuid.UUID,
    actor_id: uuid.UUID,
    options: EligibilityOptions | None = None,
    config: GovernanceConfig | None = None,
    recent_resignation_days: int = DEFAULT_RECENT_RESIGNATION_DAYS,
) -> tuple[Membership, EligibilityResult]:
    """Directly activate a voter on the committee in the lowest free seat.

    Raises:
        NotFoundError: If the committee or voter does not exist.
        IneligibleError: If eligibility fails and is not overridden.
        MembershipStateError: If the voter already has a pending or active membership here.
        SeatCapacityError: If every seat is occupied.
        SeatClaimConflictError: If a concurrent writer claimed the seat first.
    """
    async with _unit_of_work(session, "Add member"):
        committee = await _get_committee(session, committee_id)
        if config is None:
            config = await get_governance_config(session)
        eligibility = await _require_eligible(
            session, voter_registration_number, committee, options, config, recent_resignation_days
        )
        voter = await _get_voter(session, voter_registration_number)
        membership, before = await _open_membership(session, voter, committee)

        await ensure_seats_exist(session, committee.id, committee.term_id, config=config)
        seat_number = await assign_next_available_seat(session, committee.id, committee.term_id, config=config)

        now = _now()
        membership.status = MembershipStatus.ACTIVE
        membership.seat_number = seat_number
        membership.confirmed_at = now
        membership.activated_at = now
        membership.override_reason = options.override_reason if eligibility.bypassed_reasons and options else None
        await session.flush()

        await log_event(
            session,
            actor_id=actor_id,
            action=AuditAction.MEMBER_ACTIVATED,
            entity_type=_ENTITY,
            entity_id=membership.id,
            before=before,
            after=_membership_snapshot(membership),
            metadata={"source": "manual", "warnings": [str(w.code) for w in eligibility.warnings]},
        )
        await _log_override(session, membership, eligibility, options, actor_id)

    logger.info(f"Activated voter {voter_registration_number} on committee {committee_id} seat {seat_number}")
    return membership, eligibility


# ---------------------------------------------------------------------------
# Decisions
# ---------------------------------------------------------------------------


async def _confirm(
    session: AsyncSession,
    membership: Membership,
    *,
    actor_id: uuid.UUID,
    meeting_id: uuid.UUID | None,
    config: GovernanceConfig,
    recent_resignation_days: int,
) -> DecisionResult:
    voter = (await session.execute(select(Voter).where(Voter.id == membership.voter_id))).scalar_one()
    committee = await _get_committee(session, membership.committee_id)
    options = (
        EligibilityOptions(force_add=True, override_reason=membership.override_reason)
        if membership.override_reason
        else None
    )
    eligibility = await validate_eligibility(
        session,
        voter.voter_registration_number,
        committee.id,
        committee.term_id,
        options,
        config=config,
        recent_resignation_days=recent_resignation_days,
    )
    if not eligibility.eligible:
        reasons = ", ".join(eligibility.hard_stops) or eligibility.validation_error
        return DecisionResult(membership.id, Decision.CONFIRM, success=False, error=f"Ineligible: {reasons}")

    await ensure_seats_exist(session, committee.id, committee.term_id, config=config)
    try:
        seat_number = await assign_next_available_seat(session, committee.id, committee.term_id, config=config)
    except SeatCapacityError:
        return DecisionResult(
            membership.id,
            Decision.CONFIRM,
            success=False,
            error="No available seats: committee is at capacity",
        )

    before = _membership_snapshot(membership)
    now = _now()
    membership.status = MembershipStatus.ACTIVE
    membership.seat_number = seat_number
    membership.confirmed_at = now
    membership.activated_at = now
    membership.membership_type = membership.membership_type or MembershipType.APPOINTED
    await session.flush()

    after = _membership_snapshot(membership)
    for action in (AuditAction.MEMBER_CONFIRMED, AuditAction.MEMBER_ACTIVATED):
        await log_event(
            session,
            actor_id=actor_id,
            action=action,
            entity_type=_ENTITY,
            entity_id=membership.id,
            before=before,
            after=after,
            metadata={"meeting_id": meeting_id},
        )
    return DecisionResult(membership.id, Decision.CONFIRM, success=True, seat_number=seat_number)


async def _reject(
    session: AsyncSession,
    membership: Membership,
    rejection_note: str | None,
    *,
    actor_id: uuid.UUID,
    meeting_id: uuid.UUID | None,
) -> DecisionResult:
    before = _membership_snapshot(membership)
    membership.status = MembershipStatus.REJECTED
    membership.rejected_at = _now()
    membership.rejection_note = rejection_note
    await log_event(
        session,
        actor_id=actor_id,
        action=AuditAction.MEMBER_REJECTED,
        entity_type=_ENTITY,
        entity_id=membership.id,
        before=before,
        after={**_membership_snapshot(membership), "rejection_note": rejection_note},
        metadata={"meeting_id": meeting_id},
    )
    return DecisionResult(membership.id, Decision.REJECT, success=True)


async def decide_memberships(
    session: AsyncSession,
    decisions: list[MembershipDecision],
    *,
    actor_id: uuid.UUID,
    meeting_id: uuid.UUID | None = None,
    config: GovernanceConfig | None = None,
    recent_resignation_days: int = DEFAULT_RECENT_RESIGNATION_DAYS,
) -> list[DecisionResult]:
    """Confirm or reject SUBMITTED memberships in one transaction.

    Items that cannot be applied (missing, not SUBMITTED, ineligible at decision
    time, no free seat) are reported as failures without aborting the batch.

    Args:
        session: Database session.
        decisions: Confirm/reject requests, applied in order.
        actor_id: Acting user.
        meeting_id: Meeting at which the decisions were taken.
        config: Governance config; read from the database when omitted.
        recent_resignation_days: Window for the RECENT_RESIGNATION warning.

    Returns:
        One DecisionResult per request, in request order.
    """
    results: list[DecisionResult] = []
    async with _unit_of_work(session, "Membership decisions"):
        if config is None:
            config = await get_governance_config(session)
        for item in decisions:
            membership = (
                await session.execute(select(Membership).where(Membership.id == item.membership_id))
            ).scalar_one_or_none()
            if membership is None:
                results.append(DecisionResult(item.membership_id, item.decision, False, "Membership not found"))
                continue
            if membership.status != MembershipStatus.SUBMITTED:
                results.append(
                    DecisionResult(
                        item.membership_id,
                        item.decision,
                        False,
                        f"Membership status is {membership.status}, expected SUBMITTED",
                    )
                )
                continue

            if item.decision == Decision.CONFIRM:
                result = await _confirm(
                    session,
                    membership,
                    actor_id=actor_id,
                    meeting_id=meeting_id,
                    config=config,
                    recent_resignation_days=recent_resignation_days,
                )
            else:
                result = await _reject(
                    session, membership, item.rejection_note, actor_id=actor_id, meeting_id=meeting_id
                )
            results.append(result)

    succeeded = sum(1 for r in results if r.success)
    logger.info(f"Applied {succeeded}/{len(results)} membership decisions")
    return results


# ---------------------------------------------------------------------------
# Removal and resignation
# ---------------------------------------------------------------------------


async def _get_active_membership(
    session: AsyncSession, committee: Committee, voter_registration_number: str
) -> Membership:
    voter = await _get_voter(session, voter_registration_number)
    membership = await _find_membership(session, voter.id, committee.id, committee.term_id)
    if membership is None:
        msg = "Member not found in this committee"
        raise NotFoundError(msg)
    if membership.status != MembershipStatus.ACTIVE:
        msg = "Member does not have an active membership in this committee"
        raise MembershipStateError(msg)
    return membership


async def remove_member(
    session: AsyncSession,
    *,
    committee_id: uuid.UUID,
    voter_registration_number: str,
    actor_id: uuid.UUID,
    removal_reason: str,
    removal_notes: str | None = None,
) -> Membership:
    """Transition an ACTIVE membership to REMOVED.

    Raises:
        NotFoundError: If the committee, voter or membership does not exist.
        MembershipStateError: If the membership is not ACTIVE.
    """
    notes = removal_notes.strip() if removal_notes else None
    async with _unit_of_work(session, "Remove member"):
        committee = await _get_committee(session, committee_id)
        membership = await _get_active_membership(session, committee, voter_registration_number)
        before = _membership_snapshot(membership)
        membership.status = MembershipStatus.REMOVED
        membership.removed_at = _now()
        membership.removal_reason = removal_reason
        membership.removal_notes = notes or None
        await log_event(
            session,
            actor_id=actor_id,
            action=AuditAction.MEMBER_REMOVED,
            entity_type=_ENTITY,
            entity_id=membership.id,
            before=before,
            after={"status": MembershipStatus.REMOVED, "removal_reason": removal_reason, "removal_notes": notes},
            metadata={"source": "manual"},
        )
    logger.info(f"Removed voter {voter_registration_number} from committee {committee_id}")
    return membership


async def resign_member(
    session: AsyncSession,
    *,
    committee_id: uuid.UUID,
    voter_registration_number: str,
    actor_id: uuid.UUID,
    resignation_reason: str,
    resignation_method: str,
    resignation_date_received: date,
    removal_notes: str | None = None,
) -> Membership:
    """Transition an ACTIVE membership to RESIGNED.

    Raises:
        NotFoundError: If the committee, voter or membership does not exist.
        MembershipStateError: If the membership is not ACTIVE.
    """
    notes = removal_notes.strip() if removal_notes else None
    async with _unit_of_work(session, "Resign member"):
        committee = await _get_committee(session, committee_id)
        membership = await _get_active_membership(session, committee, voter_registration_number)
        before = _membership_snapshot(membership)
        membership.status = MembershipStatus.RESIGNED
        membership.resigned_at = _now()
        membership.resignation_date_received = resignation_date_received
        membership.resignation_method = resignation_method
        membership.removal_reason = resignation_reason
        membership.removal_notes = notes or None
        await log_event(
            session,
            actor_id=actor_id,
            action=AuditAction.MEMBER_RESIGNED,
            entity_type=_ENTITY,
            entity_id=membership.id,
            before=before,
            after={
                "status": MembershipStatus.RESIGNED,
                "resignation_method": resignation_method,
                "resignation_date_received": resignation_date_received,
                "removal_reason": resignation_reason,
            },
        )
    logger.info(f"Recorded resignation of voter {voter_registration_number} from committee {committee_id}")
    return membership


# ---------------------------------------------------------------------------
# Petition outcomes
# ---------------------------------------------------------------------------


async def record_petition_outcome(
    session: AsyncSession,
    *,
    committee_id: uuid.UUID,
    seat_number: int,
    primary_date: date,
    candidates: list[PetitionCandidate],
    actor_id: uuid.UUID,
    term_id: uuid.UUID | None = None,
    options: EligibilityOptions | None = None,
    config: GovernanceConfig | None = None,
    recent_resignation_days: int = DEFAULT_RECENT_RESIGNATION_DAYS,
) -> list[Membership]:
    """Mark a seat petitioned and apply each candidate's primary outcome.

    Winners (WON_PRIMARY / UNOPPOSED) become ACTIVE on the named seat; losers
    become PETITIONED_LOST and ties PETITIONED_TIE, both without a seat. The
    winner is checked for eligibility, except for CAPACITY: the seat is named
    by the election result rather than allocated.

    Raises:
        ValueError: If more than one candidate is marked as a winner.
        NotFoundError: If the committee, seat or a candidate voter does not exist.
        MembershipStateError: If the seat is held by someone who is not a candidate.
        IneligibleError: If the winner fails eligibility and is not overridden.
    """
    winners = [c for c in candidates if _OUTCOME_STATUS[c.outcome] == MembershipStatus.ACTIVE]
    if len(winners) > 1:
        msg = "At most one candidate may win a seat"
        raise ValueError(msg)

    updated: list[Membership] = []
    async with _unit_of_work(session, "Record petition outcome"):
        committee = await _get_committee(session, committee_id)
        term_id = term_id or committee.term_id
        if config is None:
            config = await get_governance_config(session)

        seat = (
            await session.execute(
                select(Seat).where(
                    Seat.committee_id == committee_id,
                    Seat.term_id == term_id,
                    Seat.seat_number == seat_number,
                )
            )
        ).scalar_one_or_none()
        if seat is None:
            msg = f"Seat {seat_number} not found for this committee and term"
            raise NotFoundError(msg)

        if winners:
            await _check_petition_winner(
                session,
                committee,
                term_id,
                seat_number,
                winners[0],
                candidates,
                options,
                config,
                recent_resignation_days,
            )

        seat.is_petitioned = True

        # Losers first so a sitting candidate vacates the seat before the winner claims it.
        ordered = sorted(candidates, key=lambda c: _OUTCOME_STATUS[c.outcome] == MembershipStatus.ACTIVE)
        for candidate in ordered:
            membership = await _apply_petition_outcome(
                session, committee, term_id, seat_number, primary_date, candidate, actor_id
            )
            updated.append(membership)

        await log_event(
            session,
            actor_id=actor_id,
            action=AuditAction.PETITION_RECORDED,
            entity_type="Seat",
            entity_id=seat.id,
            metadata={
                "committee_id": committee_id,
                "term_id": term_id,
                "seat_number": seat_number,
                "primary_date": primary_date,
                "candidate_outcomes": [
                    {
                        "voter_registration_number": c.voter_registration_number,
                        "outcome": c.outcome,
                        "vote_count": c.vote_count,
                    }
                    for c in candidates
                ],
            },
        )
    logger.info(f"Recorded petition outcome for committee {committee_id} seat {seat_number}")
    return updated


async def _check_petition_winner(
    session: AsyncSession,
    committee: Committee,
    term_id: uuid.UUID,
    seat_number: int,
    winner: PetitionCandidate,
    candidates: list[PetitionCandidate],
    options: EligibilityOptions | None,
    config: GovernanceConfig,
    recent_resignation_days: int,
) -> None:
    holder = (
        await session.execute(
            select(Voter.voter_registration_number)
            .join(Membership, Membership.voter_id == Voter.id)
            .where(
                Membership.committee_id == committee.id,
                Membership.term_id == term_id,
                Membership.status == MembershipStatus.ACTIVE,
                Membership.seat_number == seat_number,
            )
        )
    ).scalar_one_or_none()
    candidate_ids = {c.voter_registration_number for c in candidates}
    if holder is not None and holder not in candidate_ids:
        msg = "Seat is already occupied by another member; resolve before recording petition outcome"
        raise MembershipStateError(msg)

    evaluated = await validate_eligibility(
        session,
        winner.voter_registration_number,
        committee.id,
        term_id,
        config=config,
        recent_resignation_days=recent_resignation_days,
    )
    hard_stops = [r for r in evaluated.hard_stops if r != IneligibilityReason.CAPACITY]
    result = resolve_override_result(
        hard_stops, evaluated.warnings, config.non_overridable_ineligibility_reasons or [], options
    )
    if not result.eligible:
        raise IneligibleError(result)


async def _apply_petition_outcome(
    session: AsyncSession,
    committee: Committee,
    term_id: uuid.UUID,
    seat_number: int,
    primary_date: date,
    candidate: PetitionCandidate,
    actor_id: uuid.UUID,
) -> Membership:
    voter = await _get_voter(session, candidate.voter_registration_number)
    status = _OUTCOME_STATUS[candidate.outcome]
    is_winner = status == MembershipStatus.ACTIVE

    membership = await _find_membership(session, voter.id, committee.id, term_id)
    before = _membership_snapshot(membership) if membership is not None else None
    if membership is None:
        membership = Membership(id=uuid.uuid4(), voter_id=voter.id, committee_id=committee.id, term_id=term_id)
        session.add(membership)

    membership.membership_type = MembershipType.PETITIONED
    membership.petition_seat_number = seat_number
    membership.petition_primary_date = primary_date
    membership.petition_vote_count = candidate.vote_count
    membership.status = status
    membership.seat_number = seat_number if is_winner else None
    membership.activated_at = _now() if is_winner else None
    await session.flush()

    if is_winner and (before is None or before["status"] != MembershipStatus.ACTIVE):
        await log_event(
            session,
            actor_id=actor_id,
            action=AuditAction.MEMBER_ACTIVATED,
            entity_type=_ENTITY,
            entity_id=membership.id,
            before=before,
            after=_membership_snapshot(membership),
            metadata={"source": "petition_outcome"},
        )
    return membership


# ---------------------------------------------------------------------------
# LTED weight
# ---------------------------------------------------------------------------


async def update_lted_weight(
    session: AsyncSession,
    committee_id: uuid.UUID,
    lted_weight: Decimal | None,
    *,
    actor_id: uuid.UUID,
    config: GovernanceConfig | None = None,
) -> Committee:
    """Set a committee's LTED weight and recompute its seat weights atomically.

    Raises:
        NotFoundError: If the committee does not exist.
    """
    async with _unit_of_work(session, "Update LTED weight"):
        committee = await _get_committee(session, committee_id)
        before = committee.lted_weight
        committee.lted_weight = lted_weight
        await session.flush()
        await recompute_seat_weights(session, committee_id, config=config)
        await log_event(
            session,
            actor_id=actor_id,
            action=AuditAction.LTED_WEIGHT_UPDATED,
            entity_type="Committee",
            entity_id=committee_id,
            before={"lted_weight": before},
            after={"lted_weight": lted_weight},
        )
    logger.info(f"Updated LTED weight for committee {committee_id}: {before} -> {lted_weight}")
    return committee


# ---------------------------------------------------------------------------
# Retry wrapper
# ---------------------------------------------------------------------------


async def claim_with_retry(
    session_factory: async_sessionmaker[AsyncSession],
    operation: Callable[[AsyncSession], Awaitable[T]],
    *,
    attempts: int = 3,
) -> T:
    """Run a seat-claiming unit of work, retrying in a fresh session after a lost race.

    Args:
        session_factory: Factory for new sessions.
        operation: Coroutine function performing one full unit of work.
        attempts: Maximum number of tries.

    Returns:
        Whatever *operation* returns.

    Raises:
        SeatClaimConflictError: If every attempt lost the race.
    """
    for attempt in range(1, attempts + 1):
        async with session_factory() as session:
            try:
                return await operation(session)
            except SeatClaimConflictError:
                if attempt == attempts:
                    raise
                logger.warning(f"Seat claim conflict, retrying ({attempt}/{attempts})")
    msg = "attempts must be at least 1"
    raise ValueError(msg)
