"""Eligibility service -- hard stops, advisory warnings and the override protocol.

``validate_eligibility`` is run before every membership-mutating workflow
(submit, direct add, confirm) and again at decision time, since active-member
counts can change between request and decision. It is total over its inputs:
a missing voter yields ``NOT_REGISTERED`` rather than an exception, and a
malformed override yields ``validation_error`` inside the result.
"""

import enum
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from committee_engine.models.committee import Committee, LtedCrosswalk
from committee_engine.models.governance_config import GovernanceConfig
from committee_engine.models.membership import Membership, MembershipStatus
from committee_engine.models.voter import Voter
from committee_engine.services.governance_service import get_governance_config

DEFAULT_RECENT_RESIGNATION_DAYS = 90


class IneligibilityReason(enum.StrEnum):
    """Hard-stop codes, in evaluation order."""

    NOT_REGISTERED = "NOT_REGISTERED"
    PARTY_MISMATCH = "PARTY_MISMATCH"
    ASSEMBLY_DISTRICT_MISMATCH = "ASSEMBLY_DISTRICT_MISMATCH"
    CAPACITY = "CAPACITY"
    ALREADY_IN_ANOTHER_COMMITTEE = "ALREADY_IN_ANOTHER_COMMITTEE"


class EligibilityWarningCode(enum.StrEnum):
    """Non-blocking warning codes."""

    POSSIBLY_INACTIVE = "POSSIBLY_INACTIVE"
    RECENT_RESIGNATION = "RECENT_RESIGNATION"
    PENDING_IN_ANOTHER_COMMITTEE = "PENDING_IN_ANOTHER_COMMITTEE"


INELIGIBILITY_REASON_MESSAGES: dict[str, str] = {
    IneligibilityReason.NOT_REGISTERED: "Voter record not found.",
    IneligibilityReason.PARTY_MISMATCH: "Party does not match the required party for this committee.",
    IneligibilityReason.ASSEMBLY_DISTRICT_MISMATCH: "Assembly district does not match the committee's district.",
    IneligibilityReason.CAPACITY: "Committee is at capacity (no open seats).",
    IneligibilityReason.ALREADY_IN_ANOTHER_COMMITTEE: "Member is already active in another committee for this term.",
}

GENERIC_INELIGIBILITY_MESSAGE = "Submission failed eligibility checks."

OVERRIDE_REASON_REQUIRED = "override_reason is required when force_add is true and eligibility checks are bypassed"


@dataclass(frozen=True)
class EligibilityWarning:
    """An advisory note that never affects ``eligible``."""

    code: EligibilityWarningCode
    message: str


@dataclass(frozen=True)
class EligibilityOptions:
    """Caller-supplied override request."""

    force_add: bool = False
    override_reason: str | None = None


@dataclass(frozen=True)
class EligibilityResult:
    """Verdict for a (voter, committee, term) triple.

    ``bypassed_reasons`` is set only when a force-add removed hard stops; the
    caller records it in the audit log.
    """

    eligible: bool
    hard_stops: list[IneligibilityReason] = field(default_factory=list)
    warnings: list[EligibilityWarning] = field(default_factory=list)
    bypassed_reasons: list[IneligibilityReason] | None = None
    validation_error: str | None = None


@dataclass(frozen=True)
class ImportVersion:
    """``(year, entry_number)`` of a voter-file import; ordered lexicographically."""

    year: int
    entry_number: int


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


def get_ineligibility_message(reason: str) -> str:
    """Map one reason code to display text, with a deterministic fallback."""
    return INELIGIBILITY_REASON_MESSAGES.get(reason, GENERIC_INELIGIBILITY_MESSAGE)


def get_ineligibility_messages(reasons: list[str] | None) -> list[str]:
    """Map reason codes to display text; empty input yields the generic message."""
    if not reasons:
        return [GENERIC_INELIGIBILITY_MESSAGE]
    return [get_ineligibility_message(reason) for reason in reasons]


def is_voter_possibly_inactive(voter_version: ImportVersion, most_recent: ImportVersion) -> bool:
    """True when the voter's record predates the most recent import."""
    return (voter_version.year, voter_version.entry_number) < (most_recent.year, most_recent.entry_number)


def _normalize(value: object) -> str:
    return "" if value is None else str(value).strip()


def resolve_override_result(
    hard_stops: list[IneligibilityReason],
    warnings: list[EligibilityWarning],
    non_overridable: list[str] | set[str] | frozenset[str],
    options: EligibilityOptions | None = None,
) -> EligibilityResult:
    """Apply the force-add override protocol to accumulated hard stops.

    Args:
        hard_stops: Hard stops found by the checks, in evaluation order.
        warnings: Warnings found by the checks.
        non_overridable: Reason codes a force-add may never bypass.
        options: Override request, if any.

    Returns:
        The final EligibilityResult.
    """
    options = options or EligibilityOptions()
    if not hard_stops:
        return EligibilityResult(eligible=True, hard_stops=[], warnings=warnings)
    if not options.force_add:
        return EligibilityResult(eligible=False, hard_stops=hard_stops, warnings=warnings)

    blocked = set(non_overridable)
    if any(reason in blocked for reason in hard_stops):
        return EligibilityResult(eligible=False, hard_stops=hard_stops, warnings=warnings)

    if not _normalize(options.override_reason):
        return EligibilityResult(
            eligible=False,
            hard_stops=hard_stops,
            warnings=warnings,
            validation_error=OVERRIDE_REASON_REQUIRED,
        )

    return EligibilityResult(
        eligible=True,
        hard_stops=[],
        warnings=warnings,
        bypassed_reasons=list(hard_stops),
    )


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def get_most_recent_import_version(session: AsyncSession) -> ImportVersion | None:
    """Return the highest ``(year, entry_number)`` across all voters, or None when there are none."""
    result = await session.execute(
        select(Voter.latest_entry_year, Voter.latest_entry_number)
        .order_by(Voter.latest_entry_year.desc(), Voter.latest_entry_number.desc())
        .limit(1)
    )
    row = result.first()
    if row is None:
        return None
    return ImportVersion(year=row[0], entry_number=row[1])


async def _assembly_district_matches(session: AsyncSession, voter: Voter, committee_id: uuid.UUID) -> bool:
    """Compare the voter's AD with the committee's crosswalk AD. Missing data never matches."""
    committee = (
        await session.execute(select(Committee).where(Committee.id == committee_id))
    ).scalar_one_or_none()
    if committee is None:
        return False
    crosswalk_ad = (
        await session.execute(
            select(LtedCrosswalk.state_assembly_district).where(
                LtedCrosswalk.city_town == committee.city_town,
                LtedCrosswalk.leg_district == committee.leg_district,
                LtedCrosswalk.election_district == committee.election_district,
            )
        )
    ).scalar_one_or_none()
    if crosswalk_ad is None:
        return False
    return _normalize(voter.state_assembly_district) == _normalize(crosswalk_ad)


async def _count_active_members(session: AsyncSession, committee_id: uuid.UUID, term_id: uuid.UUID) -> int:
    result = await session.execute(
        select(func.count(Membership.id)).where(
            Membership.committee_id == committee_id,
            Membership.term_id == term_id,
            Membership.status == MembershipStatus.ACTIVE,
        )
    )
    return result.scalar_one()


async def _has_membership_elsewhere(
    session: AsyncSession,
    voter_id: uuid.UUID,
    committee_id: uuid.UUID,
    term_id: uuid.UUID,
    status: MembershipStatus,
) -> bool:
    result = await session.execute(
        select(Membership.id)
        .where(
            Membership.voter_id == voter_id,
            Membership.term_id == term_id,
            Membership.status == status,
            Membership.committee_id != committee_id,
        )
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


async def _has_recent_resignation(session: AsyncSession, voter_id: uuid.UUID, cutoff: datetime) -> bool:
    """Any membership resigned since *cutoff*, including rows later reused for a new submission."""
    result = await session.execute(
        select(Membership.id)
        .where(
            Membership.voter_id == voter_id,
            Membership.resigned_at.is_not(None),
            Membership.resigned_at >= cutoff,
        )
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


# ---------------------------------------------------------------------------
# Evaluator
# ---------------------------------------------------------------------------


async def validate_eligibility(
    session: AsyncSession,
    voter_registration_number: str,
    committee_id: uuid.UUID,
    term_id: uuid.UUID,
    options: EligibilityOptions | None = None,
    *,
    config: GovernanceConfig | None = None,
    recent_resignation_days: int = DEFAULT_RECENT_RESIGNATION_DAYS,
    now: datetime | None = None,
) -> EligibilityResult:
    """Decide whether a voter may join a committee seat in a term.

    Every hard-stop check runs so the caller gets the complete reason set,
    except when the voter does not exist: ``NOT_REGISTERED`` is then reported
    alone. Warnings are additive and never affect ``eligible``.

    Args:
        session: Database session.
        voter_registration_number: Voter registration id.
        committee_id: Target committee UUID.
        term_id: Target term UUID.
        options: Force-add override request.
        config: Governance config; read from the database when omitted.
        recent_resignation_days: Window for the RECENT_RESIGNATION warning.
        now: Reference time for the resignation window (defaults to now, UTC).

    Returns:
        The EligibilityResult.

    Raises:
        ConfigurationError: If no governance config exists and none was given.
    """
    if config is None:
        config = await get_governance_config(session)
    non_overridable = config.non_overridable_ineligibility_reasons or []

    voter = (
        await session.execute(select(Voter).where(Voter.voter_registration_number == voter_registration_number))
    ).scalar_one_or_none()
    if voter is None:
        logger.info(f"Eligibility for {voter_registration_number}: not registered")
        return resolve_override_result([IneligibilityReason.NOT_REGISTERED], [], non_overridable, options)

    checks: list[tuple[IneligibilityReason, bool]] = [
        (
            IneligibilityReason.PARTY_MISMATCH,
            _normalize(voter.party) != _normalize(config.required_party_code),
        ),
        (
            IneligibilityReason.ASSEMBLY_DISTRICT_MISMATCH,
            config.require_assembly_district_match
            and not await _assembly_district_matches(session, voter, committee_id),
        ),
        (
            IneligibilityReason.CAPACITY,
            await _count_active_members(session, committee_id, term_id) >= config.max_seats_per_lted,
        ),
        (
            IneligibilityReason.ALREADY_IN_ANOTHER_COMMITTEE,
            await _has_membership_elsewhere(session, voter.id, committee_id, term_id, MembershipStatus.ACTIVE),
        ),
    ]
    hard_stops = [reason for reason, failed in checks if failed]

    most_recent = await get_most_recent_import_version(session)
    cutoff = (now or datetime.now(UTC)) - timedelta(days=recent_resignation_days)
    advisories: list[tuple[EligibilityWarningCode, str, bool]] = [
        (
            EligibilityWarningCode.POSSIBLY_INACTIVE,
            "Voter does not appear in the most recent voter file import; registration may be inactive.",
            most_recent is not None
            and is_voter_possibly_inactive(
                ImportVersion(voter.latest_entry_year, voter.latest_entry_number),
                most_recent,
            ),
        ),
        (
            EligibilityWarningCode.RECENT_RESIGNATION,
            f"Voter resigned from a committee within the last {recent_resignation_days} days.",
            await _has_recent_resignation(session, voter.id, cutoff),
        ),
        (
            EligibilityWarningCode.PENDING_IN_ANOTHER_COMMITTEE,
            "Voter has a pending submission in another committee for this term.",
            await _has_membership_elsewhere(session, voter.id, committee_id, term_id, MembershipStatus.SUBMITTED),
        ),
    ]
    warnings = [EligibilityWarning(code=code, message=message) for code, message, raised in advisories if raised]

    result = resolve_override_result(hard_stops, warnings, non_overridable, options)
    logger.info(
        f"Eligibility for {voter_registration_number} in committee {committee_id}: "
        f"eligible={result.eligible} hard_stops={[str(r) for r in result.hard_stops]} "
        f"warnings={[str(w.code) for w in result.warnings]}"
    )
    return result
