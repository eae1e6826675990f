"""Membership workflow CLI commands."""

import asyncio
import uuid
from datetime import date

import typer

membership_app = typer.Typer()


def _echo_error(e: Exception) -> None:
    from committee_engine.core.exceptions import IneligibleError
    from committee_engine.services.eligibility_service import get_ineligibility_messages

    typer.echo(f"Error: {e}", err=True)
    if isinstance(e, IneligibleError) and e.result.hard_stops:
        for message in get_ineligibility_messages(list(e.result.hard_stops)):
            typer.echo(f"  {message}", err=True)


def _handled_errors() -> tuple[type[Exception], ...]:
    from committee_engine.core.exceptions import (
        ConfigurationError,
        SeatClaimConflictError,
    )

    # NotFoundError, MembershipStateError, IneligibleError and SeatCapacityError are ValueErrors.
    return (ConfigurationError, SeatClaimConflictError, ValueError)


async def _run_with_retry(operation):  # type: ignore[no-untyped-def]
    """Run a seat-claiming workflow with conflict retries, then dispose the engine."""
    from committee_engine.core.config import get_settings
    from committee_engine.core.database import dispose_engine, get_session_factory, init_engine
    from committee_engine.services.membership_service import claim_with_retry

    settings = get_settings()
    init_engine(settings.database_url, schema=settings.database_schema)
    try:
        return await claim_with_retry(get_session_factory(), operation, attempts=settings.seat_claim_retry_attempts)
    except _handled_errors() as e:
        _echo_error(e)
        raise typer.Exit(code=1) from e
    finally:
        await dispose_engine()


@membership_app.command("add")
def add(
    voter: str = typer.Argument(..., help="Voter registration number"),
    committee_id: uuid.UUID = typer.Argument(..., help="Committee UUID"),
    actor_id: uuid.UUID = typer.Option(..., "--actor-id", help="Acting user UUID for the audit log"),
    force_add: bool = typer.Option(False, "--force-add", help="Bypass overridable hard stops"),
    override_reason: str | None = typer.Option(None, "--override-reason", help="Required with --force-add"),
) -> None:
    """Activate a voter directly on a committee in the lowest free seat."""
    from committee_engine.core.config import get_settings
    from committee_engine.services.eligibility_service import EligibilityOptions
    from committee_engine.services.membership_service import add_member

    settings = get_settings()
    options = EligibilityOptions(force_add=force_add, override_reason=override_reason)

    async def operation(session):  # type: ignore[no-untyped-def]
        return await add_member(
            session,
            voter_registration_number=voter,
            committee_id=committee_id,
            actor_id=actor_id,
            options=options,
            recent_resignation_days=settings.recent_resignation_days,
        )

    membership, eligibility = asyncio.run(_run_with_retry(operation))
    typer.echo(f"Voter {voter} active in seat {membership.seat_number}")
    for warning in eligibility.warnings:
        typer.echo(f"  warning: {warning.message}")


@membership_app.command("submit")
def submit(
    voter: str = typer.Argument(..., help="Voter registration number"),
    committee_id: uuid.UUID = typer.Argument(..., help="Committee UUID"),
    actor_id: uuid.UUID = typer.Option(..., "--actor-id", help="Acting user UUID for the audit log"),
    force_add: bool = typer.Option(False, "--force-add", help="Bypass overridable hard stops"),
    override_reason: str | None = typer.Option(None, "--override-reason", help="Required with --force-add"),
) -> None:
    """Submit a voter for a committee decision."""
    from committee_engine.core.config import get_settings
    from committee_engine.services.eligibility_service import EligibilityOptions
    from committee_engine.services.membership_service import submit_membership

    settings = get_settings()
    options = EligibilityOptions(force_add=force_add, override_reason=override_reason)

    async def operation(session):  # type: ignore[no-untyped-def]
        return await submit_membership(
            session,
            voter_registration_number=voter,
            committee_id=committee_id,
            actor_id=actor_id,
            options=options,
            recent_resignation_days=settings.recent_resignation_days,
        )

    membership, _ = asyncio.run(_run_with_retry(operation))
    typer.echo(f"Submitted membership {membership.id}")


@membership_app.command("decide")
def decide(
    membership_ids: list[uuid.UUID] = typer.Argument(..., help="SUBMITTED membership UUIDs"),
    actor_id: uuid.UUID = typer.Option(..., "--actor-id", help="Acting user UUID for the audit log"),
    reject: bool = typer.Option(False, "--reject", help="Reject instead of confirm"),
    rejection_note: str | None = typer.Option(None, "--note", help="Rejection note"),
    meeting_id: uuid.UUID | None = typer.Option(None, "--meeting-id", help="Meeting where the decision was taken"),
) -> None:
    """Confirm (default) or reject submitted memberships in one transaction."""
    from committee_engine.core.config import get_settings
    from committee_engine.services.membership_service import Decision, MembershipDecision, decide_memberships

    settings = get_settings()
    decision = Decision.REJECT if reject else Decision.CONFIRM
    decisions = [MembershipDecision(mid, decision, rejection_note) for mid in membership_ids]

    async def operation(session):  # type: ignore[no-untyped-def]
        return await decide_memberships(
            session,
            decisions,
            actor_id=actor_id,
            meeting_id=meeting_id,
            recent_resignation_days=settings.recent_resignation_days,
        )

    results = asyncio.run(_run_with_retry(operation))
    failed = 0
    for result in results:
        if result.success:
            seat = f" (seat {result.seat_number})" if result.seat_number is not None else ""
            typer.echo(f"{result.membership_id}: {result.decision}ed{seat}")
        else:
            failed += 1
            typer.echo(f"{result.membership_id}: failed: {result.error}", err=True)
    if failed:
        raise typer.Exit(code=1)


@membership_app.command("remove")
def remove(
    voter: str = typer.Argument(..., help="Voter registration number"),
    committee_id: uuid.UUID = typer.Argument(..., help="Committee UUID"),
    actor_id: uuid.UUID = typer.Option(..., "--actor-id", help="Acting user UUID for the audit log"),
    reason: str = typer.Option(..., "--reason", help="Removal reason code"),
    notes: str | None = typer.Option(None, "--notes", help="Free-text notes"),
) -> None:
    """Remove an active member from a committee."""
    from committee_engine.services.membership_service import remove_member

    async def operation(session):  # type: ignore[no-untyped-def]
        return await remove_member(
            session,
            committee_id=committee_id,
            voter_registration_number=voter,
            actor_id=actor_id,
            removal_reason=reason,
            removal_notes=notes,
        )

    asyncio.run(_run_with_retry(operation))
    typer.echo(f"Removed voter {voter}")


@membership_app.command("resign")
def resign(
    voter: str = typer.Argument(..., help="Voter registration number"),
    committee_id: uuid.UUID = typer.Argument(..., help="Committee UUID"),
    actor_id: uuid.UUID = typer.Option(..., "--actor-id", help="Acting user UUID for the audit log"),
    reason: str = typer.Option(..., "--reason", help="Resignation reason code"),
    method: str = typer.Option(..., "--method", help="EMAIL or MAIL"),
    received: str = typer.Option(..., "--received", help="Date the resignation was received (YYYY-MM-DD)"),
    notes: str | None = typer.Option(None, "--notes", help="Free-text notes"),
) -> None:
    """Record an active member's resignation."""
    from committee_engine.services.membership_service import resign_member

    method = method.upper()
    if method not in ("EMAIL", "MAIL"):
        msg = "method must be EMAIL or MAIL"
        raise typer.BadParameter(msg)
    received_on = _parse_date(received)

    async def operation(session):  # type: ignore[no-untyped-def]
        return await resign_member(
            session,
            committee_id=committee_id,
            voter_registration_number=voter,
            actor_id=actor_id,
            resignation_reason=reason,
            resignation_method=method,
            resignation_date_received=received_on,
            removal_notes=notes,
        )

    asyncio.run(_run_with_retry(operation))
    typer.echo(f"Recorded resignation of voter {voter}")


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        msg = f"Invalid date: {value} (expected YYYY-MM-DD)"
        raise typer.BadParameter(msg) from None


def _parse_candidate(value: str):  # type: ignore[no-untyped-def]
    """Parse ``REGNUM:OUTCOME[:VOTES]``."""
    from committee_engine.services.membership_service import PetitionCandidate, PetitionOutcome

    parts = value.split(":")
    if len(parts) not in (2, 3):
        msg = f"Invalid candidate '{value}' (expected REGNUM:OUTCOME[:VOTES])"
        raise typer.BadParameter(msg)
    try:
        outcome = PetitionOutcome(parts[1].upper())
        votes = int(parts[2]) if len(parts) == 3 else None
    except ValueError:
        msg = f"Invalid candidate '{value}'"
        raise typer.BadParameter(msg) from None
    return PetitionCandidate(voter_registration_number=parts[0], outcome=outcome, vote_count=votes)


@membership_app.command("petition")
def petition(
    committee_id: uuid.UUID = typer.Argument(..., help="Committee UUID"),
    seat_number: int = typer.Argument(..., help="Petitioned seat number", min=1),
    primary_date: str = typer.Option(..., "--primary-date", help="Primary election date (YYYY-MM-DD)"),
    candidates: list[str] = typer.Option(..., "--candidate", help="REGNUM:OUTCOME[:VOTES], repeatable"),
    actor_id: uuid.UUID = typer.Option(..., "--actor-id", help="Acting user UUID for the audit log"),
) -> None:
    """Record primary outcomes for a petitioned seat."""
    from committee_engine.core.config import get_settings
    from committee_engine.services.membership_service import record_petition_outcome

    settings = get_settings()
    parsed = [_parse_candidate(c) for c in candidates]
    held_on = _parse_date(primary_date)

    async def operation(session):  # type: ignore[no-untyped-def]
        return await record_petition_outcome(
            session,
            committee_id=committee_id,
            seat_number=seat_number,
            primary_date=held_on,
            candidates=parsed,
            actor_id=actor_id,
            recent_resignation_days=settings.recent_resignation_days,
        )

    memberships = asyncio.run(_run_with_retry(operation))
    typer.echo(f"Recorded {len(memberships)} candidate outcomes for seat {seat_number}")
