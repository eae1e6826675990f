"""Seat maintenance and weight CLI commands."""

import asyncio
import uuid
from decimal import Decimal, InvalidOperation

import typer

seats_app = typer.Typer()
weight_app = typer.Typer()


@seats_app.command("ensure")
def ensure(
    committee_id: uuid.UUID = typer.Argument(..., help="Committee UUID"),
    term_id: uuid.UUID | None = typer.Option(None, "--term-id", help="Term UUID (defaults to the committee's term)"),
) -> None:
    """Create any missing seat rows for a committee up to the configured cap."""
    asyncio.run(_ensure(committee_id, term_id))


async def _ensure(committee_id: uuid.UUID, term_id: uuid.UUID | None) -> None:
    """Async implementation of seat materialization."""
    from sqlalchemy import select

    from committee_engine.core.config import get_settings
    from committee_engine.core.database import engine_session
    from committee_engine.core.exceptions import ConfigurationError
    from committee_engine.models.committee import Committee
    from committee_engine.services.seat_service import ensure_seats_exist

    settings = get_settings()
    async with engine_session(settings.database_url, schema=settings.database_schema) as session:
        committee = (
            await session.execute(select(Committee).where(Committee.id == committee_id))
        ).scalar_one_or_none()
        if committee is None:
            typer.echo(f"Error: Committee {committee_id} not found", err=True)
            raise typer.Exit(code=1)
        try:
            created = await ensure_seats_exist(session, committee_id, term_id or committee.term_id)
        except ConfigurationError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(code=1) from e
        await session.commit()
    typer.echo(f"Created {created} seats")


@weight_app.command("show")
def show(
    committee_id: uuid.UUID = typer.Argument(..., help="Committee UUID"),
    term_id: uuid.UUID | None = typer.Option(None, "--term-id", help="Term UUID (defaults to the active term)"),
    as_json: bool = typer.Option(False, "--json", help="Print the breakdown as JSON"),
) -> None:
    """Show a committee's designation weight and per-seat breakdown."""
    asyncio.run(_show(committee_id, term_id, as_json=as_json))


async def _show(committee_id: uuid.UUID, term_id: uuid.UUID | None, *, as_json: bool) -> None:
    """Async implementation of the designation weight report."""
    from committee_engine.core.config import get_settings
    from committee_engine.core.database import engine_session
    from committee_engine.core.exceptions import ConfigurationError, DataIntegrityError
    from committee_engine.schemas.designation_weight import DesignationWeightResponse
    from committee_engine.services.designation_weight_service import calculate_designation_weight

    settings = get_settings()
    async with engine_session(settings.database_url, schema=settings.database_schema) as session:
        try:
            result = await calculate_designation_weight(session, committee_id, term_id)
        except (ConfigurationError, DataIntegrityError) as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(code=1) from e

    response = DesignationWeightResponse.model_validate(result)
    if as_json:
        typer.echo(response.model_dump_json(indent=2))
        return

    typer.echo(f"{'Seat':<6} {'Petitioned':<11} {'Occupant':<12} {'Weight':<14} {'Contributes':<11}")
    typer.echo("-" * 58)
    for seat in response.seats:
        occupant = seat.occupant_membership_type or ("-" if not seat.is_occupied else "?")
        weight = "null" if seat.seat_weight is None else str(seat.seat_weight)
        typer.echo(
            f"{seat.seat_number:<6} {seat.is_petitioned!s:<11} {occupant:<12} {weight:<14} {seat.contributes!s:<11}"
        )
    typer.echo(f"\nTotal weight: {response.total_weight} ({response.total_contributing_seats} seats)")
    if response.missing_weight_seat_numbers:
        missing = ", ".join(str(n) for n in response.missing_weight_seat_numbers)
        typer.echo(f"Petitioned seats missing weight: {missing}")


def _parse_weight(value: str) -> Decimal | None:
    if value.lower() in ("null", "none", ""):
        return None
    try:
        weight = Decimal(value)
    except InvalidOperation:
        msg = f"Invalid weight: {value}"
        raise typer.BadParameter(msg) from None
    if weight < 0:
        msg = "Weight must not be negative"
        raise typer.BadParameter(msg)
    return weight


@weight_app.command("set")
def set_weight(
    committee_id: uuid.UUID = typer.Argument(..., help="Committee UUID"),
    weight: str = typer.Argument(..., help="Decimal LTED weight, or 'null' to clear"),
    actor_id: uuid.UUID = typer.Option(..., "--actor-id", help="Acting user UUID for the audit log"),
) -> None:
    """Set a committee's LTED weight and recompute its seat weights."""
    asyncio.run(_set_weight(committee_id, _parse_weight(weight), actor_id))


async def _set_weight(committee_id: uuid.UUID, weight: Decimal | None, actor_id: uuid.UUID) -> None:
    """Async implementation of the LTED weight update."""
    from committee_engine.core.config import get_settings
    from committee_engine.core.database import engine_session
    from committee_engine.core.exceptions import ConfigurationError, NotFoundError
    from committee_engine.services.membership_service import update_lted_weight

    settings = get_settings()
    async with engine_session(settings.database_url, schema=settings.database_schema) as session:
        try:
            await update_lted_weight(session, committee_id, weight, actor_id=actor_id)
        except (ConfigurationError, NotFoundError) as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(code=1) from e
    typer.echo(f"LTED weight for committee {committee_id} set to {weight if weight is not None else 'null'}")
