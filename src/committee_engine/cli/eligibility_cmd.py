"""Eligibility preflight CLI command."""

import asyncio
import uuid

import typer

eligibility_app = typer.Typer()


@eligibility_app.command("check")
def check(
    voter: str = typer.Argument(..., help="Voter registration number"),
    committee_id: uuid.UUID = typer.Argument(..., help="Committee UUID"),
    term_id: uuid.UUID | None = typer.Option(None, "--term-id", help="Term UUID (defaults to the active term)"),
    force_add: bool = typer.Option(False, "--force-add", help="Bypass overridable hard stops"),
    override_reason: str | None = typer.Option(None, "--override-reason", help="Required with --force-add"),
    as_json: bool = typer.Option(False, "--json", help="Print the verdict as JSON"),
) -> None:
    """Evaluate whether a voter may join a committee. Exits 1 when ineligible."""
    eligible = asyncio.run(_check(voter, committee_id, term_id, force_add, override_reason, as_json=as_json))
    if not eligible:
        raise typer.Exit(code=1)


async def _check(
    voter: str,
    committee_id: uuid.UUID,
    term_id: uuid.UUID | None,
    force_add: bool,
    override_reason: str | None,
    *,
    as_json: bool,
) -> bool:
    """Async implementation of the eligibility check."""
    from committee_engine.core.config import get_settings
    from committee_engine.core.database import engine_session
    from committee_engine.core.exceptions import ConfigurationError
    from committee_engine.schemas.eligibility import EligibilityResponse
    from committee_engine.services.eligibility_service import EligibilityOptions, validate_eligibility
    from committee_engine.services.governance_service import get_active_term_id

    settings = get_settings()
    async with engine_session(settings.database_url, schema=settings.database_schema) as session:
        try:
            resolved_term_id = term_id or await get_active_term_id(session)
            result = await validate_eligibility(
                session,
                voter,
                committee_id,
                resolved_term_id,
                EligibilityOptions(force_add=force_add, override_reason=override_reason),
                recent_resignation_days=settings.recent_resignation_days,
            )
        except ConfigurationError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(code=1) from e

    response = EligibilityResponse.model_validate(result)
    if as_json:
        typer.echo(response.model_dump_json(indent=2))
        return response.eligible

    typer.echo(f"Eligible: {'yes' if response.eligible else 'no'}")
    for reason, message in zip(response.hard_stops, response.hard_stop_messages, strict=True):
        typer.echo(f"  hard stop  {reason:<30} {message}")
    for reason in response.bypassed_reasons or []:
        typer.echo(f"  bypassed   {reason}")
    for warning in response.warnings:
        typer.echo(f"  warning    {warning.code:<30} {warning.message}")
    if response.validation_error:
        typer.echo(f"  error      {response.validation_error}")
    return response.eligible
