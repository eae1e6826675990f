"""Typer CLI root application."""

import typer

from committee_engine.core.config import get_settings
from committee_engine.core.logging import setup_logging

app = typer.Typer(name="committee-engine", help="Party committee membership, seat and designation-weight CLI")


@app.callback()
def _main_callback() -> None:
    """Initialize logging for all CLI commands."""
    settings = get_settings()
    setup_logging(settings.log_level, log_dir=settings.log_dir, environment=settings.environment)


def _register_subcommands() -> None:
    """Register all CLI subcommand groups."""
    from committee_engine.cli.db_cmd import db_app
    from committee_engine.cli.eligibility_cmd import eligibility_app
    from committee_engine.cli.membership_cmd import membership_app
    from committee_engine.cli.seat_cmd import seats_app, weight_app

    app.add_typer(db_app, name="db", help="Database migration commands")
    app.add_typer(eligibility_app, name="eligibility", help="Eligibility preflight commands")
    app.add_typer(seats_app, name="seats", help="Seat maintenance commands")
    app.add_typer(weight_app, name="weight", help="LTED and designation weight commands")
    app.add_typer(membership_app, name="membership", help="Membership workflow commands")


_register_subcommands()
