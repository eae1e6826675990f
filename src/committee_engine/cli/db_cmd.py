"""Migration commands for the committee schema, driven through Alembic."""

import typer
from loguru import logger

db_app = typer.Typer()

_log = logger.bind(component="migrations")


def _alembic_config():  # type: ignore[no-untyped-def]
    from alembic.config import Config

    return Config("alembic.ini")


def _target_schema() -> str:
    from committee_engine.core.config import get_settings

    return get_settings().database_schema or "public"


@db_app.command()
def upgrade(
    revision: str = typer.Argument("head", help="Target revision"),
    sql: bool = typer.Option(False, "--sql", help="Print the migration SQL instead of applying it"),
) -> None:
    """Create or migrate the committee tables up to the target revision."""
    from alembic import command

    schema = _target_schema()
    _log.info(f"Upgrading schema {schema} to {revision}{' (offline SQL)' if sql else ''}")
    command.upgrade(_alembic_config(), revision, sql=sql)
    if not sql:
        _log.info(f"Schema {schema} is at {revision}")


@db_app.command()
def downgrade(
    revision: str = typer.Argument("-1", help="Target revision"),
    sql: bool = typer.Option(False, "--sql", help="Print the migration SQL instead of applying it"),
) -> None:
    """Roll the committee tables back to the target revision."""
    from alembic import command

    if sql and revision == "-1":
        msg = "Offline downgrade needs an explicit range such as 002:001"
        raise typer.BadParameter(msg)
    schema = _target_schema()
    _log.warning(f"Downgrading schema {schema} to {revision}")
    command.downgrade(_alembic_config(), revision, sql=sql)


@db_app.command()
def current() -> None:
    """Show the revision the committee tables are at."""
    from alembic import command

    typer.echo(f"Schema: {_target_schema()}")
    command.current(_alembic_config(), verbose=True)
