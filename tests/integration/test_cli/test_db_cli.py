"""Integration tests for database migration CLI commands."""

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from committee_engine.cli.app import app

runner = CliRunner()


class TestDbCLI:
    """Tests for `db upgrade|downgrade|current`."""

    def test_upgrade_defaults_to_head(self) -> None:
        with patch("alembic.command.upgrade") as mock_upgrade:
            result = runner.invoke(app, ["db", "upgrade"])
        assert result.exit_code == 0
        assert mock_upgrade.call_args[0][1] == "head"

    def test_downgrade_defaults_to_one_step(self) -> None:
        with patch("alembic.command.downgrade") as mock_downgrade:
            result = runner.invoke(app, ["db", "downgrade"])
        assert result.exit_code == 0
        assert mock_downgrade.call_args[0][1] == "-1"

    def test_upgrade_offline_sql(self) -> None:
        with patch("alembic.command.upgrade") as mock_upgrade:
            result = runner.invoke(app, ["db", "upgrade", "002", "--sql"])
        assert result.exit_code == 0
        assert mock_upgrade.call_args[0][1] == "002"
        assert mock_upgrade.call_args.kwargs == {"sql": True}

    def test_offline_downgrade_needs_range(self) -> None:
        with patch("alembic.command.downgrade") as mock_downgrade:
            result = runner.invoke(app, ["db", "downgrade", "--sql"])
        assert result.exit_code != 0
        mock_downgrade.assert_not_called()

    def test_current_reports_schema(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DATABASE_SCHEMA", "pr_42")
        with patch("alembic.command.current") as mock_current:
            result = runner.invoke(app, ["db", "current"])
        assert result.exit_code == 0
        assert "Schema: pr_42" in result.output
        assert mock_current.call_args.kwargs == {"verbose": True}

    def test_current_defaults_to_public(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("DATABASE_SCHEMA", raising=False)
        with patch("alembic.command.current"):
            result = runner.invoke(app, ["db", "current"])
        assert "Schema: public" in result.output

    def test_help_lists_command_groups(self) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for group in ("db", "eligibility", "seats", "weight", "membership"):
            assert group in result.output
