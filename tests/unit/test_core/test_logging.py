"""Unit tests for logging configuration."""

from pathlib import Path

from committee_engine.core.logging import setup_logging


class TestLogging:
    """Tests for Loguru logging setup."""

    def test_setup_logging_does_not_raise(self) -> None:
        """setup_logging with valid log level does not raise."""
        setup_logging("DEBUG")
        setup_logging("INFO")
        setup_logging("WARNING")

    def test_setup_logging_case_insensitive(self) -> None:
        """setup_logging accepts case-insensitive log levels."""
        setup_logging("info")
        setup_logging("debug")

    def test_log_dir_creates_directory(self, tmp_path: Path) -> None:
        """A log_dir that does not exist yet is created."""
        log_dir = tmp_path / "logs" / "nested"
        setup_logging("INFO", log_dir=str(log_dir))
        assert log_dir.is_dir()
        setup_logging("INFO")

    def test_file_sink_tags_component_and_environment(self, tmp_path: Path) -> None:
        """File lines carry the bound component, or the default one."""
        from loguru import logger

        setup_logging("INFO", log_dir=str(tmp_path), environment="staging")
        logger.bind(component="seats").info("seat materialized")
        logger.info("untagged line")
        setup_logging("INFO")

        lines = (tmp_path / "committee-engine-staging.log").read_text().splitlines()
        assert "| seats      |" in lines[0]
        assert "seat materialized" in lines[0]
        assert "| engine     |" in lines[1]

    def test_default_file_name_without_environment(self, tmp_path: Path) -> None:
        from loguru import logger

        setup_logging("INFO", log_dir=str(tmp_path))
        logger.warning("capacity reached")
        setup_logging("INFO")
        assert "capacity reached" in (tmp_path / "committee-engine.log").read_text()
