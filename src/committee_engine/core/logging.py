"""Loguru logging configuration for the engine and its CLI.

Every record carries a ``component`` extra (``engine`` unless bound otherwise)
so seat, eligibility and CLI lines can be told apart in a shared log. Records
bound with ``json_output=True`` are additionally emitted as JSON.
"""

import sys
from pathlib import Path

from loguru import logger

_LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {extra[component]:<10} | {name}:{function}:{line} | {message}"
)


def setup_logging(
    log_level: str = "INFO",
    log_dir: str | None = None,
    *,
    component: str = "engine",
    environment: str | None = None,
) -> None:
    """Configure Loguru sinks.

    Args:
        log_level: Minimum log level to emit.
        log_dir: Optional directory for a rotating log file (24 hours, kept 7 days).
        component: Default ``component`` extra for records that do not bind one.
        environment: Deployment name appended to the log file name, so
            several environments can share one ``log_dir``.
    """
    level = log_level.upper()
    logger.remove()
    logger.configure(extra={"component": component, "json_output": False})
    logger.add(sys.stderr, level=level, format=_LOG_FORMAT)
    logger.add(
        sys.stderr,
        level=level,
        serialize=True,
        filter=lambda record: record["extra"].get("json_output", False),
    )

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        filename = f"committee-engine-{environment}.log" if environment else "committee-engine.log"
        logger.add(
            log_path / filename,
            level=level,
            format=_LOG_FORMAT,
            rotation="24h",
            retention="7 days",
        )
