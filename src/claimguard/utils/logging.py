"""
Logging Configuration
Structured logging with loguru, with claim-scoped context
Source: https://github.com/Delgan/loguru
Verified: 2026-10-19
"""

import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator
from uuid import UUID

from loguru import logger

# Shown when a record is logged outside any claim context
NO_CLAIM = "-"

_CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<magenta>claim={extra[claim_id]}</magenta> | "
    "<cyan>{extra[name]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)
_FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | claim={extra[claim_id]} | "
    "{extra[name]}:{function}:{line} - {message}"
)


def _default_claim(record: dict[str, Any]) -> None:
    record["extra"].setdefault("claim_id", NO_CLAIM)


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    json_logs: bool = False,
) -> None:
    """
    Configure claim engine logging.

    Every record carries ``claim_id`` (set by claim_context) and the
    module ``name`` bound by get_logger, in both text and JSON output.
    Replaces the process-wide loguru sinks and default extra fields.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path, rotated at 100 MB
        json_logs: Whether to output JSON format (useful for production)
    """
    logger.remove()
    logger.configure(extra={"claim_id": NO_CLAIM, "name": "claimguard"})

    if json_logs:
        logger.add(sys.stderr, format="{message}", level=level, serialize=True)
    else:
        logger.add(sys.stderr, format=_CONSOLE_FORMAT, level=level, colorize=True)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            rotation="100 MB",
            retention="30 days",
            compression="zip",
            format=_FILE_FORMAT,
            level=level,
            serialize=json_logs,
        )

    logger.info(f"Logging configured: level={level}, json_logs={json_logs}")


def setup_logging_from_settings(settings: Any) -> None:
    """Configure logging from an EngineSettings instance."""
    setup_logging(
        level=settings.LOG_LEVEL,
        log_file=settings.LOG_FILE,
        json_logs=settings.LOG_JSON,
    )


@contextmanager
def claim_context(claim_id: UUID | str) -> Iterator[None]:
    """
    Tag every record logged inside the block with a claim id.

    Uses loguru's contextualize, so the id follows the current task
    across awaits and does not leak into concurrently processed claims.

    Example:
        >>> with claim_context(claim.id):
        >>>     logger.info("Adjudication started")
    """
    with logger.contextualize(claim_id=str(claim_id)):
        yield


def get_logger(name: str = __name__):  # type: ignore[no-untyped-def]
    """
    Get a logger bound to a module name.

    Records logged outside claim_context get ``claim_id`` set to NO_CLAIM.
    The global loguru configuration is left untouched.

    Args:
        name: Logger name (typically __name__)

    Returns:
        loguru logger with ``name`` in its extra data
    """
    return logger.bind(name=name).patch(_default_claim)
