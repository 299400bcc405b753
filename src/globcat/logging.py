from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from pathlib import Path

_LOGGING_CONFIGURED = False
_FILE_HANDLERS: dict[str, logging.Handler] = {}


def _configure_structlog(level: int) -> None:
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # setup_logging may change the level after loggers are first used.
        cache_logger_on_first_use=False,
    )


def setup_logging(filename: str | Path | None = None, *, verbose: bool = False) -> structlog.BoundLogger:
    """Set up structured logging for the globcat module.

    Logs always go to stderr so they never mix with the output buffer written to stdout.

    Args:
        filename: Optional path to an additional log file.
        verbose: When True, debug trace events (files matched, files read...) are emitted.

    Returns:
        A structlog logger instance configured for the globcat module.
    """
    global _LOGGING_CONFIGURED  # noqa: PLW0603
    level = logging.DEBUG if verbose else logging.INFO
    root_logger = logging.getLogger()
    if not _LOGGING_CONFIGURED:
        logging.basicConfig(
            level=level,
            handlers=[logging.StreamHandler(sys.stderr)],
            format="%(message)s",
        )
        _LOGGING_CONFIGURED = True
    if filename and str(filename) not in _FILE_HANDLERS:
        handler = logging.FileHandler(str(filename), encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(handler)
        _FILE_HANDLERS[str(filename)] = handler

    root_logger.setLevel(level)
    _configure_structlog(level)
    return structlog.get_logger("globcat")


logger = setup_logging()
