from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from pathlib import Path

_configured = False


def setup_logging(
    filename: str | Path | None = None,
    *,
    verbose: bool = False,
    force: bool = False,
) -> structlog.BoundLogger:
    """Set up structured logging for the promptext package.

    The package configures itself once on import; the CLI calls this again with
    ``force=True`` to redirect output to a file or lower the level to DEBUG.

    Args:
        filename: Optional path to a log file. If None, logs are written to stderr.
        verbose: Lower the threshold from INFO to DEBUG.
        force: Reconfigure even if logging was already set up.

    Returns:
        A structlog logger instance configured for the promptext package.
    """
    global _configured  # noqa: PLW0603
    if force or not _configured:
        level = logging.DEBUG if verbose else logging.INFO
        handlers: list[logging.Handler] = []
        if filename:
            handlers.append(logging.FileHandler(str(filename), encoding="utf-8"))
        else:
            handlers.append(logging.StreamHandler(sys.stderr))

        logging.basicConfig(
            level=level,
            handlers=handlers,
            format="%(message)s",
            force=force,
        )
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.add_log_level,
                structlog.stdlib.add_logger_name,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(level),
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            # the CLI may reconfigure after import
            cache_logger_on_first_use=False,
        )
        _configured = True

    return structlog.get_logger("promptext")


logger = setup_logging()
