"""Structured logging for servicebox.

Every servicebox module logs through a structlog wrapper around a stdlib
logger under the ``servicebox`` namespace. Until the application configures
logging, those records stop at a NullHandler, so importing the library never
writes to stdout or stderr. ``configure_logging`` switches on console or JSON
output for the whole process.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TextIO

import structlog

LIBRARY_LOGGER = "servicebox"

logging.getLogger(LIBRARY_LOGGER).addHandler(logging.NullHandler())


def _open_stream(log_file: Path | None) -> TextIO:
    if log_file is None:
        return sys.stderr
    log_file.parent.mkdir(parents=True, exist_ok=True)
    return open(log_file, "a")  # noqa: SIM115


def _processors(json_output: bool, colors: bool) -> list[structlog.types.Processor]:
    processors: list[structlog.types.Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=colors))
    return processors


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: Path | None = None,
    colors: bool = True,
) -> None:
    """Route structured events to stderr or a file.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Whether to output JSON format
        log_file: Optional file to log to
        colors: Whether to use colors in console output
    """
    logging.basicConfig(
        format="%(message)s",
        stream=_open_stream(log_file),
        level=getattr(logging, level.upper()),
        force=True,
    )
    structlog.configure(
        processors=_processors(json_output, colors),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Structured logger bound to the stdlib logger ``name``.

    The stdlib logger decides whether anything is emitted, so library
    events follow the host application's logging setup.
    """
    return structlog.wrap_logger(
        logging.getLogger(name),
        wrapper_class=structlog.stdlib.BoundLogger,
    )


def configure_from_config(config, json_output: bool = False, log_file: Path | None = None) -> None:
    """Configure logging at the level carried by a ContainerConfig."""
    configure_logging(
        level=config.log_level,
        json_output=json_output,
        log_file=log_file,
        colors=not json_output,
    )
