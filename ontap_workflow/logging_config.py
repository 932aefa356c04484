"""Logging configuration for the ONTAP workflow core.

Thin layer over the standard :mod:`logging` package. Modules obtain a
logger with :func:`get_logger`; the host application calls
:func:`setup_logging` once at startup. JSON output is rendered by
structlog's processor chain.

Example:
    >>> from ontap_workflow.logging_config import setup_logging, get_logger
    >>> setup_logging(log_level="DEBUG", json_format=True)
    >>> logger = get_logger(__name__)
    >>> logger.info("Volume created", extra={"volume": "vol1"})
"""

from __future__ import annotations

import logging
import sys
from typing import Any, MutableMapping

import structlog

PACKAGE_LOGGER = "ontap_workflow"


def json_formatter() -> logging.Formatter:
    """Build a formatter that renders stdlib records as JSON lines.

    Fields passed through ``extra`` are merged into the top-level object.
    """
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.ExtraAdder(),
        ],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.EventRenamer("message"),
            structlog.processors.JSONRenderer(),
        ],
    )


class LoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that merges fixed context into every record's extras.

    Unlike the standard adapter, per-call ``extra`` values are kept and
    combined with the adapter's context instead of being replaced.
    """

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**(self.extra or {}), **kwargs.get("extra", {})}
        return msg, kwargs


def setup_logging(
    log_level: str = "INFO",
    json_format: bool = False,
    log_file: str | None = None,
) -> logging.Logger:
    """Configure the package logger.

    Calling this more than once replaces the previously installed handlers.

    Args:
        log_level: Logging level name (DEBUG, INFO, ...).
        json_format: Emit JSON lines instead of plain text.
        log_file: Optional file path to log to in addition to stderr.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(log_level.upper())

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter: logging.Formatter
    if json_format:
        formatter = json_formatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger, nesting it under the package logger when needed."""
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)
