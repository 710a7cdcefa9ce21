"""Structlog configuration for procseries.

Log output goes to stderr so that JSON documents and raw snapshots written to
stdout stay machine-readable. Console rendering is the default; JSON lines
can be selected in the config.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from procseries.config import LoggingConfig


def configure(config: LoggingConfig) -> None:
    """Configure stdlib logging and structlog from the logging config section."""
    level = getattr(logging, config.level.upper())

    renderer: structlog.types.Processor
    if config.json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=[
                structlog.processors.TimeStamper(fmt="iso", utc=False, key="ts"),
                structlog.processors.add_log_level,
            ],
        )
    )

    stdlib_root = logging.getLogger()
    stdlib_root.handlers.clear()
    stdlib_root.addHandler(handler)
    stdlib_root.setLevel(level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.processors.TimeStamper(fmt="iso", utc=False, key="ts"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )
