"""Structured logging setup.

Every module logs through ``structlog.get_logger(__name__)``.  The
processor chain is configured once per process by
:func:`configure_logging`; Streamlit re-executes page scripts on every
interaction, so repeated calls are no-ops.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import structlog

from .config import LOG_JSON, LOG_LEVEL

_configured = False


def configure_logging(level: Optional[str] = None, json_output: Optional[bool] = None) -> None:
    """Configure stdlib logging and structlog processors.

    Args:
        level: Log level name. Defaults to ``FINTRACK_LOG_LEVEL``.
        json_output: Render JSON lines instead of console output.
            Defaults to ``FINTRACK_LOG_JSON``.
    """
    global _configured
    if _configured:
        return

    level_name = (level or LOG_LEVEL).upper()
    use_json = LOG_JSON if json_output is None else json_output

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level_name, logging.INFO),
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if use_json
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured = True
