# -*- coding: utf-8 -*-
"""structlog configuration.

Console rendered, filtered by level, written to stderr so stdout stays free
for command output.
"""
import logging
import sys

import structlog


def setup_logging(level='WARNING'):
    """Configure structlog with the given minimum level (name or number)."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt='ISO'),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
