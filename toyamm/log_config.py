"""structlog setup for the pool service."""

import logging

import structlog


def configure_logging(level: str | int = logging.INFO) -> None:
    """Render structured events to the console at the given level.

    Args:
        level: Level name ("DEBUG", "INFO", ...) or logging constant
    """
    if isinstance(level, str):
        level = logging.getLevelNamesMapping().get(level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )
