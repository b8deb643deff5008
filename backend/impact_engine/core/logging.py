"""
Structured logging configuration using structlog.
Calculators log through ``get_logger``; hosts that do not configure structlog
themselves call ``configure_logging`` once, usually via ``create_lca_service``.
"""

import logging
import sys
from typing import cast

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from impact_engine.core.config import Settings, get_settings


def _engine_context(settings: Settings) -> Processor:
    """Stamp every event with the engine version and environment."""

    def add_engine_context(
        _logger: WrappedLogger, _method_name: str, event_dict: EventDict
    ) -> EventDict:
        event_dict.setdefault("engine_version", settings.version)
        event_dict.setdefault("environment", settings.environment)
        return event_dict

    return add_engine_context


def configure_logging(settings: Settings | None = None) -> None:
    """
    Configure structured logging for the engine.

    Development renders events for the console. Staging and production
    render one JSON object per event for log aggregation.
    """
    settings = settings or get_settings()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _engine_context(settings),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    renderer: list[Processor]
    if settings.environment == "development":
        renderer = [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]
    else:
        renderer = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]

    # Uncached so a host reconfiguring structlog later still reaches module loggers.
    structlog.configure(
        processors=shared_processors + renderer,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level),
    )
    logging.getLogger("impact_engine").setLevel(settings.log_level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance with the given name."""
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
