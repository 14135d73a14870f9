# src/ioc_kernel/config/log_config.py
"""
Structured logging for the container (structlog on top of stdlib logging).
Library modules only call get_logger(__name__); applications call
configure_logging() once at startup.
"""
from __future__ import annotations

import logging
import sys

import structlog


def configure_logging(level: str = "INFO", json_output: bool = False, colors: bool = True) -> None:
    """
    Configure stdlib logging and the structlog processor chain.

    level: DEBUG shows every registration, discovery hit and fallback
    construction; WARNING only shows ambiguous discovery scans.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper()),
        force=True,
    )

    processors: list[structlog.types.Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=colors))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Structured logger for a module (typically __name__)."""
    return structlog.get_logger(name)


def configure_from_settings(settings=None) -> None:
    """Apply log_level / log_json from KernelSettings."""
    from ioc_kernel.config.base_settings import KernelSettings

    settings = settings or KernelSettings()
    configure_logging(level=settings.log_level, json_output=settings.log_json)
