"""Structured logging configuration using structlog.

Long-running processes log JSON lines; the one-shot CLI can ask for the
console renderer instead so humans can read resolver chatter on a terminal.
"""

from __future__ import annotations

import logging
import sys

import structlog


def setup_logging(level: str = "info", console: bool = False) -> None:
    """Configure structlog output to stderr (JSON unless *console* is set)."""
    log_level = getattr(logging, level.upper(), logging.INFO)
    renderer: structlog.types.Processor = (
        structlog.dev.ConsoleRenderer() if console else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(component: str) -> structlog.stdlib.BoundLogger:
    """Get a logger bound with a component name."""
    return structlog.get_logger(component=component)  # type: ignore[return-value]


def bind_resolution(namespace: str, kind: str, name: str) -> None:
    """Attach the key being resolved to every log line of the current task."""
    structlog.contextvars.bind_contextvars(namespace=namespace, kind=kind, name=name)


def clear_resolution() -> None:
    structlog.contextvars.unbind_contextvars("namespace", "kind", "name")
