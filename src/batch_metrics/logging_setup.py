"""structlog setup shared by the listener, exporter, scheduler and CLI."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, Dict

import structlog


def configure_logging(settings: Dict[str, Any]) -> None:
    """Route structlog events through stdlib logging using the ``logging`` config section.

    Parameters
    ----------
    settings:
        ``LoggingConfig.model_dump()``: ``level`` names the stdlib level, ``json_format``
        selects JSON over key/value lines (key/value output leads with the event and the
        job run identifier), and ``log_file`` adds a file handler next to stdout.
    """

    level_name = str(settings.get("level", "info")).upper()
    level = getattr(logging, level_name, logging.INFO)
    handlers: list[logging.Handler] = []

    if settings.get("json_format", True):
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.processors.KeyValueRenderer(
            key_order=["event", "level", "run_identifier"]
        )

    shared_processors = [
        structlog.processors.TimeStamper(key="timestamp", fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    log_file = settings.get("log_file")
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    handlers.append(logging.StreamHandler(sys.stdout))

    logging.basicConfig(level=level, handlers=handlers, format="%(message)s", force=True)

    structlog.configure(
        processors=shared_processors + [renderer],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = "batch_metrics") -> structlog.stdlib.BoundLogger:
    """Return a logger for a ``batch_metrics`` module; events use dotted names."""

    return structlog.get_logger(name)


__all__ = ["configure_logging", "get_logger"]
