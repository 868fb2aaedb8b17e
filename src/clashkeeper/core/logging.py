"""Structured logging for ClashKeeper.

Engine modules log through ``get_logger(__name__)`` and never print. The
host process configures output once, normally through
``CommandDispatcher.from_settings``, which reads the level, renderer and
optional log file from ``Settings``. While a command runs the dispatcher
binds the acting combatant and verb, so every event emitted on its behalf
carries them.

Rendered events are handed to the stdlib ``clashkeeper`` logger, which
owns the stream and file handlers. Other libraries' loggers are left
alone apart from quieting requests and urllib3.

Usage:
    >>> from clashkeeper.core.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Clash started", combatants=3)
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

import structlog
from structlog.typing import EventDict, FilteringBoundLogger, Processor, WrappedLogger


ROOT_LOGGER_NAME = "clashkeeper"

# Chatty HTTP stack used by the sheet importer.
_QUIET_LIBRARIES = ("urllib3", "requests")


def _level_number(level: str | int) -> int:
    if isinstance(level, int):
        return level
    return logging.getLevelNamesMapping().get(level.upper(), logging.INFO)


def _app_tagger(app: str) -> Processor:
    def tag(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("app", app)
        return event_dict

    return tag


def _install_handlers(level: int, log_file: str | Path | None) -> None:
    app_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(logging.Formatter("%(message)s"))
        app_logger.addHandler(handler)

    app_logger.setLevel(level)
    app_logger.propagate = False


def configure_logging(
    level: str | int = "INFO",
    *,
    json_format: bool = False,
    log_file: str | Path | None = None,
    app: str = ROOT_LOGGER_NAME,
) -> None:
    """Configure structlog and the stdlib handlers behind it.

    Safe to call again; handlers from an earlier call are replaced.

    Args:
        level: Minimum level, by name or number. Unknown names mean INFO.
        json_format: Render one JSON object per line instead of console text.
        log_file: Also append rendered lines to this file.
        app: Value of the ``app`` key added to every event.

    Example:
        >>> configure_logging("DEBUG", json_format=True)
    """
    numeric_level = _level_number(level)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _app_tagger(app),
        structlog.processors.StackInfoRenderer(),
    ]
    if json_format:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(sort_keys=True),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # A later dispatcher may reconfigure; loggers must not keep the old chain.
        cache_logger_on_first_use=False,
    )

    _install_handlers(numeric_level, log_file)
    for name in _QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))


def get_logger(name: str | None = None) -> FilteringBoundLogger:
    """Logger for ``name``, normally the calling module's ``__name__``."""
    return structlog.get_logger(name or ROOT_LOGGER_NAME)


def bind_context(**kwargs: Any) -> None:
    """Bind key/value pairs to every event until ``clear_context``.

    Example:
        >>> bind_context(acting_id="1234", verb="gmattack")
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Drop everything bound by ``bind_context``."""
    structlog.contextvars.clear_contextvars()


__all__ = [
    "ROOT_LOGGER_NAME",
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
]
