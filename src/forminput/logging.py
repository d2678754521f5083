"""Structlog configuration for package-wide logging.

Submitted values never reach the log output: the engine logs field names,
codes, counts and step names only, and `_redact_values` drops any payload key
that could carry user input.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

import structlog

from forminput.settings import Settings, get_settings

if TYPE_CHECKING:
    from structlog.typing import EventDict

_LOGGING_CONFIGURED = False
_REDACTED_KEYS = frozenset({"value", "values", "raw_value", "request"})


def _rename_event_key(
    logger: logging.Logger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    """Normalize structlog payload keys.

    Args:
        logger: The logger instance (unused).
        method_name: The logging method name (unused).
        event_dict: The original event dictionary.

    Returns:
        The modified event dictionary with "message" key instead of "event".
    """
    if "event" in event_dict:
        event_dict["message"] = event_dict.pop("event")
    return event_dict


def _redact_values(
    logger: logging.Logger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    """Drop payload keys that may hold submitted form data.

    Args:
        logger: The logger instance (unused).
        method_name: The logging method name (unused).
        event_dict: The original event dictionary.

    Returns:
        The event dictionary without value-carrying keys, including inside `extra`.
    """
    for key in _REDACTED_KEYS & event_dict.keys():
        event_dict[key] = "[redacted]"
    extra = event_dict.get("extra")
    if isinstance(extra, dict):
        event_dict["extra"] = {k: ("[redacted]" if k in _REDACTED_KEYS else v) for k, v in extra.items()}
    return event_dict


def _log_handlers(config: Settings) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        handlers.append(logging.FileHandler(config.log_file, encoding="utf-8"))
    return handlers


def _log_renderer(config: Settings) -> Any:
    if config.log_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def configure_logging(*, settings: Settings | None = None, force: bool = False) -> None:
    """Configure structlog and stdlib logging once for the package.

    Args:
        settings (Settings | None): Explicit settings, defaults to `get_settings()`.
        force (bool): Reconfigure even if logging was configured already.
    """
    global _LOGGING_CONFIGURED  # noqa: PLW0603

    if _LOGGING_CONFIGURED and not force:
        return

    config = settings or get_settings()
    log_level = logging.getLevelNamesMapping().get(config.log_level.upper(), logging.INFO)

    logging.basicConfig(level=log_level, format="%(message)s", handlers=_log_handlers(config), force=force)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            _redact_values,
            _rename_event_key,
            structlog.processors.format_exc_info,
            _log_renderer(config),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _LOGGING_CONFIGURED = True


def get_logger(name: str = "forminput", **context: Any) -> structlog.BoundLogger:
    """Return package logger, configuring logging lazily.

    Args:
        name (str): Logger name.
        **context (Any): Key/value pairs bound to every event of the logger.

    Returns:
        structlog.BoundLogger: Logger instance.
    """
    if not _LOGGING_CONFIGURED:
        configure_logging()
    logger = structlog.get_logger(name)
    return logger.bind(**context) if context else logger
