"""Centralized logging utilities for bizcore.

This module provides:
- Logging configuration from EngineConfig
- Safe preview utilities for untrusted tokens
- Structured logging with principal context (role, user_id)
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from .config import EngineConfig, LogLevel

# Attributes every LogRecord carries; anything else is an ``extra`` field.
_RESERVED_ATTRS = frozenset(
    {
        "name", "msg", "args", "created", "filename", "funcName",
        "levelname", "levelno", "lineno", "module", "msecs",
        "message", "pathname", "process", "processName", "relativeCreated",
        "thread", "threadName", "exc_info", "exc_text", "stack_info",
        "taskName", "role", "user_id",
    }
)


def safe_preview(value: Any, limit: int = 120) -> str:
    """Create a safe, length-bounded, single-line preview of a value.

    Permission tokens come from identity-provider payloads and UI call sites,
    so they are previewed rather than logged verbatim.

    Args:
        value: The value to preview (any type)
        limit: Maximum length of the preview (default: 120)

    Returns:
        A safe, truncated string representation
    """
    if value is None:
        return ""

    if isinstance(value, str):
        s = repr(value)
    elif isinstance(value, (set, frozenset)):
        s = json.dumps(sorted(map(str, value)), ensure_ascii=False)
    elif isinstance(value, (dict, list, tuple)):
        try:
            s = json.dumps(value, default=str, ensure_ascii=False)
        except (TypeError, ValueError):
            s = str(value)
    else:
        s = str(value)

    s = " ".join(s.split())

    if len(s) > limit:
        return s[: limit - 1] + "…"

    return s


class PermissionLogFormatter(logging.Formatter):
    """Formatter that includes principal context and optional JSON output."""

    def __init__(
        self,
        include_principal: bool = True,
        json_format: bool = True,
        *args: Any,
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        self.include_principal = include_principal
        self.json_format = json_format

    def format(self, record: logging.LogRecord) -> str:
        role = getattr(record, "role", None)
        user_id = getattr(record, "user_id", None)

        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_principal:
            if role:
                log_data["role"] = role
            if user_id:
                log_data["user_id"] = user_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = safe_preview(value)

        if self.json_format:
            return json.dumps(log_data, default=str, ensure_ascii=False)

        parts = [
            f"[{log_data['timestamp']}]",
            f"{log_data['level']}",
            f"{log_data['logger']}",
        ]
        if self.include_principal and role:
            parts.append(f"role={role}")
        if self.include_principal and user_id:
            parts.append(f"user_id={user_id}")
        parts.append(f": {log_data['message']}")
        if "exception" in log_data:
            parts.append(f"\n{log_data['exception']}")
        return " ".join(parts)


class PrincipalLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds ``role`` and ``user_id`` to log records.

    Usage:
        logger = get_principal_logger(__name__, role="sales", user_id="u-42")
        logger.info("Rendering customer list")
    """

    def __init__(
        self,
        logger: logging.Logger,
        role: Optional[str] = None,
        user_id: Optional[str] = None,
    ):
        super().__init__(logger, {})
        self.role = role
        self.user_id = user_id

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        role = kwargs.pop("role", self.role)
        user_id = kwargs.pop("user_id", self.user_id)

        extra = dict(kwargs.get("extra") or {})
        if role:
            extra["role"] = role
        if user_id:
            extra["user_id"] = user_id
        kwargs["extra"] = extra

        return msg, kwargs


def setup_logging(
    config: Optional[EngineConfig] = None,
    json_format: Optional[bool] = None,
) -> None:
    """Configure logging for a service embedding the engine.

    Args:
        config: EngineConfig instance (if None, uses the process-wide config)
        json_format: Override ``config.log_json``
    """
    if config is None:
        from .config import get_config

        config = get_config()

    level_map = {
        LogLevel.DEBUG: logging.DEBUG,
        LogLevel.INFO: logging.INFO,
        LogLevel.WARNING: logging.WARNING,
        LogLevel.ERROR: logging.ERROR,
        LogLevel.CRITICAL: logging.CRITICAL,
    }
    log_level = level_map.get(config.log_level, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(
        PermissionLogFormatter(
            include_principal=True,
            json_format=config.log_json if json_format is None else json_format,
        )
    )
    root_logger.addHandler(console_handler)

    if config.service_name:
        logging.getLogger(config.service_name).setLevel(log_level)


def get_principal_logger(
    name: str,
    role: Optional[str] = None,
    user_id: Optional[str] = None,
) -> PrincipalLoggerAdapter:
    """Get a logger adapter bound to a principal's role and user id."""
    logger = logging.getLogger(name)
    return PrincipalLoggerAdapter(logger, role=role, user_id=user_id)


__all__ = [
    "safe_preview",
    "PermissionLogFormatter",
    "PrincipalLoggerAdapter",
    "setup_logging",
    "get_principal_logger",
]
