"""Unified exception hierarchy for bizcore.

This module provides:
- Base exception hierarchy with stable error codes
- ``fail_closed`` decorator for authorization queries

Authorization decisions are never raised. Errors below are raised only at
construction time (grammar, strict role lookup, configuration) and are
recovered locally by the evaluator:

    from bizcore.exceptions import InvalidPermissionFormat

    try:
        permission = parse(token)
    except InvalidPermissionFormat:
        ...
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable, TypeVar, cast

__all__ = [
    # Base hierarchy
    "BizcoreError",
    "ConfigurationError",
    "InvalidPermissionFormat",
    "UnknownRoleError",
    # Query guard
    "fail_closed",
]

logger = logging.getLogger(__name__)


# ---- Exception Hierarchy ----------------------------------------------------


class BizcoreError(Exception):
    """Base exception for bizcore.

    Attributes:
        code: Stable error code string (e.g. "UNKNOWN_ROLE"), logged as ``error_code``.
        message: Human-readable error description.
        details: Additional context as keyword arguments.
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An internal error occurred"

    def __init__(self, message: str | None = None, code: str | None = None, **kwargs: Any) -> None:
        self.message = message or self.message
        self.code = code or self.code
        self.details = kwargs
        super().__init__(self.message)


class ConfigurationError(BizcoreError):
    """Invalid or missing configuration (including an incomplete role table)."""

    code: str = "CONFIGURATION_ERROR"


class InvalidPermissionFormat(BizcoreError, ValueError):
    """A permission token does not match the permission grammar."""

    code: str = "INVALID_PERMISSION_FORMAT"
    message: str = "Invalid permission format"


class UnknownRoleError(BizcoreError, LookupError):
    """A role identifier has no entry in the role default table."""

    code: str = "UNKNOWN_ROLE"
    message: str = "Unknown role"


# ---- Fail-closed query guard ------------------------------------------------

_F = TypeVar("_F", bound=Callable[..., Any])


def fail_closed(default: Any = False) -> Callable[[_F], _F]:
    """Decorator turning any exception raised by a query into ``default``.

    A callable ``default`` (e.g. ``list``) is called to build a fresh value.

    Authorization answers are values, never exceptions: an engine bug must
    surface as a deny, not as an unhandled error a caller could misread.

    Usage:
        @fail_closed(default=False)
        def has_permission(permissions, required):
            ...
    """

    def decorator(func: _F) -> _F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                error_code = getattr(e, "code", type(e).__name__)
                logger.exception(
                    "%s failed, denying: %s",
                    func.__name__,
                    e,
                    extra={"error_code": error_code},
                )
                return default() if callable(default) else default

        return cast(_F, wrapper)

    return decorator
