"""Configuration contract for the bizcore permission engine.

This module provides a Pydantic-validated configuration model covering the
engine's ambient settings (LOG_LEVEL, LOG_JSON, ...) and its two policy
switches: how unknown roles are handled and whether denials are logged.

Callers either pass an ``EngineConfig`` explicitly or rely on the
process-wide instance from :func:`get_config`, which is loaded from the
environment on first use.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class LogLevel(str, Enum):
    """Standard log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EngineConfig(BaseModel):
    """Configuration for the permission engine.

    Environment variables:
        LOG_LEVEL                  — logging level (default: INFO)
        LOG_JSON                   — JSON log format (default: false)
        SERVICE_NAME               — logger name for the embedding service
        PERMISSIONS_STRICT_ROLES   — raise UnknownRoleError for unknown roles
        PERMISSIONS_LOG_DENIALS    — log every denied query at DEBUG
    """

    # Logging
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level for the engine",
    )
    log_json: bool = Field(
        default=False,
        description="Use JSON log format (default: plain text)",
    )
    service_name: Optional[str] = Field(
        default=None,
        description="Service name for logger identification (e.g. 'crm-api')",
    )

    # Policy switches
    strict_roles: bool = Field(
        default=False,
        description=(
            "Unknown roles raise UnknownRoleError. Disabled = unknown roles resolve to an empty default set."
        ),
    )
    log_denials: bool = Field(
        default=False,
        description="Log denied authorization queries at DEBUG level",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Convert string to LogLevel enum."""
        if isinstance(v, LogLevel):
            return v
        if isinstance(v, str):
            try:
                return LogLevel[v.upper()]
            except KeyError:
                raise ValueError(f"Invalid log level: {v}. Must be one of {[e.value for e in LogLevel]}")
        raise ValueError(f"Log level must be string or LogLevel enum, got {type(v)}")

    model_config = {
        "use_enum_values": True,
        "extra": "forbid",
    }


_TRUTHY = ("true", "1", "yes", "on")


def load_config_from_env() -> EngineConfig:
    """Load engine configuration from environment variables.

    This is the ONLY place where os.getenv is allowed for engine settings.

    Returns:
        EngineConfig instance with values from environment or defaults.
    """
    import os

    return EngineConfig(
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_json=os.getenv("LOG_JSON", "false").lower() in _TRUTHY,
        service_name=os.getenv("SERVICE_NAME"),
        strict_roles=os.getenv("PERMISSIONS_STRICT_ROLES", "false").lower() in _TRUTHY,
        log_denials=os.getenv("PERMISSIONS_LOG_DENIALS", "false").lower() in _TRUTHY,
    )


_config: EngineConfig | None = None


def get_config() -> EngineConfig:
    """Return the process-wide config, loading it from the environment once."""
    global _config
    if _config is None:
        _config = load_config_from_env()
    return _config


def set_config(config: EngineConfig | None) -> None:
    """Replace the process-wide config. ``None`` reloads from env on next use."""
    global _config
    _config = config


__all__ = [
    "EngineConfig",
    "LogLevel",
    "get_config",
    "load_config_from_env",
    "set_config",
]
