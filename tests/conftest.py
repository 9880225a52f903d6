"""Shared fixtures for bizcore tests."""

from __future__ import annotations

import logging
from typing import Iterator

import pytest

from bizcore import EngineConfig, PermissionLogFormatter, set_config


@pytest.fixture(autouse=True)
def engine_config() -> Iterator[EngineConfig]:
    """Pin a default config so environment variables do not leak into tests."""
    config = EngineConfig()
    set_config(config)
    yield config
    set_config(None)


@pytest.fixture
def restore_root_logger() -> Iterator[None]:
    """Drop handlers installed by setup_logging() and restore the root level."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in root.handlers[:]:
        if isinstance(handler.formatter, PermissionLogFormatter):
            root.removeHandler(handler)
    root.setLevel(level)
