"""Tests for bizcore.logging module."""

from __future__ import annotations

import json
import logging

import pytest

from bizcore import (
    EngineConfig,
    LogLevel,
    PermissionLogFormatter,
    get_principal_logger,
    safe_preview,
    setup_logging,
)


class TestSafePreview:
    """Tests for safe_preview function."""

    def test_none_value(self) -> None:
        assert safe_preview(None) == ""

    def test_string_is_quoted(self) -> None:
        """Strings are shown with repr so whitespace is visible."""
        assert safe_preview("crm: read") == "'crm: read'"

    def test_string_with_newlines(self) -> None:
        assert "\n" not in safe_preview("crm:read\nadmin:*")

    def test_truncation(self) -> None:
        result = safe_preview("a" * 300, limit=50)
        assert len(result) == 50
        assert result.endswith("…")

    def test_set_is_sorted(self) -> None:
        assert safe_preview(frozenset({"orders:read", "crm:read"})) == '["crm:read", "orders:read"]'

    def test_list_value(self) -> None:
        assert "crm:read" in safe_preview(["crm:read", 1])


class TestFormatter:
    """Tests for PermissionLogFormatter."""

    def _record(self, **extra: object) -> logging.LogRecord:
        record = logging.LogRecord("bizcore.test", logging.INFO, __file__, 1, "checked %s", ("crm:read",), None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_json_includes_principal(self) -> None:
        formatter = PermissionLogFormatter(json_format=True)
        data = json.loads(formatter.format(self._record(role="sales", user_id="u-1", error_code="X")))
        assert data["message"] == "checked crm:read"
        assert data["role"] == "sales"
        assert data["user_id"] == "u-1"
        assert data["error_code"] == "'X'"

    def test_plain_text(self) -> None:
        formatter = PermissionLogFormatter(json_format=False)
        line = formatter.format(self._record(role="sales"))
        assert "INFO" in line
        assert "role=sales" in line
        assert line.endswith(": checked crm:read")

    def test_principal_can_be_excluded(self) -> None:
        formatter = PermissionLogFormatter(include_principal=False, json_format=True)
        data = json.loads(formatter.format(self._record(role="sales")))
        assert "role" not in data


@pytest.mark.usefixtures("restore_root_logger")
class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_with_config(self) -> None:
        setup_logging(config=EngineConfig(log_level=LogLevel.DEBUG), json_format=False)
        assert logging.getLogger().level == logging.DEBUG

    def test_setup_uses_process_config(self, engine_config: EngineConfig) -> None:
        setup_logging()
        assert logging.getLogger().level == logging.INFO

    def test_json_format(self, capsys: pytest.CaptureFixture) -> None:
        setup_logging(config=EngineConfig(log_level=LogLevel.INFO, log_json=True))

        logging.getLogger("test").info("Test message")

        stderr_output = capsys.readouterr().err.strip()
        data = json.loads(stderr_output)
        assert data["level"] == "INFO"
        assert data["message"] == "Test message"
        assert data["logger"] == "test"

    def test_plain_format(self, capsys: pytest.CaptureFixture) -> None:
        setup_logging(config=EngineConfig(log_level=LogLevel.INFO), json_format=False)

        logging.getLogger("test").info("Test message")

        stderr_output = capsys.readouterr().err.strip()
        assert "Test message" in stderr_output
        assert not stderr_output.startswith("{")

    def test_service_logger_level(self) -> None:
        setup_logging(config=EngineConfig(log_level=LogLevel.WARNING, service_name="crm-api"))
        assert logging.getLogger("crm-api").level == logging.WARNING


class TestPrincipalLogger:
    """Tests for the principal logger adapter."""

    def test_adds_principal_fields(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = get_principal_logger("bizcore.test", role="sales", user_id="u-1")
        with caplog.at_level(logging.INFO):
            logger.info("Rendering customers")
        record = caplog.records[0]
        assert record.role == "sales"
        assert record.user_id == "u-1"

    def test_per_call_override(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = get_principal_logger("bizcore.test", role="sales")
        with caplog.at_level(logging.INFO):
            logger.info("Switched", role="manager")
        assert caplog.records[0].role == "manager"
        assert not hasattr(caplog.records[0], "user_id")

    def test_caller_extra_not_mutated(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = get_principal_logger("bizcore.test", role="sales", user_id="u-1")
        caller_extra = {"error_code": "UNKNOWN_ROLE"}
        with caplog.at_level(logging.INFO):
            logger.info("Denied", extra=caller_extra)
        assert caller_extra == {"error_code": "UNKNOWN_ROLE"}
        assert caplog.records[0].error_code == "UNKNOWN_ROLE"
        assert caplog.records[0].role == "sales"
