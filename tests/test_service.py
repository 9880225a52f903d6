"""Tests for the policy evaluation request/response schema."""

from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from bizcore import (
    AuthorizationRequest,
    AuthorizationResponse,
    PolicyEvaluationService,
    Principal,
    parse,
)


class TestAuthorizationRequest:
    def test_principal_from_raw_record(self) -> None:
        """Raw principal payloads are parsed leniently."""
        request = AuthorizationRequest.model_validate(
            {"principal": {"role": "viewer", "permissions": ["orders:write", "BAD"]}, "required": "orders:write"}
        )
        assert request.principal.role == "viewer"
        assert request.principal.permissions == frozenset({parse("orders:write")})
        assert request.mode == "all"

    def test_principal_instance(self) -> None:
        request = AuthorizationRequest(principal=Principal(role="sales"), required=["crm:read"], mode="any")
        assert request.required == ["crm:read"]

    def test_invalid_mode(self) -> None:
        with pytest.raises(ValidationError):
            AuthorizationRequest.model_validate({"principal": {"role": "sales"}, "required": "crm:read", "mode": "some"})


class TestPolicyEvaluationService:
    def test_single_permission(self) -> None:
        service = PolicyEvaluationService()
        request = AuthorizationRequest(principal=Principal(role="operator"), required="tasks:complete")
        assert service.evaluate(request) == AuthorizationResponse(allowed=True)

    def test_any_mode(self) -> None:
        response = PolicyEvaluationService().evaluate_payload(
            {
                "principal": {"role": "sales"},
                "required": ["crm:customers:read", "crm:customers:delete"],
                "mode": "any",
            }
        )
        assert response.allowed is True

    def test_all_mode(self) -> None:
        response = PolicyEvaluationService().evaluate_payload(
            {
                "principal": {"role": "sales"},
                "required": ["crm:customers:read", "crm:customers:delete"],
                "mode": "all",
            }
        )
        assert response.allowed is False

    def test_empty_lists(self) -> None:
        service = PolicyEvaluationService()
        assert service.evaluate_payload({"principal": {"role": "viewer"}, "required": [], "mode": "all"}).allowed
        assert not service.evaluate_payload({"principal": {"role": "viewer"}, "required": [], "mode": "any"}).allowed

    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"principal": {"role": "admin"}},
            {"principal": {"role": "admin"}, "required": 42},
            {"principal": "admin", "required": "crm:read"},
            {"principal": {"role": "admin"}, "required": "crm:read", "extra": True},
        ],
    )
    def test_invalid_payload_denied(self, payload: dict, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            response = PolicyEvaluationService().evaluate_payload(payload)
        assert response.allowed is False
        assert "Denying invalid authorization request" in caplog.text

    def test_malformed_required_denied(self) -> None:
        response = PolicyEvaluationService().evaluate_payload({"principal": {"role": "admin"}, "required": "a:b:c:d"})
        assert response.allowed is False

    def test_unknown_role_strict_denies(self, caplog: pytest.LogCaptureFixture) -> None:
        service = PolicyEvaluationService(strict_roles=True)
        with caplog.at_level(logging.ERROR):
            response = service.evaluate_payload(
                {"principal": {"role": "intern", "permissions": ["crm:read"]}, "required": "crm:read"}
            )
        assert response.allowed is False
        assert "unresolvable principal" in caplog.text

    def test_unknown_role_lenient_uses_grants(self) -> None:
        response = PolicyEvaluationService().evaluate_payload(
            {"principal": {"role": "intern", "permissions": ["crm:read"]}, "required": "crm:read"}
        )
        assert response.allowed is True

    @pytest.mark.parametrize("role", ["Admin", "ADMIN", " admin "])
    def test_admin_case_variant_denied(self, role: str) -> None:
        payload = {"principal": {"role": role}, "required": "users:delete"}
        assert PolicyEvaluationService(strict_roles=True).evaluate_payload(payload).allowed is False
        assert PolicyEvaluationService().evaluate_payload(payload).allowed is False
