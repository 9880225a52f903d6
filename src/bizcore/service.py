"""Request/response schema for a standalone policy-evaluation service.

Wire contract::

    request  {"principal": {"role": ..., "permissions": [...]},
              "required": "crm:read" | ["crm:read", ...],
              "mode": "any" | "all"}
    response {"allowed": true | false}

Transport (HTTP, WebSocket, queue) is the embedding service's concern; this
module only validates payloads and answers them. Invalid payloads are denied.
"""

from __future__ import annotations

import logging
from typing import Any, Literal, Mapping, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from .logging import get_principal_logger, safe_preview
from .permissions.aggregator import Principal
from .permissions.context import AuthorizationContext

logger = logging.getLogger(__name__)


class AuthorizationRequest(BaseModel):
    """A single authorization question about a principal."""

    model_config = {"extra": "forbid"}

    principal: Principal
    required: Union[str, list[str]]
    mode: Literal["any", "all"] = Field(
        default="all",
        description="How a list of required permissions combines. Ignored for a single permission.",
    )

    @field_validator("principal", mode="before")
    @classmethod
    def lenient_principal(cls, v: Any) -> Any:
        # Raw identity payloads: malformed grants are dropped, not fatal.
        if isinstance(v, Mapping):
            return Principal.from_record(v)
        return v


class AuthorizationResponse(BaseModel):
    """Answer to an :class:`AuthorizationRequest`."""

    allowed: bool


class PolicyEvaluationService:
    """Answers authorization requests.

    Args:
        strict_roles: Override ``EngineConfig.strict_roles``. In strict mode an
            unknown role is still answered with a deny, and logged as an error.

    Example::

        service = PolicyEvaluationService()
        service.evaluate_payload({
            "principal": {"role": "sales"},
            "required": ["crm:customers:read", "crm:customers:delete"],
            "mode": "any",
        })
        # AuthorizationResponse(allowed=True)
    """

    def __init__(self, *, strict_roles: bool | None = None) -> None:
        self._strict_roles = strict_roles

    def evaluate(self, request: AuthorizationRequest) -> AuthorizationResponse:
        principal = request.principal
        log = get_principal_logger(__name__, role=principal.role, user_id=principal.user_id)
        try:
            ctx = AuthorizationContext.for_principal(principal, strict_roles=self._strict_roles)
        except LookupError as e:
            log.error("Denying request for unresolvable principal: %s", e)
            return AuthorizationResponse(allowed=False)

        if isinstance(request.required, str):
            allowed = ctx.has_permission(request.required)
        elif request.mode == "any":
            allowed = ctx.has_any_permission(request.required)
        else:
            allowed = ctx.has_all_permissions(request.required)

        log.debug("Evaluated %s (mode=%s): allowed=%s", safe_preview(request.required), request.mode, allowed)
        return AuthorizationResponse(allowed=allowed)

    def evaluate_payload(self, payload: Mapping[str, Any]) -> AuthorizationResponse:
        """Validate a raw payload and evaluate it. Invalid payloads are denied."""
        try:
            request = AuthorizationRequest.model_validate(payload)
        except ValidationError as e:
            logger.warning("Denying invalid authorization request: %d validation error(s)", e.error_count())
            return AuthorizationResponse(allowed=False)
        return self.evaluate(request)


__all__ = [
    "AuthorizationRequest",
    "AuthorizationResponse",
    "PolicyEvaluationService",
]
