"""Principal model and effective permission aggregation.

The effective set of a principal is ``defaults_for(role) ∪ permissions``.
Only the union is ever applied: revoking access means supplying a different
principal, never subtracting from a computed set.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Iterator, Mapping, Optional

from pydantic import BaseModel, Field, field_validator

from ..logging import safe_preview
from .constants import Role
from .grammar import Permission, PermissionLike, parse_many
from .roles import defaults_for

logger = logging.getLogger(__name__)


class Principal(BaseModel):
    """User record as supplied by the identity provider.

    Attributes:
        role: Role identifier, kept verbatim. Identifiers outside the role
            table (including case variants such as ``"Admin"``) are accepted
            here and resolved by the unknown-role policy.
        permissions: Individually granted permissions on top of the role.
        user_id: Identity of the user, used for data scoping and logs.

    Direct construction validates every grant and rejects malformed tokens.
    Use :meth:`from_record` for raw payloads where a bad grant should be
    dropped rather than fail the whole record.
    """

    model_config = {"frozen": True, "arbitrary_types_allowed": True, "extra": "ignore"}

    role: str
    permissions: frozenset[Permission] = Field(default_factory=frozenset)
    user_id: Optional[str] = None

    @field_validator("role", mode="before")
    @classmethod
    def validate_role(cls, v: Any) -> str:
        if not isinstance(v, str):
            raise ValueError(f"Role must be a string, got {type(v).__name__}")
        if isinstance(v, Role):
            return v.value
        return v

    @field_validator("permissions", mode="before")
    @classmethod
    def parse_permissions(cls, v: Any) -> frozenset[Permission]:
        if v is None:
            return frozenset()
        if isinstance(v, (str, bytes)):
            raise ValueError("Permissions must be a list of tokens, not a single string")
        return parse_many(v)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Principal:
        """Build a principal from a ``{role, permissions?, user_id?}`` payload.

        Malformed grants are logged and dropped (they could only ever deny).
        """
        role = record.get("role")
        raw_permissions = record.get("permissions") or ()
        if isinstance(raw_permissions, (str, bytes)) or not isinstance(raw_permissions, Iterable):
            logger.warning("Ignoring non-list permissions on principal record: %s", safe_preview(raw_permissions))
            raw_permissions = ()

        user_id = record.get("user_id")
        return cls(
            role=role if isinstance(role, str) else "",
            permissions=parse_many(raw_permissions, strict=False),
            user_id=str(user_id) if user_id is not None else None,
        )


class EffectivePermissionSet:
    """Immutable snapshot of a principal's effective permissions.

    Membership accepts either a token string or a ``Permission``::

        effective = compute_effective(Principal(role="viewer"))
        "crm:read" in effective                               # True
        Permission.module_action("crm", "write") in effective  # False
    """

    __slots__ = ("_permissions", "_tokens")

    def __init__(self, permissions: Iterable[PermissionLike] = ()) -> None:
        parsed = parse_many(permissions)
        object.__setattr__(self, "_permissions", parsed)
        object.__setattr__(self, "_tokens", frozenset(p.token for p in parsed))

    @classmethod
    def empty(cls) -> EffectivePermissionSet:
        return cls(())

    @property
    def permissions(self) -> frozenset[Permission]:
        return self._permissions

    @property
    def tokens(self) -> frozenset[str]:
        return self._tokens

    def union(self, *others: Iterable[PermissionLike]) -> EffectivePermissionSet:
        """Return a new set containing this set's and ``others``' permissions."""
        merged = set(self._permissions)
        for other in others:
            merged |= other.permissions if isinstance(other, EffectivePermissionSet) else parse_many(other)
        return EffectivePermissionSet(merged)

    def to_list(self) -> list[str]:
        """Sorted token list, e.g. for serialization."""
        return sorted(self._tokens)

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError(f"EffectivePermissionSet is immutable (cannot set {name!r})")

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Permission):
            return item in self._permissions
        if isinstance(item, str):
            return item in self._tokens
        return False

    def __iter__(self) -> Iterator[Permission]:
        return iter(sorted(self._permissions))

    def __len__(self) -> int:
        return len(self._permissions)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, EffectivePermissionSet):
            return self._permissions == other._permissions
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._permissions)

    def __repr__(self) -> str:
        return f"EffectivePermissionSet({self.to_list()!r})"


def compute_effective(
    principal: Principal | None,
    *,
    strict_roles: bool | None = None,
) -> EffectivePermissionSet:
    """Compute ``defaults_for(principal.role) ∪ principal.permissions``.

    Args:
        principal: The principal, or None when no user is logged in (empty set).
        strict_roles: Override ``EngineConfig.strict_roles`` for unknown roles.

    Returns:
        A fresh EffectivePermissionSet. Calling twice on an unchanged
        principal yields equal sets.
    """
    if principal is None:
        return EffectivePermissionSet.empty()
    return EffectivePermissionSet(defaults_for(principal.role, strict=strict_roles) | principal.permissions)


__all__ = [
    "EffectivePermissionSet",
    "Principal",
    "compute_effective",
]
