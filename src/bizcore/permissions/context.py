"""Per-principal authorization context and its cache.

``AuthorizationContext`` binds the evaluator and capability functions to one
effective permission snapshot, so UI and route guards can call
``ctx.has_permission("orders:write")`` without passing the set around.

``PermissionCache`` recomputes the context only when a different principal
object is supplied (login, token refresh, pushed permission update).
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional, TypeVar

from .aggregator import EffectivePermissionSet, Principal, compute_effective
from .capabilities import CapabilityMap, module_permissions, submodule_permissions
from .constants import VisibilityScope
from .evaluator import (
    Requirement,
    can_view_all,
    filter_authorized,
    has_all_permissions,
    has_any_permission,
    has_permission,
    is_authorized,
)
from .grammar import PermissionLike

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


class AuthorizationContext:
    """Authorization queries bound to one effective permission snapshot.

    Args:
        effective: The snapshot to answer queries against.
        principal: The principal the snapshot was computed for, if any.

    Example::

        ctx = AuthorizationContext.for_principal(Principal(role="sales", user_id="u-7"))
        ctx.has_permission("crm:customers:read")        # True
        ctx.submodule_permissions("crm", "customers").write  # True
        ctx.visibility_scope()                          # VisibilityScope.OWN
    """

    __slots__ = ("_effective", "_principal")

    def __init__(self, effective: EffectivePermissionSet, principal: Principal | None = None) -> None:
        self._effective = effective
        self._principal = principal

    @classmethod
    def for_principal(cls, principal: Principal | None, *, strict_roles: bool | None = None) -> AuthorizationContext:
        return cls(compute_effective(principal, strict_roles=strict_roles), principal)

    @property
    def principal(self) -> Principal | None:
        return self._principal

    @property
    def permissions(self) -> EffectivePermissionSet:
        return self._effective

    def has_permission(self, required: PermissionLike) -> bool:
        return has_permission(self._effective, required)

    def has_any_permission(self, required: Iterable[PermissionLike]) -> bool:
        return has_any_permission(self._effective, required)

    def has_all_permissions(self, required: Iterable[PermissionLike]) -> bool:
        return has_all_permissions(self._effective, required)

    def can_view_all(self) -> bool:
        return can_view_all(self._effective)

    def module_permissions(self, module: str) -> CapabilityMap:
        return module_permissions(self._effective, module)

    def submodule_permissions(self, module: str, submodule: str) -> CapabilityMap:
        return submodule_permissions(self._effective, module, submodule)

    def is_authorized(self, requirement: Requirement) -> bool:
        return is_authorized(self._effective, requirement)

    def filter_authorized(self, items: Iterable[_T], key: Optional[Callable[[_T], Requirement]] = None) -> list[_T]:
        if key is None:
            return filter_authorized(self._effective, items)
        return filter_authorized(self._effective, items, key)

    def visibility_scope(self) -> VisibilityScope:
        """``ALL`` when the principal may see every record, else ``OWN``."""
        return VisibilityScope.ALL if self.can_view_all() else VisibilityScope.OWN

    def owner_filter(self) -> str | None:
        """User id to restrict listings to, or None for unrestricted listings.

        Principals without ``view_all`` and without a user id get an empty
        string, which matches no owner.
        """
        if self.can_view_all():
            return None
        if self._principal is None or not self._principal.user_id:
            return ""
        return self._principal.user_id

    def __repr__(self) -> str:
        role = self._principal.role if self._principal is not None else None
        return f"AuthorizationContext(role={role!r}, permissions={len(self._effective)})"


class PermissionCache:
    """Caller-managed cache of the current principal's context.

    The cached ``(principal, context)`` pair is replaced in a single
    assignment, so readers never see a context for a different principal.
    """

    __slots__ = ("_entry", "_strict_roles")

    def __init__(self, *, strict_roles: bool | None = None) -> None:
        self._entry: tuple[Principal | None, AuthorizationContext] | None = None
        self._strict_roles = strict_roles

    def get(self, principal: Principal | None) -> AuthorizationContext:
        """Return the context for ``principal``, recomputing on a new principal object."""
        entry = self._entry
        if entry is not None and entry[0] is principal:
            return entry[1]

        context = AuthorizationContext.for_principal(principal, strict_roles=self._strict_roles)
        self._entry = (principal, context)
        logger.debug(
            "Recomputed effective permissions for role=%s (%d permissions)",
            principal.role if principal is not None else None,
            len(context.permissions),
        )
        return context

    def invalidate(self) -> None:
        self._entry = None

    @property
    def current(self) -> AuthorizationContext | None:
        entry = self._entry
        return entry[1] if entry is not None else None


__all__ = [
    "AuthorizationContext",
    "PermissionCache",
]
