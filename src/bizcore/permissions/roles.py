"""Role default table.

Provides:
- ``ROLE_PERMISSION_TABLE`` — role → default permission tokens (policy data).
- ``ROLE_DEFAULTS`` — the same table parsed into validated permissions.
- ``defaults_for()`` — lookup honoring the unknown-role policy.
- ``check_role_table()`` — exhaustiveness check, run at import.

Role defaults are the baseline only; individually granted permissions on the
principal are added on top by the aggregator.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Mapping

from ..config import get_config
from ..exceptions import ConfigurationError, UnknownRoleError
from ..logging import safe_preview
from .constants import Actions, Modules, Permissions, Role
from .grammar import Permission, parse_many

logger = logging.getLogger(__name__)

# ── Role → Permission Table ─────────────────────────────


def _grants(module: str, *actions: str, submodule: str | None = None) -> tuple[str, ...]:
    return tuple(Permissions.of(module, action, submodule) for action in actions)


ROLE_PERMISSION_TABLE: Mapping[Role, tuple[str, ...]] = MappingProxyType(
    {
        Role.ADMIN: (
            Permissions.ALL,
            Permissions.VIEW_ALL,
            Permissions.VIEW_ALL_GLOBAL,
        ),
        Role.MANAGER: (
            *_grants(Modules.CRM, Actions.READ, Actions.WRITE, Actions.EXPORT, Actions.ASSIGN),
            *_grants(Modules.ORDERS, Actions.READ, Actions.WRITE, Actions.ASSIGN, Actions.APPROVE),
            *_grants(Modules.TASKS, Actions.READ, Actions.WRITE, Actions.ASSIGN, Actions.COMPLETE),
            *_grants(Modules.PRODUCTS, Actions.READ, Actions.WRITE, Actions.MANAGE_INVENTORY),
            *_grants(Modules.ACCOUNTING, Actions.READ, Actions.REPORTS),
            *_grants(Modules.REPORTS, Actions.READ, Actions.CREATE, Actions.EXPORT),
            *_grants(Modules.USERS, Actions.READ, Actions.WRITE, Actions.INVITE),
            Permissions.VIEW_ALL,
        ),
        # No view_all: sales users only see their own records.
        Role.SALES: (
            *_grants(Modules.CRM, Actions.READ, Actions.WRITE, Actions.EXPORT, submodule="customers"),
            *_grants(Modules.CRM, Actions.READ, Actions.WRITE, submodule="interactions"),
            *_grants(Modules.ORDERS, Actions.READ, Actions.WRITE),
            *_grants(Modules.TASKS, Actions.READ, Actions.WRITE),
            Permissions.of(Modules.PRODUCTS, Actions.READ),
            Permissions.of(Modules.REPORTS, Actions.READ),
        ),
        Role.OPERATOR: (
            Permissions.of(Modules.CRM, Actions.READ),
            Permissions.of(Modules.ORDERS, Actions.READ),
            *_grants(Modules.TASKS, Actions.READ, Actions.WRITE, Actions.COMPLETE),
            Permissions.of(Modules.PRODUCTS, Actions.READ),
        ),
        Role.ACCOUNTANT: (
            Permissions.of(Modules.CRM, Actions.READ),
            Permissions.of(Modules.ORDERS, Actions.READ),
            *_grants(Modules.ACCOUNTING, Actions.READ, Actions.WRITE, Actions.REPORTS),
            *_grants(Modules.REPORTS, Actions.READ, Actions.CREATE, Actions.EXPORT),
            Permissions.VIEW_ALL,
        ),
        Role.VIEWER: tuple(
            Permissions.of(module, Actions.READ)
            for module in (
                Modules.CRM,
                Modules.ORDERS,
                Modules.TASKS,
                Modules.PRODUCTS,
                Modules.ACCOUNTING,
                Modules.REPORTS,
            )
        ),
    }
)


def check_role_table(table: Mapping[Role, tuple[str, ...]] = ROLE_PERMISSION_TABLE) -> dict[Role, frozenset[Permission]]:
    """Validate a role table and parse it.

    Raises:
        ConfigurationError: if a ``Role`` has no entry, the admin role lacks
            the global wildcard, or a token is malformed.
    """
    missing = [role.value for role in Role if role not in table]
    if missing:
        raise ConfigurationError(f"Role table has no entry for: {', '.join(missing)}", missing=missing)

    parsed: dict[Role, frozenset[Permission]] = {}
    for role, tokens in table.items():
        try:
            parsed[role] = parse_many(tokens)
        except ValueError as e:
            raise ConfigurationError(f"Role table entry for {role.value!r} is invalid: {e}", role=role.value) from e

    admin_tokens = {str(p) for p in parsed[Role.ADMIN]}
    if not {Permissions.ALL, Permissions.VIEW_ALL_GLOBAL} <= admin_tokens:
        raise ConfigurationError("Admin role must include '*' and '*:view_all'")

    return parsed


ROLE_DEFAULTS: Mapping[Role, frozenset[Permission]] = MappingProxyType(check_role_table())


def defaults_for(role: Role | str, *, strict: bool | None = None) -> frozenset[Permission]:
    """Return the default permission set for a role.

    Args:
        role: A ``Role`` or an exact role identifier string.
        strict: Raise for unknown roles instead of returning an empty set.
            Defaults to ``EngineConfig.strict_roles``.

    Raises:
        UnknownRoleError: unknown role in strict mode.

    Example::

        Permission.module_action("crm", "read") in defaults_for("viewer")  # True
        defaults_for("intern")  # frozenset() (logged)
    """
    resolved = Role.from_value(role)
    if resolved is not None:
        return ROLE_DEFAULTS[resolved]

    if strict is None:
        strict = get_config().strict_roles
    if strict:
        raise UnknownRoleError(f"Unknown role: {safe_preview(role)}", role=safe_preview(role))

    logger.warning("Unknown role %s resolves to no default permissions", safe_preview(role))
    return frozenset()


__all__ = [
    "ROLE_DEFAULTS",
    "ROLE_PERMISSION_TABLE",
    "check_role_table",
    "defaults_for",
]
