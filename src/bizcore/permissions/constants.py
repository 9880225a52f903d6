"""Role, module and action constants for bizcore.

Provides:
- ``Role`` — closed set of role identifiers.
- ``Modules`` — application module names.
- ``Actions`` — action names, including the capability actions.
- ``Permissions`` — well-known tokens and builders (``module:action`` format).
- ``VisibilityScope`` — data-scoping result derived from ``view_all``.
"""

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Role identifiers.

    Every member must have an entry in :data:`~bizcore.permissions.roles.ROLE_DEFAULTS`;
    the table is checked for exhaustiveness at import.
    """

    ADMIN = "admin"
    MANAGER = "manager"
    SALES = "sales"
    OPERATOR = "operator"
    ACCOUNTANT = "accountant"
    VIEWER = "viewer"

    @classmethod
    def from_value(cls, value: object) -> Role | None:
        """Look up a role by its exact identifier. Unknown → None.

        Identifiers are matched verbatim: ``"Admin"`` and ``" admin"`` are not
        ``Role.ADMIN``.
        """
        if isinstance(value, Role):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value)
        except ValueError:
            return None


class Modules:
    """Application modules."""

    CRM = "crm"
    ORDERS = "orders"
    TASKS = "tasks"
    PRODUCTS = "products"
    ACCOUNTING = "accounting"
    REPORTS = "reports"
    USERS = "users"

    ALL = frozenset({CRM, ORDERS, TASKS, PRODUCTS, ACCOUNTING, REPORTS, USERS})


class Actions:
    """Action names."""

    # Capability actions (summarized in CapabilityMap)
    READ = "read"
    WRITE = "write"
    DELETE = "delete"
    EXPORT = "export"
    ASSIGN = "assign"
    APPROVE = "approve"
    MANAGE = "manage"

    # Module-specific actions seen in role defaults
    COMPLETE = "complete"
    CREATE = "create"
    INVITE = "invite"
    REPORTS = "reports"
    MANAGE_INVENTORY = "manage_inventory"

    CAPABILITIES = (READ, WRITE, DELETE, EXPORT, ASSIGN, APPROVE, MANAGE)


class Permissions:
    """Well-known permission tokens and builders.

    Format: ``{module}:{action}`` or ``{module}:{submodule}:{action}``::

        Permissions.of("crm", "read")                   → "crm:read"
        Permissions.of("crm", "read", "customers")      → "crm:customers:read"
        Permissions.all_of("crm")                       → "crm:*"
    """

    ALL = "*"
    ADMIN_ALL = "admin:*"
    VIEW_ALL = "view_all"
    VIEW_ALL_GLOBAL = "*:view_all"

    @staticmethod
    def of(module: str, action: str, submodule: str | None = None) -> str:
        """Build a permission string, optionally scoped to a submodule."""
        if submodule:
            return f"{module}:{submodule}:{action}"
        return f"{module}:{action}"

    @staticmethod
    def all_of(module: str, submodule: str | None = None) -> str:
        """Build a wildcard permission for a module or submodule."""
        return Permissions.of(module, "*", submodule)


class VisibilityScope(str, Enum):
    """Which records a principal may list."""

    ALL = "all"  # view_all granted
    OWN = "own"  # only records owned by the principal


__all__ = [
    "Actions",
    "Modules",
    "Permissions",
    "Role",
    "VisibilityScope",
]
