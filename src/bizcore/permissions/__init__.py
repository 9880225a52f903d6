"""Hierarchical permission resolution for bizcore.

Defines:
- Permission grammar: ``Permission``, ``parse()``, ``to_string()``
- Role, module and action constants
- ROLE_DEFAULTS: Role → default permission sets
- compute_effective(): role defaults ∪ individual grants
- Evaluator: has_permission(), has_any_permission(), has_all_permissions(), can_view_all()
- Capability maps: module_permissions(), submodule_permissions()
- AuthorizationContext / PermissionCache: per-principal bound queries
"""

from .aggregator import EffectivePermissionSet, Principal, compute_effective
from .capabilities import (
    CAPABILITY_ACTIONS,
    CapabilityMap,
    module_permissions,
    submodule_permissions,
)
from .constants import Actions, Modules, Permissions, Role, VisibilityScope
from .context import AuthorizationContext, PermissionCache
from .evaluator import (
    can_view_all,
    filter_authorized,
    has_all_permissions,
    has_any_permission,
    has_permission,
    is_authorized,
)
from .grammar import (
    Permission,
    PermissionKind,
    is_valid,
    parse,
    parse_many,
    to_string,
)
from .roles import (
    ROLE_DEFAULTS,
    ROLE_PERMISSION_TABLE,
    check_role_table,
    defaults_for,
)

__all__ = [
    "CAPABILITY_ACTIONS",
    "ROLE_DEFAULTS",
    "ROLE_PERMISSION_TABLE",
    "Actions",
    "AuthorizationContext",
    "CapabilityMap",
    "EffectivePermissionSet",
    "Modules",
    "Permission",
    "PermissionCache",
    "PermissionKind",
    "Permissions",
    "Principal",
    "Role",
    "VisibilityScope",
    "can_view_all",
    "check_role_table",
    "compute_effective",
    "defaults_for",
    "filter_authorized",
    "has_all_permissions",
    "has_any_permission",
    "has_permission",
    "is_authorized",
    "is_valid",
    "module_permissions",
    "parse",
    "parse_many",
    "submodule_permissions",
    "to_string",
]
