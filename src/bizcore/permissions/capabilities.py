"""Per-module capability maps for UI gating.

A ``CapabilityMap`` answers, for one module (or submodule), which of the
standard actions ``read, write, delete, export, assign, approve, manage``
are granted, so callers do not build permission strings by hand.
"""

from __future__ import annotations

from pydantic import BaseModel

from .constants import Actions, Permissions
from .evaluator import PermissionSetLike, as_effective_set, has_permission

CAPABILITY_ACTIONS: tuple[str, ...] = Actions.CAPABILITIES


class CapabilityMap(BaseModel):
    """Granted capability actions for a module or submodule."""

    model_config = {"frozen": True}

    read: bool = False
    write: bool = False
    delete: bool = False
    export: bool = False
    assign: bool = False
    approve: bool = False
    manage: bool = False

    @classmethod
    def none(cls) -> CapabilityMap:
        return cls()

    def granted(self) -> tuple[str, ...]:
        """Granted actions, in ``CAPABILITY_ACTIONS`` order."""
        return tuple(action for action in CAPABILITY_ACTIONS if getattr(self, action))


def module_permissions(permissions: PermissionSetLike, module: str) -> CapabilityMap:
    """Capability map for ``module``: each entry is ``has_permission(module:action)``.

    Example::

        caps = module_permissions(compute_effective(Principal(role="viewer")), "crm")
        caps.read   # True
        caps.write  # False
    """
    effective = as_effective_set(permissions)
    return CapabilityMap(
        **{action: has_permission(effective, Permissions.of(module, action)) for action in CAPABILITY_ACTIONS}
    )


def submodule_permissions(permissions: PermissionSetLike, module: str, submodule: str) -> CapabilityMap:
    """Capability map for ``module:submodule``.

    Each entry is the specific grant OR the module-level grant. The
    module-level check does not rely on the evaluator's cascade rule.
    """
    effective = as_effective_set(permissions)
    return CapabilityMap(
        **{
            action: (
                has_permission(effective, Permissions.of(module, action, submodule))
                or has_permission(effective, Permissions.of(module, action))
            )
            for action in CAPABILITY_ACTIONS
        }
    )


__all__ = [
    "CAPABILITY_ACTIONS",
    "CapabilityMap",
    "module_permissions",
    "submodule_permissions",
]
