"""Authorization queries over an effective permission set.

Provides runtime functions answering whether a permission set grants a
required permission. Used by route guards and UI gating.

Resolution order for ``has_permission(permissions, required)``:

1. ``required`` is malformed → ``False``
2. ``*`` or ``admin:*`` granted → ``True``
3. ``required`` granted verbatim → ``True``
4. ``module:action`` → ``module:*`` granted
5. ``module:submodule:action`` → ``module:*``, ``module:action`` or
   ``module:submodule:*`` granted
6. otherwise ``False``

Every query is total: failures surface as a deny, never as an exception.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Mapping, TypeVar, Union

from ..config import get_config
from ..exceptions import InvalidPermissionFormat, fail_closed
from ..logging import safe_preview
from .aggregator import EffectivePermissionSet
from .constants import Permissions
from .grammar import Permission, PermissionKind, PermissionLike, as_permission, parse_many

logger = logging.getLogger(__name__)

PermissionSetLike = Union[EffectivePermissionSet, Iterable[PermissionLike], None]
Requirement = Union[PermissionLike, Iterable[PermissionLike], None]

_T = TypeVar("_T")

SUPERUSER_TOKENS = frozenset({Permissions.ALL, Permissions.ADMIN_ALL})


def as_effective_set(permissions: PermissionSetLike) -> EffectivePermissionSet:
    """Normalize a permission set argument to an EffectivePermissionSet."""
    if isinstance(permissions, EffectivePermissionSet):
        return permissions
    if permissions is None:
        return EffectivePermissionSet.empty()
    # Raw token lists: malformed grants are dropped and can only deny.
    return EffectivePermissionSet(parse_many(permissions, strict=False))


def _as_list(required: Iterable[PermissionLike] | PermissionLike) -> list[PermissionLike]:
    if isinstance(required, (str, Permission)):
        return [required]
    return list(required)


def _grants(effective: EffectivePermissionSet, wanted: Permission) -> bool:
    if effective.tokens & SUPERUSER_TOKENS:
        return True
    if wanted in effective:
        return True

    kind = wanted.kind
    if kind in (PermissionKind.GLOBAL, PermissionKind.VISIBILITY):
        # Only granted verbatim or by a superuser token.
        return False
    if kind in (PermissionKind.MODULE_ACTION, PermissionKind.MODULE_WILDCARD):
        return Permissions.all_of(wanted.module) in effective
    if kind in (PermissionKind.SUBMODULE_ACTION, PermissionKind.SUBMODULE_WILDCARD):
        return (
            Permissions.all_of(wanted.module) in effective
            or Permissions.of(wanted.module, wanted.action) in effective
            or Permissions.all_of(wanted.module, wanted.submodule) in effective
        )
    raise AssertionError(f"Unhandled permission kind: {kind!r}")


@fail_closed(default=False)
def has_permission(permissions: PermissionSetLike, required: PermissionLike) -> bool:
    """Check if a permission set grants ``required``.

    Args:
        permissions: EffectivePermissionSet or raw permission tokens.
        required: Permission token or ``Permission``.

    Returns:
        True if access is granted. Malformed ``required`` is always denied.

    Example::

        perms = compute_effective(Principal(role="manager"))
        has_permission(perms, "crm:customers:read")  # True (crm:read cascades)
        has_permission(perms, "crm:delete")          # False
        has_permission(perms, "a:b:c:d")             # False (malformed)
    """
    try:
        wanted = as_permission(required)
    except InvalidPermissionFormat:
        logger.debug("Rejected malformed permission query %s", safe_preview(required))
        return False

    allowed = _grants(as_effective_set(permissions), wanted)
    if not allowed and get_config().log_denials:
        logger.debug("Denied permission %s", wanted)
    return allowed


@fail_closed(default=False)
def has_any_permission(permissions: PermissionSetLike, required: Iterable[PermissionLike]) -> bool:
    """True if any of ``required`` is granted. Empty ``required`` → False."""
    effective = as_effective_set(permissions)
    return any(has_permission(effective, p) for p in _as_list(required))


@fail_closed(default=False)
def has_all_permissions(permissions: PermissionSetLike, required: Iterable[PermissionLike]) -> bool:
    """True if every one of ``required`` is granted. Empty ``required`` → True."""
    effective = as_effective_set(permissions)
    return all(has_permission(effective, p) for p in _as_list(required))


@fail_closed(default=False)
def can_view_all(permissions: PermissionSetLike) -> bool:
    """True if the set may see all records (``view_all`` or ``*:view_all``)."""
    effective = as_effective_set(permissions)
    return has_permission(effective, Permissions.VIEW_ALL) or has_permission(effective, Permissions.VIEW_ALL_GLOBAL)


@fail_closed(default=False)
def is_authorized(permissions: PermissionSetLike, requirement: Requirement) -> bool:
    """Gate an action on an optional requirement.

    - ``None`` → allowed (the action declares no requirement)
    - a single token → :func:`has_permission`
    - a list of tokens → :func:`has_any_permission` (empty list → denied)

    Example::

        is_authorized(perms, None)                                # True
        is_authorized(perms, "orders:write")
        is_authorized(perms, ["crm:write", "crm:customers:write"])
    """
    if requirement is None:
        return True
    if isinstance(requirement, (str, Permission)):
        return has_permission(permissions, requirement)
    return has_any_permission(permissions, requirement)


def _default_requirement(item: Any) -> Requirement:
    if isinstance(item, Mapping):
        return item.get("required_permission")
    return getattr(item, "required_permission", None)


@fail_closed(default=list)
def filter_authorized(
    permissions: PermissionSetLike,
    items: Iterable[_T],
    key: Callable[[_T], Requirement] = _default_requirement,
) -> list[_T]:
    """Keep the items whose requirement passes :func:`is_authorized`.

    Args:
        permissions: EffectivePermissionSet or raw permission tokens.
        items: Actions, menu entries, routes...
        key: Extracts an item's requirement. Defaults to the
            ``required_permission`` key or attribute.

    Example::

        actions = [
            {"label": "Export", "required_permission": "crm:export"},
            {"label": "New", "required_permission": ["crm:write", "crm:customers:write"]},
            {"label": "Refresh"},
        ]
        [a["label"] for a in filter_authorized(sales, actions)]  # ["New", "Refresh"]
    """
    effective = as_effective_set(permissions)
    return [item for item in items if is_authorized(effective, key(item))]


__all__ = [
    "SUPERUSER_TOKENS",
    "as_effective_set",
    "PermissionSetLike",
    "Requirement",
    "can_view_all",
    "filter_authorized",
    "has_all_permissions",
    "has_any_permission",
    "has_permission",
    "is_authorized",
]
