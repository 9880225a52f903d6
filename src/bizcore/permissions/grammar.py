"""Permission token grammar.

Valid tokens::

    *                          global wildcard
    module:*                   every action of a module
    module:action              one action of a module
    module:submodule:*         every action of a submodule
    module:submodule:action    one action of a submodule
    view_all, *:view_all       visibility tokens (data scoping)

Segments are lowercase ``[a-z0-9_-]``; ``*`` is only allowed as the trailing
segment. Anything else raises :class:`InvalidPermissionFormat` at
construction, so a ``Permission`` instance is always well-formed.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Iterable, Union

from ..exceptions import InvalidPermissionFormat
from ..logging import safe_preview

logger = logging.getLogger(__name__)

WILDCARD = "*"
SEPARATOR = ":"
VIEW_ALL = "view_all"
VIEW_ALL_GLOBAL = "*:view_all"
VISIBILITY_TOKENS = frozenset({VIEW_ALL, VIEW_ALL_GLOBAL})

_SEGMENT_RE = re.compile(r"[a-z0-9_\-]+")


class PermissionKind(str, Enum):
    """Closed set of permission shapes."""

    GLOBAL = "global"
    VISIBILITY = "visibility"
    MODULE_WILDCARD = "module_wildcard"
    MODULE_ACTION = "module_action"
    SUBMODULE_WILDCARD = "submodule_wildcard"
    SUBMODULE_ACTION = "submodule_action"


def _is_segment(value: str | None) -> bool:
    return isinstance(value, str) and _SEGMENT_RE.fullmatch(value) is not None


class Permission:
    """Immutable, validated permission token.

    Build instances with :func:`parse` or the named constructors::

        Permission.module_action("crm", "read")                # crm:read
        Permission.submodule_action("crm", "customers", "read")  # crm:customers:read
        Permission.module_wildcard("crm")                      # crm:*

    Equality and hashing follow the canonical token, so a ``Permission`` and
    its re-parsed string form are interchangeable in sets.
    """

    __slots__ = ("kind", "module", "submodule", "action", "_token")

    def __init__(
        self,
        kind: PermissionKind,
        module: str | None = None,
        submodule: str | None = None,
        action: str | None = None,
    ) -> None:
        kind = PermissionKind(kind)
        if not self._shape_ok(kind, module, submodule, action):
            raise InvalidPermissionFormat(
                f"Invalid {kind.value} permission: module={module!r} submodule={submodule!r} action={action!r}",
                kind=kind.value,
            )
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "module", module)
        object.__setattr__(self, "submodule", submodule)
        object.__setattr__(self, "action", action)
        object.__setattr__(self, "_token", self._render())

    @staticmethod
    def _shape_ok(kind: PermissionKind, module: str | None, submodule: str | None, action: str | None) -> bool:
        if kind is PermissionKind.GLOBAL:
            return module is None and submodule is None and action is None
        if kind is PermissionKind.VISIBILITY:
            return module in (None, WILDCARD) and submodule is None and action == VIEW_ALL
        if kind is PermissionKind.MODULE_WILDCARD:
            return _is_segment(module) and submodule is None and action == WILDCARD
        if kind is PermissionKind.MODULE_ACTION:
            return _is_segment(module) and submodule is None and _is_segment(action)
        if kind is PermissionKind.SUBMODULE_WILDCARD:
            return _is_segment(module) and _is_segment(submodule) and action == WILDCARD
        return _is_segment(module) and _is_segment(submodule) and _is_segment(action)

    def _render(self) -> str:
        if self.kind is PermissionKind.GLOBAL:
            return WILDCARD
        return SEPARATOR.join(part for part in (self.module, self.submodule, self.action) if part is not None)

    # ── Named constructors ──────────────────────────────

    @classmethod
    def global_wildcard(cls) -> Permission:
        return cls(PermissionKind.GLOBAL)

    @classmethod
    def module_wildcard(cls, module: str) -> Permission:
        return cls(PermissionKind.MODULE_WILDCARD, module, None, WILDCARD)

    @classmethod
    def module_action(cls, module: str, action: str) -> Permission:
        return cls(PermissionKind.MODULE_ACTION, module, None, action)

    @classmethod
    def submodule_wildcard(cls, module: str, submodule: str) -> Permission:
        return cls(PermissionKind.SUBMODULE_WILDCARD, module, submodule, WILDCARD)

    @classmethod
    def submodule_action(cls, module: str, submodule: str, action: str) -> Permission:
        return cls(PermissionKind.SUBMODULE_ACTION, module, submodule, action)

    # ── Accessors ───────────────────────────────────────

    @property
    def token(self) -> str:
        return self._token

    @property
    def segments(self) -> tuple[str, ...]:
        return tuple(self._token.split(SEPARATOR))

    @property
    def is_wildcard(self) -> bool:
        return self.kind in (
            PermissionKind.GLOBAL,
            PermissionKind.MODULE_WILDCARD,
            PermissionKind.SUBMODULE_WILDCARD,
        )

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError(f"Permission is immutable (cannot set {name!r})")

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Permission):
            return self._token == other._token
        return NotImplemented

    def __lt__(self, other: Permission) -> bool:
        return self._token < other._token

    def __hash__(self) -> int:
        return hash(self._token)

    def __str__(self) -> str:
        return self._token

    def __repr__(self) -> str:
        return f"Permission({self._token!r})"


PermissionLike = Union[Permission, str]


def parse(token: str) -> Permission:
    """Parse a permission token.

    Raises:
        InvalidPermissionFormat: if ``token`` is not a valid permission.

    Example::

        parse("crm:customers:read").kind  # PermissionKind.SUBMODULE_ACTION
        parse("crm:*").kind               # PermissionKind.MODULE_WILDCARD
        parse("CRM:read")                 # raises InvalidPermissionFormat
    """
    if not isinstance(token, str):
        raise InvalidPermissionFormat(
            f"Permission must be a string, got {type(token).__name__}",
            token=safe_preview(token),
        )
    if token == WILDCARD:
        return Permission.global_wildcard()
    if token == VIEW_ALL:
        return Permission(PermissionKind.VISIBILITY, None, None, VIEW_ALL)
    if token == VIEW_ALL_GLOBAL:
        return Permission(PermissionKind.VISIBILITY, WILDCARD, None, VIEW_ALL)

    parts = token.split(SEPARATOR)
    if len(parts) not in (2, 3):
        raise InvalidPermissionFormat(
            f"Permission {safe_preview(token)} must have 2 or 3 segments, got {len(parts)}",
            token=safe_preview(token),
        )

    *leading, last = parts
    for part in leading:
        if not _is_segment(part):
            raise InvalidPermissionFormat(
                f"Permission {safe_preview(token)} has invalid segment {safe_preview(part)}",
                token=safe_preview(token),
            )
    if last != WILDCARD and not _is_segment(last):
        raise InvalidPermissionFormat(
            f"Permission {safe_preview(token)} has invalid segment {safe_preview(last)}",
            token=safe_preview(token),
        )

    if len(parts) == 2:
        module = parts[0]
        if last == WILDCARD:
            return Permission.module_wildcard(module)
        return Permission.module_action(module, last)

    module, submodule = leading
    if last == WILDCARD:
        return Permission.submodule_wildcard(module, submodule)
    return Permission.submodule_action(module, submodule, last)


def to_string(permission: Permission) -> str:
    """Canonical token for ``permission``; ``parse(to_string(p)) == p``."""
    return permission.token


def is_valid(token: object) -> bool:
    """Non-raising grammar check."""
    if isinstance(token, Permission):
        return True
    try:
        parse(token)  # type: ignore[arg-type]
    except InvalidPermissionFormat:
        return False
    return True


def as_permission(value: PermissionLike) -> Permission:
    """Return ``value`` as a Permission, parsing strings."""
    if isinstance(value, Permission):
        return value
    return parse(value)


def parse_many(tokens: Iterable[PermissionLike], *, strict: bool = True) -> frozenset[Permission]:
    """Parse an iterable of tokens into a permission set.

    Args:
        tokens: Permission strings or Permission instances.
        strict: If False, malformed tokens are logged and dropped instead
            of raising.

    Returns:
        Frozenset of permissions (duplicates collapse).
    """
    result: set[Permission] = set()
    for token in tokens:
        try:
            result.add(as_permission(token))
        except InvalidPermissionFormat as e:
            if strict:
                raise
            logger.warning("Dropping malformed permission: %s", e.message)
    return frozenset(result)


__all__ = [
    "SEPARATOR",
    "VIEW_ALL",
    "VIEW_ALL_GLOBAL",
    "VISIBILITY_TOKENS",
    "WILDCARD",
    "Permission",
    "PermissionKind",
    "PermissionLike",
    "as_permission",
    "is_valid",
    "parse",
    "parse_many",
    "to_string",
]
