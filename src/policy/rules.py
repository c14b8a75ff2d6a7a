"""Rule model for the RoleGate policy engine.

Inert, structured rules produced by the policy parser (or built directly by
callers) and consumed by the role graph and the permission tree.

Resource pattern segments:
  - docs         literal, matches the segment exactly
  - [user_id]    variable, matches the value bound in the environment
  - {staff_ids}  set, matches any member of the named environment set
  - *            universal, matches any single segment
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from .errors import InvalidRuleError


class Effect(str, Enum):
    """Effect of a permission rule."""

    ALLOW = "allow"
    DENY = "deny"


class SegmentKind(str, Enum):
    """Kinds of resource pattern segments."""

    LITERAL = "literal"
    VARIABLE = "variable"
    SET = "set"
    UNIVERSAL = "universal"


@dataclass(frozen=True)
class PermissionKind:
    """Matching predicate for a single resource path segment."""

    kind: SegmentKind
    name: Optional[str] = None  # None only for UNIVERSAL

    @classmethod
    def literal(cls, name: str) -> "PermissionKind":
        return cls(SegmentKind.LITERAL, name)

    @classmethod
    def variable(cls, name: str) -> "PermissionKind":
        return cls(SegmentKind.VARIABLE, name)

    @classmethod
    def set_of(cls, name: str) -> "PermissionKind":
        return cls(SegmentKind.SET, name)

    @classmethod
    def universal(cls) -> "PermissionKind":
        return cls(SegmentKind.UNIVERSAL)

    def __str__(self) -> str:
        if self.kind == SegmentKind.VARIABLE:
            return f"[{self.name}]"
        if self.kind == SegmentKind.SET:
            return f"{{{self.name}}}"
        if self.kind == SegmentKind.UNIVERSAL:
            return "*"
        return self.name or ""


Resource = Tuple[PermissionKind, ...]


@dataclass(frozen=True)
class RoleRule:
    """Declares `child` as inheriting from `parent`."""

    parent: str
    child: str

    def __str__(self) -> str:
        return f"{self.parent} > {self.child}"


@dataclass(frozen=True)
class PermissionRule:
    """Grants or denies `role` access to a resource pattern."""

    effect: Effect
    role: str
    resource: Resource

    def __post_init__(self):
        if not isinstance(self.effect, Effect):
            raise InvalidRuleError(
                f"Permission rule for role '{self.role}' has invalid effect {self.effect!r}"
            )
        if not isinstance(self.role, str):
            raise InvalidRuleError(f"Role name must be a string, got {type(self.role).__name__}")
        if isinstance(self.resource, (str, bytes)):
            raise InvalidRuleError(
                f"Resource for role '{self.role}' must be a sequence of segments, "
                f"not the string {self.resource!r}"
            )
        try:
            resource = tuple(self.resource)
        except TypeError:
            raise InvalidRuleError(
                f"Resource for role '{self.role}' must be a sequence of segments, "
                f"got {type(self.resource).__name__}"
            ) from None
        for segment in resource:
            if not isinstance(segment, PermissionKind):
                raise InvalidRuleError(
                    f"Resource segment {segment!r} for role '{self.role}' is not a PermissionKind"
                )
        object.__setattr__(self, "resource", resource)

    @property
    def pattern(self) -> str:
        """Resource pattern in its textual form, e.g. '/docs/[user_id]'."""
        return "/" + "/".join(str(kind) for kind in self.resource)

    def __str__(self) -> str:
        return f"{self.effect.value} {self.role} {self.pattern}"


def split_path(path: str) -> List[str]:
    """Split a slash-delimited path into segments.

    One leading and one trailing '/' are tolerated: '/docs/public/' ->
    ['docs', 'public']. Segments are taken verbatim, so a path segment
    spelled '*' only matches universal or literal '*' rules.
    """
    stripped = path
    if stripped.startswith("/"):
        stripped = stripped[1:]
    if stripped.endswith("/"):
        stripped = stripped[:-1]
    if not stripped:
        return []
    return stripped.split("/")
