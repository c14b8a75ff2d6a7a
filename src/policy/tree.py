"""Permission tree for RoleGate.

A forest of per-role tries over resource path segments. Each rule adds its
own chain of nodes under the role's root; the last node of the chain carries
the rule's effect and every node before it is UNSET.

Evaluation is fail-closed: a path that no node chain matches, an unbound
variable and an unknown set all evaluate to False.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence

from ..common.logger import get_logger
from .environment import Environment
from .errors import InvalidRuleError
from .rules import Effect, PermissionKind, PermissionRule, SegmentKind

logger = get_logger("rolegate.tree")


class NodeEffect(str, Enum):
    """Terminal decision carried by a node."""

    ALLOW = "allow"
    DENY = "deny"
    UNSET = "unset"  # intermediate node, no decision of its own

    @classmethod
    def from_effect(cls, effect: Effect) -> "NodeEffect":
        return cls.ALLOW if effect == Effect.ALLOW else cls.DENY


@dataclass
class PermissionNode:
    """A trie node matching one resource path segment."""

    kind: PermissionKind
    effect: NodeEffect = NodeEffect.UNSET
    children: List["PermissionNode"] = field(default_factory=list)

    def matches(self, segment: str, environment: Environment) -> bool:
        """Check whether this node's pattern accepts a single segment."""
        kind = self.kind.kind
        if kind == SegmentKind.LITERAL:
            return segment == self.kind.name
        if kind == SegmentKind.VARIABLE:
            bound = environment.lookup_variable(self.kind.name)
            return bound is not None and segment == bound
        if kind == SegmentKind.SET:
            return environment.set_contains(self.kind.name, segment)
        if kind == SegmentKind.UNIVERSAL:
            return True
        raise ValueError(f"Unknown segment kind: {kind}")

    def has_permission_for(self, resource: Sequence[str], environment: Environment) -> bool:
        """Evaluate a resource path against this subtree."""
        return _any_grants([self], resource, environment)


def _any_grants(
    nodes: Iterable[PermissionNode],
    resource: Sequence[str],
    environment: Environment,
) -> bool:
    """Check whether any path through `nodes` grants the whole resource.

    Walks the trie with an explicit stack of (node, segment index) pairs, so
    path depth is not bounded by the interpreter recursion limit.
    """
    last = len(resource) - 1
    if last < 0:
        return False

    stack = [(node, 0) for node in nodes]
    while stack:
        node, index = stack.pop()
        if not node.matches(resource[index], environment):
            continue
        if index == last:
            if node.effect == NodeEffect.ALLOW:
                return True
            continue
        stack.extend((child, index + 1) for child in node.children)
    return False


@dataclass
class RootNode:
    """Root of one role's trie. Carries no segment; defaults to DENY."""

    effect: NodeEffect = NodeEffect.DENY
    children: List[PermissionNode] = field(default_factory=list)

    def add_rule(self, rule: PermissionRule) -> None:
        """Append a fresh node chain for a rule's resource pattern.

        Existing prefixes are not merged; each rule owns its own chain.
        """
        if not rule.resource:
            raise InvalidRuleError(f"Permission rule for role '{rule.role}' has an empty resource")

        last = len(rule.resource) - 1
        siblings = self.children
        for depth, kind in enumerate(rule.resource):
            effect = NodeEffect.from_effect(rule.effect) if depth == last else NodeEffect.UNSET
            node = PermissionNode(kind=kind, effect=effect)
            siblings.append(node)
            siblings = node.children

    def has_permission_for(self, resource: Sequence[str], environment: Environment) -> bool:
        return _any_grants(self.children, resource, environment)


class PermissionTree:
    """Per-role permission tries, built once from permission rules."""

    def __init__(self, roots: Optional[Dict[str, RootNode]] = None):
        self._roots: Dict[str, RootNode] = dict(roots or {})

    @classmethod
    def from_rules(cls, rules: Iterable[PermissionRule]) -> "PermissionTree":
        """Build a permission tree from permission rules.

        Args:
            rules: Ordered permission rules

        Returns:
            PermissionTree instance

        Raises:
            InvalidRuleError: If a rule has an empty resource pattern
        """
        roots: Dict[str, RootNode] = {}
        count = 0
        for rule in rules:
            root = roots.get(rule.role)
            if root is None:
                root = roots[rule.role] = RootNode()
            root.add_rule(rule)
            count += 1

        logger.debug(f"Built permission tree with {count} rules for {len(roots)} roles")
        return cls(roots)

    def root_for(self, role: str) -> Optional[RootNode]:
        """Get the root node for a role, or None if it has no rules."""
        return self._roots.get(role)

    def has_permission_for(
        self,
        roles: Iterable[str],
        resource: Sequence[str],
        environment: Environment,
    ) -> bool:
        """Check whether any role in the chain is granted the resource.

        Args:
            roles: Ancestor chain, most specific role first
            resource: Concrete resource path segments
            environment: Variable and set bindings

        Returns:
            True as soon as one role's trie grants access, else False
        """
        resource = list(resource)
        for role in roles:
            root = self._roots.get(role)
            if root is not None and root.has_permission_for(resource, environment):
                return True
        return False

    @property
    def roles(self) -> List[str]:
        """Roles that have at least one permission rule."""
        return list(self._roots)

    def __len__(self) -> int:
        return len(self._roots)
