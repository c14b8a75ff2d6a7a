"""RoleGate policy engine.

Builds role inheritance graphs and per-role permission tries from policy
rules and answers access queries against them.
"""

from .checker import AccessChecker
from .environment import Environment
from .errors import (
    DuplicateParentError,
    InvalidEnvironmentError,
    InvalidRuleError,
    PolicyError,
    PolicyParseError,
    RoleCycleError,
)
from .parser import load_policy, parse_policy, parse_resource, parse_rules
from .roles import RoleGraph
from .rules import Effect, PermissionKind, PermissionRule, RoleRule, SegmentKind, split_path
from .tree import NodeEffect, PermissionNode, PermissionTree, RootNode

__all__ = [
    "AccessChecker",
    "DuplicateParentError",
    "Effect",
    "Environment",
    "InvalidEnvironmentError",
    "InvalidRuleError",
    "NodeEffect",
    "PermissionKind",
    "PermissionNode",
    "PermissionRule",
    "PermissionTree",
    "PolicyError",
    "PolicyParseError",
    "RoleCycleError",
    "RoleGraph",
    "RoleRule",
    "RootNode",
    "SegmentKind",
    "load_policy",
    "parse_policy",
    "parse_resource",
    "parse_rules",
    "split_path",
]
