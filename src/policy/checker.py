"""Access checker facade for RoleGate.

Combines the role graph and the permission tree with the current evaluation
environment to answer "may this role access this resource?".
"""

from typing import Any, Iterable, Mapping, Optional, Sequence

from ..common.logger import get_logger
from .environment import Environment
from .roles import RoleGraph
from .rules import PermissionRule, RoleRule, split_path
from .tree import PermissionTree

logger = get_logger("rolegate.checker")


class AccessChecker:
    """Answers permission queries for a built policy.

    The role graph and permission tree are read-only after construction.
    The environment is owned by the checker and replaced between queries
    with `set_environment`; concurrent callers that need different
    environments should each hold their own checker or add their own lock.
    """

    def __init__(
        self,
        role_graph: RoleGraph,
        permission_tree: PermissionTree,
        environment: Optional[Environment] = None,
    ):
        self.role_graph = role_graph
        self.permission_tree = permission_tree
        self._environment = environment or Environment.empty()

    @classmethod
    def from_rules(
        cls,
        role_rules: Iterable[RoleRule],
        permission_rules: Iterable[PermissionRule],
    ) -> "AccessChecker":
        """Build a checker from structured rules.

        Raises:
            DuplicateParentError: If a role has two different parents
            RoleCycleError: If role inheritance loops
            InvalidRuleError: If a permission rule has an empty resource
        """
        role_graph = RoleGraph.from_rules(role_rules)
        permission_tree = PermissionTree.from_rules(permission_rules)
        logger.info(
            f"Policy loaded: {len(role_graph)} inheritance rules, "
            f"{len(permission_tree)} roles with permissions"
        )
        return cls(role_graph, permission_tree)

    @property
    def environment(self) -> Environment:
        return self._environment

    @environment.setter
    def environment(self, environment: Environment) -> None:
        self._environment = environment

    def set_environment(
        self,
        variables: Optional[Mapping[str, Any]] = None,
        sets: Optional[Mapping[str, Iterable[Any]]] = None,
    ) -> None:
        """Replace the evaluation environment for subsequent queries."""
        self._environment = Environment.build(variables, sets)
        logger.debug(
            f"Environment replaced: {len(self._environment.variables)} variables, "
            f"{len(self._environment.sets)} sets"
        )

    def check_permission(self, role: str, resource: Sequence[str]) -> bool:
        """Check whether a role may access a resource.

        Args:
            role: Role name
            resource: Resource path segments, e.g. ["docs", "public"]

        Returns:
            True if the role or any of its ancestors is granted the resource
        """
        chain = self.role_graph.resolve_ancestors(role)
        allowed = self.permission_tree.has_permission_for(chain, resource, self._environment)
        logger.debug(
            f"{'Allowed' if allowed else 'Denied'} {role} -> /{'/'.join(resource)} "
            f"(chain: {' > '.join(chain)})"
        )
        return allowed

    def check_path(self, role: str, path: str) -> bool:
        """Check a slash-delimited resource path such as '/docs/public'."""
        return self.check_permission(role, split_path(path))
