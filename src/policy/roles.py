"""Role graph for RoleGate.

Maps each child role to its single parent and resolves a role to its
ancestor chain, most specific role first.
"""

from typing import Dict, Iterable, List, Optional, Set

from ..common.logger import get_logger
from .errors import DuplicateParentError, RoleCycleError
from .rules import RoleRule

logger = get_logger("rolegate.roles")


class RoleGraph:
    """Single-parent role inheritance graph.

    Immutable once built. Use `RoleGraph.from_rules` to construct one from
    parsed role rules; a changed policy means a new graph.
    """

    def __init__(self, parents: Optional[Dict[str, str]] = None):
        self._parents: Dict[str, str] = dict(parents or {})
        self._check_acyclic()

    @classmethod
    def from_rules(cls, rules: Iterable[RoleRule]) -> "RoleGraph":
        """Build a role graph from role rules.

        Args:
            rules: Ordered role rules

        Returns:
            RoleGraph instance

        Raises:
            DuplicateParentError: If a child is given two different parents
            RoleCycleError: If the rules form an inheritance cycle
        """
        parents: Dict[str, str] = {}
        for rule in rules:
            existing = parents.get(rule.child)
            if existing is None:
                parents[rule.child] = rule.parent
            elif existing == rule.parent:
                logger.debug(f"Ignoring repeated role rule: {rule}")
            else:
                logger.error(
                    f"Role '{rule.child}' has conflicting parents "
                    f"'{existing}' and '{rule.parent}'"
                )
                raise DuplicateParentError(rule.child, existing, rule.parent)

        graph = cls(parents)
        logger.debug(f"Built role graph with {len(graph)} inheritance edges")
        return graph

    def _check_acyclic(self) -> None:
        """Reject parent mappings that loop back on themselves."""
        cleared: Set[str] = set()
        for start in self._parents:
            path: List[str] = []
            role: Optional[str] = start
            while role is not None and role not in cleared:
                if role in path:
                    cycle = path[path.index(role):] + [role]
                    logger.error(f"Role inheritance cycle detected: {' > '.join(cycle)}")
                    raise RoleCycleError(cycle)
                path.append(role)
                role = self._parents.get(role)
            cleared.update(path)

    def parent_of(self, role: str) -> Optional[str]:
        """Get the direct parent of a role, if any."""
        return self._parents.get(role)

    def resolve_ancestors(self, role: str) -> List[str]:
        """Resolve a role to its ancestor chain.

        Args:
            role: Role name

        Returns:
            [role, parent(role), parent(parent(role)), ...]. Unknown roles
            resolve to [role].
        """
        chain = [role]
        parent = self._parents.get(role)
        while parent is not None:
            chain.append(parent)
            parent = self._parents.get(parent)
        return chain

    @property
    def roles(self) -> Set[str]:
        """All role names that appear in the graph."""
        return set(self._parents) | set(self._parents.values())

    def __contains__(self, role: object) -> bool:
        return role in self._parents or role in self._parents.values()

    def __len__(self) -> int:
        return len(self._parents)
