"""Evaluation environment for variable and set resource segments."""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional

from .errors import InvalidEnvironmentError


@dataclass(frozen=True)
class Environment:
    """Variable bindings and named sets consulted while matching paths.

    Replaced wholesale on the access checker, never mutated in place.
    """

    variables: Dict[str, str] = field(default_factory=dict)
    sets: Dict[str, FrozenSet[str]] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> "Environment":
        return cls()

    @classmethod
    def build(
        cls,
        variables: Optional[Mapping[str, Any]] = None,
        sets: Optional[Mapping[str, Iterable[Any]]] = None,
    ) -> "Environment":
        """Build an environment from plain mappings.

        Scalar values are coerced to strings so that documents loaded from
        YAML (where `42` is an int) compare equal to path segments.

        Raises:
            InvalidEnvironmentError: If a variable value is not a scalar or a
                set is not a collection of scalars
        """
        bound: Dict[str, str] = {}
        for name, value in (variables or {}).items():
            if isinstance(value, (dict, list, tuple, set, frozenset)) or value is None:
                raise InvalidEnvironmentError(
                    f"Variable '{name}' must be bound to a single value, "
                    f"got {type(value).__name__}"
                )
            bound[str(name)] = str(value)

        named_sets: Dict[str, FrozenSet[str]] = {}
        for name, members in (sets or {}).items():
            if isinstance(members, (str, bytes, dict)) or not isinstance(members, Iterable):
                raise InvalidEnvironmentError(
                    f"Set '{name}' must be a list of values, got {type(members).__name__}"
                )
            named_sets[str(name)] = frozenset(str(member) for member in members)

        return cls(variables=bound, sets=named_sets)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "Environment":
        """Create an environment from a {"variables": ..., "sets": ...} document."""
        if data is None:
            return cls.empty()
        if not isinstance(data, Mapping):
            raise InvalidEnvironmentError(
                f"Environment must be a mapping, got {type(data).__name__}"
            )

        unknown = set(data) - {"variables", "sets"}
        if unknown:
            raise InvalidEnvironmentError(
                f"Unknown environment sections: {', '.join(sorted(map(str, unknown)))}"
            )

        variables = data.get("variables") or {}
        sets = data.get("sets") or {}
        for section, value in (("variables", variables), ("sets", sets)):
            if not isinstance(value, Mapping):
                raise InvalidEnvironmentError(
                    f"Environment '{section}' must be a mapping, got {type(value).__name__}"
                )
        return cls.build(variables, sets)

    def lookup_variable(self, name: str) -> Optional[str]:
        """Get the value bound to a variable, or None when unbound."""
        return self.variables.get(name)

    def set_contains(self, name: str, value: str) -> bool:
        """Check membership in a named set. Unknown sets contain nothing."""
        members = self.sets.get(name)
        return members is not None and value in members
