"""Errors raised while building a policy.

Only construction can fail. Queries never raise: an unknown role, an unbound
variable, an unknown set or a missing rule all evaluate to a denial.
"""

from typing import List, Optional


class PolicyError(Exception):
    """Base exception for policy construction failures."""


class DuplicateParentError(PolicyError):
    """A child role was assigned two different parents."""

    def __init__(self, child: str, existing_parent: str, new_parent: str):
        self.child = child
        self.existing_parent = existing_parent
        self.new_parent = new_parent
        super().__init__(
            f"Role '{child}' already inherits from '{existing_parent}', "
            f"cannot also inherit from '{new_parent}'"
        )


class RoleCycleError(PolicyError):
    """Role inheritance rules form a cycle."""

    def __init__(self, cycle: List[str]):
        self.cycle = list(cycle)
        super().__init__(f"Role inheritance cycle: {' > '.join(self.cycle)}")


class InvalidRuleError(PolicyError):
    """A structured rule violates the rule model (e.g. empty resource)."""


class InvalidEnvironmentError(PolicyError):
    """An environment document has the wrong shape."""


class PolicyParseError(PolicyError):
    """A line of policy text could not be turned into a rule."""

    def __init__(
        self,
        message: str,
        line_number: Optional[int] = None,
        line: Optional[str] = None,
        token: Optional[str] = None,
    ):
        self.reason = message
        self.line_number = line_number
        self.line = line
        self.token = token
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
