"""Text policy parser for RoleGate.

Policy text has one rule per line:

    Admin > User              User inherits from Admin
    allow User /docs/*        grant
    deny Guest /docs/[id]     deny

Blank lines and lines starting with '#' are ignored. Malformed lines raise
PolicyParseError carrying the line number and the offending token.
"""

from pathlib import Path
from typing import List, Optional, Tuple, Union

from ..common.logger import get_logger
from .checker import AccessChecker
from .errors import PolicyParseError
from .rules import Effect, PermissionKind, PermissionRule, Resource, RoleRule, split_path

logger = get_logger("rolegate.parser")

Rule = Union[RoleRule, PermissionRule]

INHERITS_TOKEN = ">"
DEFAULT_COMMENT_PREFIX = "#"


def parse_segment(segment: str) -> PermissionKind:
    """Classify a single resource pattern segment.

    Raises:
        PolicyParseError: If the segment is empty or names an empty
            variable or set
    """
    if not segment:
        raise PolicyParseError("Empty resource segment", token=segment)

    if len(segment) >= 2 and segment[0] == "[" and segment[-1] == "]":
        name = segment[1:-1]
        if not name:
            raise PolicyParseError("Variable segment needs a name", token=segment)
        return PermissionKind.variable(name)

    if len(segment) >= 2 and segment[0] == "{" and segment[-1] == "}":
        name = segment[1:-1]
        if not name:
            raise PolicyParseError("Set segment needs a name", token=segment)
        return PermissionKind.set_of(name)

    if segment == "*":
        return PermissionKind.universal()

    return PermissionKind.literal(segment)


def parse_resource(pattern: str) -> Resource:
    """Parse a resource pattern such as '/docs/[user_id]/{tags}/*'.

    Raises:
        PolicyParseError: If the pattern has no segments or an invalid one
    """
    segments = split_path(pattern)
    if not segments:
        raise PolicyParseError("Resource pattern has no segments", token=pattern)
    return tuple(parse_segment(segment) for segment in segments)


def parse_line(line: str, line_number: Optional[int] = None) -> Optional[Rule]:
    """Parse a single policy line.

    Args:
        line: Raw line text
        line_number: 1-based line number for error reporting

    Returns:
        RoleRule, PermissionRule, or None for blank/comment lines

    Raises:
        PolicyParseError: If the line is not a recognised rule
    """
    tokens = line.split()
    if not tokens or tokens[0].startswith(DEFAULT_COMMENT_PREFIX):
        return None

    if len(tokens) != 3:
        raise PolicyParseError(
            f"Expected 3 tokens, got {len(tokens)}",
            line_number=line_number,
            line=line,
            token=tokens[3] if len(tokens) > 3 else None,
        )

    first, second, third = tokens
    if second == INHERITS_TOKEN:
        return RoleRule(parent=first, child=third)

    try:
        effect = Effect(first)
    except ValueError:
        raise PolicyParseError(
            f"Unknown permission keyword '{first}', expected 'allow' or 'deny'",
            line_number=line_number,
            line=line,
            token=first,
        ) from None

    try:
        resource = parse_resource(third)
    except PolicyParseError as e:
        raise PolicyParseError(
            e.reason, line_number=line_number, line=line, token=e.token
        ) from None

    return PermissionRule(effect=effect, role=second, resource=resource)


def parse_rules(text: str) -> Tuple[List[RoleRule], List[PermissionRule]]:
    """Parse policy text into role rules and permission rules, in order."""
    role_rules: List[RoleRule] = []
    permission_rules: List[PermissionRule] = []

    for line_number, line in enumerate(text.splitlines(), start=1):
        rule = parse_line(line, line_number)
        if rule is None:
            continue
        if isinstance(rule, RoleRule):
            role_rules.append(rule)
        else:
            permission_rules.append(rule)

    logger.debug(
        f"Parsed {len(role_rules)} role rules and {len(permission_rules)} permission rules"
    )
    return role_rules, permission_rules


def parse_policy(text: str) -> AccessChecker:
    """Parse policy text and build an access checker.

    Raises:
        PolicyParseError: If any line is malformed
        DuplicateParentError: If a role has two different parents
        RoleCycleError: If role inheritance loops
    """
    role_rules, permission_rules = parse_rules(text)
    return AccessChecker.from_rules(role_rules, permission_rules)


def load_policy(policy_path: Union[str, Path]) -> AccessChecker:
    """Load a policy file and build an access checker.

    Raises:
        FileNotFoundError: If the policy file doesn't exist
    """
    policy_file = Path(policy_path)
    if not policy_file.exists():
        raise FileNotFoundError(f"Policy file not found: {policy_path}")

    logger.info(f"Loading policy from {policy_file}")
    with policy_file.open("r") as f:
        return parse_policy(f.read())
