"""CLI interface for the policy engine."""

import sys
from typing import List, Optional

import yaml

from ..common.config import RoleGateConfig, load_environment_file, load_typed_config
from ..common.logger import get_logger, setup_from_config
from .environment import Environment
from .errors import PolicyError
from .parser import load_policy

USAGE = "Usage: python -m src.policy <policy-file> <role> <path> [<environment.yaml>]"

EXIT_ALLOWED = 0
EXIT_DENIED = 1
EXIT_ERROR = 2


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the policy CLI.

    Returns:
        0 when access is allowed, 1 when denied, 2 on usage or policy errors
    """
    args = sys.argv[1:] if argv is None else argv
    if len(args) not in (3, 4):
        print(USAGE, file=sys.stderr)
        return EXIT_ERROR

    policy_path, role, path = args[:3]
    env_path = args[3] if len(args) == 4 else None

    try:
        config = load_typed_config()
    except FileNotFoundError:
        # Use defaults if config not found
        config = RoleGateConfig()
    except (TypeError, yaml.YAMLError) as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        return EXIT_ERROR

    try:
        setup_from_config(config.logging)
    except (ValueError, OSError) as e:
        print(f"Error: invalid logging configuration: {e}", file=sys.stderr)
        return EXIT_ERROR
    logger = get_logger("rolegate.cli")

    try:
        checker = load_policy(policy_path)
        environment = Environment.from_dict(config.environment)
        if env_path is not None:
            environment = Environment.from_dict(load_environment_file(env_path))
        checker.environment = environment
    except (PolicyError, FileNotFoundError, TypeError, yaml.YAMLError) as e:
        logger.error(f"Failed to build policy: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    allowed = checker.check_path(role, path)
    print("allow" if allowed else "deny")
    return EXIT_ALLOWED if allowed else EXIT_DENIED


if __name__ == "__main__":
    sys.exit(main())
