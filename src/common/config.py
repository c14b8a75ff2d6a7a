"""Configuration management for rolegate.

Handles loading YAML configuration files and environment documents.
String values may reference environment variables ($HOME, ${POLICY_DIR}),
except inside the "environment" section, whose values are matched verbatim
against resource path segments.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_CONFIG_PATH = "/etc/rolegate/config.yaml"
CONFIG_PATH_ENV_VAR = "ROLEGATE_CONFIG"

# Sections whose strings are data, not settings
VERBATIM_SECTIONS = frozenset(["environment"])


@dataclass
class LoggingConfig:
    """Logging settings."""

    level: str = "INFO"
    log_dir: str = "/var/log/rolegate"
    file_logging: bool = False
    console_logging: bool = True


@dataclass
class RoleGateConfig:
    """Top-level configuration for rolegate."""

    logging: LoggingConfig = field(default_factory=LoggingConfig)
    environment: Dict[str, Any] = field(default_factory=dict)


def parse_logging_config(logging_dict: Dict[str, Any]) -> LoggingConfig:
    """Parse a logging configuration dictionary.

    Args:
        logging_dict: Logging configuration dictionary

    Returns:
        LoggingConfig instance
    """
    return LoggingConfig(
        level=logging_dict.get("level", "INFO"),
        log_dir=logging_dict.get("log_dir", "/var/log/rolegate"),
        file_logging=logging_dict.get("file_logging", False),
        console_logging=logging_dict.get("console_logging", True),
    )


def parse_config(config_dict: Dict[str, Any]) -> RoleGateConfig:
    """Parse the full configuration dictionary.

    Args:
        config_dict: Full configuration dictionary

    Returns:
        RoleGateConfig instance

    Raises:
        TypeError: If a section is not a mapping
    """
    sections = {}
    for section in ("logging", "environment"):
        value = config_dict.get(section) or {}
        if not isinstance(value, dict):
            raise TypeError(
                f"'{section}' section must be a mapping, got {type(value).__name__}"
            )
        sections[section] = value

    return RoleGateConfig(
        logging=parse_logging_config(sections["logging"]),
        environment=sections["environment"],
    )


def default_config_path() -> str:
    """Config path from $ROLEGATE_CONFIG, falling back to the system default."""
    return os.environ.get(CONFIG_PATH_ENV_VAR, DEFAULT_CONFIG_PATH)


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from YAML file.

    Args:
        config_path: Path to configuration file; defaults to default_config_path()

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is invalid YAML
        TypeError: If the document root is not a mapping
    """
    config_path = config_path or default_config_path()
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with config_file.open("r") as f:
        config = yaml.safe_load(f)

    if config is None:
        config = {}

    if not isinstance(config, dict):
        raise TypeError(
            f"Configuration root must be a mapping, got {type(config).__name__}"
        )

    return {
        key: value if key in VERBATIM_SECTIONS else _expand_env_vars(value)
        for key, value in config.items()
    }


def _expand_env_vars(obj: Any) -> Any:
    """Recursively expand environment variables in configuration.

    Args:
        obj: Configuration object (dict, list, str, etc.)

    Returns:
        Configuration with expanded environment variables
    """
    if isinstance(obj, dict):
        return {key: _expand_env_vars(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    elif isinstance(obj, str):
        return os.path.expandvars(obj)
    else:
        return obj


def load_typed_config(config_path: Optional[str] = None) -> RoleGateConfig:
    """Load and parse configuration into typed dataclass.

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is invalid YAML
    """
    return parse_config(load_config(config_path))


def load_environment_file(env_path: str) -> Dict[str, Any]:
    """Load a standalone environment document.

    The document has the same shape as the config's 'environment' section:

        variables:
          user_id: "42"
        sets:
          staff_ids: ["7", "9"]

    Raises:
        FileNotFoundError: If the file doesn't exist
        TypeError: If the document root is not a mapping
    """
    env_file = Path(env_path)
    if not env_file.exists():
        raise FileNotFoundError(f"Environment file not found: {env_path}")

    with env_file.open("r") as f:
        document = yaml.safe_load(f)

    if document is None:
        return {}
    if not isinstance(document, dict):
        raise TypeError(
            f"Environment root must be a mapping, got {type(document).__name__}"
        )
    return document
