"""Logging infrastructure for rolegate.

Engine modules only fetch loggers under the "rolegate" hierarchy
("rolegate.roles", "rolegate.tree", ...) and never attach handlers.
Front-ends configure the hierarchy root once, usually through
setup_from_config() with the logging section of the YAML config.
"""

import logging
import logging.handlers
import os
from typing import List, Optional

from .config import LoggingConfig

ROOT_LOGGER_NAME = "rolegate"
DEFAULT_LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"  # ISO 8601
LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def resolve_level(level: str) -> int:
    """Translate a level name from config into a logging level.

    Raises:
        ValueError: If the name is not one of LEVEL_NAMES
    """
    level_upper = str(level).upper()
    if level_upper not in LEVEL_NAMES:
        raise ValueError(
            f"Invalid log level: {level}. Must be one of: {', '.join(LEVEL_NAMES)}"
        )
    return getattr(logging, level_upper)


def _build_handlers(
    name: str,
    log_dir: str,
    formatter: logging.Formatter,
    file_logging: bool,
    console_logging: bool,
    max_bytes: int,
    backup_count: int,
) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []

    if file_logging:
        os.makedirs(log_dir, exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                os.path.join(log_dir, f"{name}.log"),
                maxBytes=max_bytes,
                backupCount=backup_count,
            )
        )

    # Console output goes to stderr; stdout belongs to the CLI's answer
    if console_logging:
        handlers.append(logging.StreamHandler())

    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    log_dir: str = "/var/log/rolegate",
    level: str = "INFO",
    log_format: Optional[str] = None,
    date_format: Optional[str] = None,
    file_logging: bool = True,
    console_logging: bool = True,
    max_bytes: int = 10485760,  # 10MB
    backup_count: int = 5,
) -> logging.Logger:
    """Set up a logger with file and console handlers.

    Calling it again for the same name only updates the level.

    Args:
        name: Logger name; child loggers ("rolegate.tree") propagate to it
        log_dir: Directory for the rotating "<name>.log" file
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Custom log format string
        date_format: Custom date format string (ISO 8601 by default)
        file_logging: Enable file logging
        console_logging: Enable console logging on stderr
        max_bytes: Maximum log file size before rotation
        backup_count: Number of backup log files to keep

    Returns:
        Configured logger instance

    Raises:
        ValueError: If the level name is not a logging level
    """
    logger = logging.getLogger(name)
    logger.setLevel(resolve_level(level))

    if logger.handlers:
        return logger

    formatter = logging.Formatter(
        log_format or DEFAULT_LOG_FORMAT,
        datefmt=date_format or DEFAULT_DATE_FORMAT,
    )
    for handler in _build_handlers(
        name, log_dir, formatter, file_logging, console_logging, max_bytes, backup_count
    ):
        logger.addHandler(handler)

    return logger


def setup_from_config(
    logging_config: LoggingConfig, name: str = ROOT_LOGGER_NAME
) -> logging.Logger:
    """Configure the rolegate logger hierarchy from the config's logging section."""
    return setup_logger(
        name,
        log_dir=logging_config.log_dir,
        level=logging_config.level,
        file_logging=logging_config.file_logging,
        console_logging=logging_config.console_logging,
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger by name, e.g. "rolegate.roles"."""
    return logging.getLogger(name)
