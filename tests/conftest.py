"""Pytest configuration and shared fixtures."""

import logging

import pytest

from src.policy import parse_policy


SAMPLE_POLICY = """\
# Staff hierarchy
Admin > Editor
Editor > Author

allow Admin /settings/*
allow Editor /docs/public
deny Editor /docs/private
allow Author /docs/drafts/[user_id]
allow Author /docs/tags/{author_tags}
"""


@pytest.fixture
def sample_policy():
    """Sample policy text."""
    return SAMPLE_POLICY


@pytest.fixture
def checker(sample_policy):
    """Access checker built from the sample policy."""
    return parse_policy(sample_policy)


@pytest.fixture
def sample_config():
    """Sample configuration dictionary."""
    return {
        "logging": {
            "level": "DEBUG",
            "log_dir": "/tmp/rolegate-logs",
            "file_logging": False,
            "console_logging": False,
        },
        "environment": {
            "variables": {"user_id": "42"},
            "sets": {"author_tags": ["python", "rust"]},
        },
    }


@pytest.fixture(autouse=True)
def reset_rolegate_logger():
    """Drop handlers that CLI tests attach to the shared 'rolegate' logger."""
    yield
    logger = logging.getLogger("rolegate")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
