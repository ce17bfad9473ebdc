# tests/conftest.py
"""Shared test setup for project."""

from collections.abc import Generator

import pytest

import luastitch.logs as mod_logs
from tests.utils import DEFAULT_TEST_LOG_LEVEL
from tests.utils.log_fixtures import (
    direct_logger,
    module_logger,
)


# These fixtures are intentionally re-exported so pytest can discover them.
__all__ = [
    "direct_logger",
    "module_logger",
]


# ----------------------------------------------------------------------
# Fixtures
# ----------------------------------------------------------------------


@pytest.fixture(autouse=True)
def reset_logger_level(
    monkeypatch: pytest.MonkeyPatch,
) -> Generator[None, None, None]:
    """Reset the app logger before and after each test for isolation.

    The logger is a module-level singleton, so a level set by one test
    (e.g. through main()) would otherwise leak into the next.
    """
    # env overrides would beat the levels tests ask for
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("LUASTITCH_LOG_LEVEL", raising=False)

    logger = mod_logs.get_app_logger()
    logger.setLevel(DEFAULT_TEST_LOG_LEVEL)
    logger.enable_color = False
    yield
    logger.setLevel(DEFAULT_TEST_LOG_LEVEL)
    logger.reserve_stdout(False)
