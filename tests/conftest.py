"""Shared pytest fixtures for tangrat tests."""
import sys
sys.dont_write_bytecode = True

import pytest  # noqa: E402

from helpers import TEST_ENV  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_gateway_config_cache():
    """Reset the process-wide gateway config cache between tests.

    load_gateway_config() is lru_cached for the life of the process. Without
    this reset a config loaded under one test's environment leaks into the
    next test and hides missing-credential failures.
    """
    from tangrat.gateway.config import load_gateway_config

    load_gateway_config.cache_clear()
    yield
    load_gateway_config.cache_clear()


@pytest.fixture
def gateway_env(monkeypatch):
    """Set the three required gateway credentials."""
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)
    return TEST_ENV


@pytest.fixture
def no_gateway_env(monkeypatch):
    """Remove every gateway variable from the environment."""
    for key in (*TEST_ENV, "DGA_BASE_URL", "DGA_CZP_ENV", "DGA_HTTP_TIMEOUT"):
        monkeypatch.delenv(key, raising=False)
