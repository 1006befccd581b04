"""Pytest configuration and fixtures."""

import pytest

from opcheck import verbose
from opcheck.config import reset_config


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Start every test from default config, ignoring the caller's OPCHECK_* variables."""
    monkeypatch.delenv("OPCHECK_DEBUG_CHECKS", raising=False)
    monkeypatch.delenv("OPCHECK_LOG_FAILURES", raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture(autouse=True)
def cleanup_loggers():
    """Release opcheck loggers after each test so names can be reused."""
    yield

    for name in list(verbose._configured):
        verbose.release_logger(name)
