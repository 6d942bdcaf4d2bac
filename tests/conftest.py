"""
Pytest configuration and shared fixtures.

This conftest.py:
1. Adds project root and tests root to sys.path for imports
2. Provides commonly-used fixtures
3. Registers pytest markers
"""

import os
import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

from fixtures import (  # noqa: E402
    make_addresses,
    make_allowlist,
    make_engine,
)


# =============================================================================
# Common Fixtures
# =============================================================================

@pytest.fixture
def engine():
    """In-memory engine with 'ops' as the only configurer."""
    return make_engine()


@pytest.fixture
def allowlist():
    """Four addresses committed under one active commitment."""
    return make_allowlist()


@pytest.fixture
def addresses():
    return make_addresses(4)


@pytest.fixture
def clean_env(monkeypatch):
    """Keep developer CLAIMGATE_* settings out of tests."""
    for key in list(os.environ):
        if key.startswith("CLAIMGATE_"):
            monkeypatch.delenv(key, raising=False)


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
