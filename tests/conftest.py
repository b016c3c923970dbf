"""
Pytest configuration and shared fixtures for Merkle sum tree tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Configures pytest markers and settings
"""

import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

# Get the project root (parent of tests/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

# Add both project root and tests root to sys.path
for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

# =============================================================================
# Import fixtures using importlib (more robust for pytest loading)
# =============================================================================

import importlib

_common = importlib.import_module("fixtures.common")

make_entries = _common.make_entries
make_tree = _common.make_tree


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

# Poseidon in pure Python is slow; share built trees across a module.

@pytest.fixture(scope="module")
def entries():
    """Four two-currency entries."""
    return make_entries(4)


@pytest.fixture(scope="module")
def tree(entries):
    """A depth-2 tree over the default entries."""
    return make_tree(entries)


@pytest.fixture(autouse=True)
def _clean_solvency_env(monkeypatch):
    """Keep SOLVENCY_* variables from the host environment out of tests."""
    for name in (
        "SOLVENCY_N_CURRENCIES",
        "SOLVENCY_BYTE_WIDTH",
        "SOLVENCY_TREE_DEPTH",
        "SOLVENCY_WORKERS",
        "SOLVENCY_LOG_LEVEL",
        "SOLVENCY_LOG_FILE",
    ):
        monkeypatch.delenv(name, raising=False)


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
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
