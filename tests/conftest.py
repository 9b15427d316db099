"""
Pytest configuration and shared fixtures for all Structura tests.

The compiler driver holds no per-compilation state, so one instance is
shared by every test.
"""

import sys
import pytest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
from structura.compiler.driver import CompilerDriver


EXAMPLES_DIR = Path(__file__).parent.parent / "examples"


# =============================================================================
# Session-scoped fixtures (shared across all tests)
# =============================================================================

@pytest.fixture(scope="session")
def session_compiler():
    """Session-scoped stateless compiler instance shared across ALL tests."""
    return CompilerDriver()


@pytest.fixture(scope="class")
def compiler(session_compiler):
    """Class-scoped compiler - returns session compiler (stateless, safe to share)."""
    return session_compiler


@pytest.fixture(scope="session")
def examples_dir():
    return EXAMPLES_DIR


@pytest.fixture
def no_color(monkeypatch):
    """Plain diagnostics regardless of the caller's environment."""
    monkeypatch.setenv("NO_COLOR", "1")


def pytest_configure(config):
    """Register custom markers for test organization."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
