"""
Pytest configuration and shared fixtures for stencil tests.
"""

import sys
from collections.abc import Generator
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from stencil_core.config import EngineConfig  # noqa: E402
from stencil_core.telemetry.logging import reset_loggers  # noqa: E402
from stencil_core.template import TemplateEngine  # noqa: E402


# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def tests_dir() -> Path:
    """Return the tests directory."""
    return Path(__file__).parent


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def engine_config() -> EngineConfig:
    """Default engine configuration."""
    return EngineConfig()


@pytest.fixture
def engine(engine_config: EngineConfig) -> TemplateEngine:
    """Template engine built from engine_config."""
    return TemplateEngine(engine_config)


@pytest.fixture
def clean_loggers() -> Generator[None, None, None]:
    """Reset cached loggers and handlers around a test."""
    reset_loggers()
    yield
    reset_loggers()


# =============================================================================
# Markers Configuration
# =============================================================================


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "property: Property-based tests")
    config.addinivalue_line("markers", "fuzz: Fuzz tests")
    config.addinivalue_line("markers", "slow: Slow tests")
