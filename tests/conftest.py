"""
Shared test configuration and fixtures for linkpreview.
"""

from pathlib import Path

import pytest
from linkpreview.config import LazyConfig, ResolverConfig
from linkpreview.metadata import MetadataResolver

from tests.helpers.html_samples import FULL_FEATURED_HTML

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests across modules")


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def full_featured_html() -> str:
    return FULL_FEATURED_HTML


@pytest.fixture
def resolver() -> MetadataResolver:
    """A resolver with default settings and metrics off."""
    return MetadataResolver(ResolverConfig(), metrics_enabled=False)


@pytest.fixture
def html_file(tmp_path: Path) -> Path:
    path = tmp_path / "page.html"
    path.write_text(FULL_FEATURED_HTML, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def reset_lazy_settings():
    """Every test starts without a cached global configuration."""
    LazyConfig.reset()
    yield
    LazyConfig.reset()
