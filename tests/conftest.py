"""
Test Configuration and Fixtures

Shared fixtures and markers for the contact binding test suite.
"""

import os

import pytest

# Set test environment variables before importing settings.
os.environ.setdefault("CONTACT_BINDING_SEARCH_DEBOUNCE_MS", "0")
os.environ.setdefault("CONTACT_BINDING_LOG_LEVEL", "WARNING")

from contact_binding.binding.types import ContactRecord  # noqa: E402
from contact_binding.config import get_settings  # noqa: E402


# =============================================================================
# PYTEST CONFIGURATION
# =============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests (may use real services)")


def pytest_collection_modifyitems(config, items):
    """Auto-assign the unit marker to anything not explicitly tiered."""
    for item in items:
        if item.get_closest_marker("integration") or item.get_closest_marker("unit"):
            continue
        path = str(getattr(item, "fspath", ""))
        if "/tests/integration/" in path:
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# =============================================================================
# RECORD FIXTURES
# =============================================================================


@pytest.fixture
def john_tan():
    return ContactRecord(id=5, name="John Tan", phone="+60123456789")


@pytest.fixture
def mary_lee():
    return ContactRecord(
        id=7,
        name="Mary Lee",
        position="Procurement Manager",
        phone="03-1234 5678",
        email="mary@acme.com",
    )


@pytest.fixture
def scope_candidates(john_tan, mary_lee):
    """Contacts that belong to the organization being edited."""
    return [john_tan, mary_lee]


@pytest.fixture
def global_alice():
    return ContactRecord(
        id=42,
        name="Alice Wong",
        position="Director",
        email="alice@globex.com",
        origin_scope_name="Globex",
    )
