"""
Pytest Configuration and Fixtures

Shared fixtures for the store, gateway, API and client tests.  Every
test gets its own data file under pytest's ``tmp_path`` so tests never
see each other's records.
"""

from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from resource_registry.app.main import create_app
from resource_registry.app.services.resource_gateway import ResourceGateway
from resource_registry.app.services.resource_store import ResourceStore


# ============================================================================
# Store Fixtures
# ============================================================================

@pytest.fixture
def data_file(tmp_path: Path) -> Path:
    """Path of a data file that does not exist yet (nor does its directory)."""
    return tmp_path / "data" / "resources.json"


@pytest.fixture
def store(data_file: Path) -> ResourceStore:
    """Create a fresh, uninitialised store."""
    return ResourceStore(data_file)


@pytest.fixture
def gateway(store: ResourceStore) -> ResourceGateway:
    return ResourceGateway(store)


# ============================================================================
# API Fixtures
# ============================================================================

@pytest.fixture
def client(store: ResourceStore) -> Iterator[TestClient]:
    """A TestClient for an app backed by the per-test store.

    Used as a context manager so the lifespan handler runs and every
    request shares one event loop.
    """
    app = create_app(store=store)
    with TestClient(app) as test_client:
        yield test_client


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
