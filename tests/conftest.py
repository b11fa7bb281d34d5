"""
Pytest configuration and fixtures.

Provides shared fixtures for:
- Test settings pointing at a temporary SQLite file
- Storage-level CustomerDatabase
- FastAPI test client (lifespan runs, so the schema is created)
"""

import pytest
from fastapi.testclient import TestClient

from customers_api.config import APIConfig, Settings, StorageConfig
from customers_api.main import create_app
from customers_api.storage.database import CustomerDatabase


def make_settings(db_path, **api_flags) -> Settings:
    return Settings(
        storage=StorageConfig(customer_db_path=str(db_path)),
        api=APIConfig(**api_flags),
    )


@pytest.fixture
def settings_factory():
    """Build settings for a given database path and API flags."""
    return make_settings


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings with default API behaviour and a per-test database file."""
    return make_settings(tmp_path / "customers.db")


@pytest.fixture
async def customer_db(tmp_path):
    db = CustomerDatabase(db_path=str(tmp_path / "customers.db"))
    await db.initialize()
    yield db
    await db.close()


@pytest.fixture
def client(test_settings):
    app = create_app(test_settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def strict_client(tmp_path):
    """Client with missing customers reported as 404."""
    app = create_app(make_settings(tmp_path / "customers.db", not_found_as_404=True))
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def fatal_delete_client(tmp_path):
    """Client that terminates the process on delete failures."""
    app = create_app(make_settings(tmp_path / "customers.db", fatal_on_delete_failure=True))
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def ann() -> dict:
    return {"name": "Ann", "email": "ann@x.com", "status": "active"}
