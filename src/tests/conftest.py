"""Pytest configuration and fixtures for inventory ledger tests."""

from datetime import date

import pytest

from inventory_ledger.models.base import Base
from inventory_ledger.services import supplier_service
from inventory_ledger.services.database import (
    create_database_engine,
    create_session_factory,
    init_database,
)
from inventory_ledger.services.store import InventoryStore
from inventory_ledger.utils.config import reset_config


@pytest.fixture(scope="function")
def test_engine():
    """Provide a clean in-memory database for each test function.

    This fixture:
    1. Creates an in-memory SQLite database
    2. Creates all tables
    3. Provides the engine to the test
    4. Drops all tables after the test completes
    """
    engine = create_database_engine("sqlite:///:memory:")
    init_database(engine)

    yield engine

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(test_engine):
    """Provide a session factory bound to the test database."""
    return create_session_factory(test_engine)


@pytest.fixture(scope="function")
def store(session_factory):
    """Provide an explicit store handle for service calls."""
    store = InventoryStore(session_factory())
    yield store
    store.close()


@pytest.fixture(scope="function")
def sample_supplier(store):
    """Provide a sample supplier for purchases."""
    return supplier_service.create_supplier(
        store,
        name="Timber Traders Ltd",
        phone="9841000000",
        address="Kathmandu",
    )


@pytest.fixture(scope="function")
def make_draft(sample_supplier):
    """Build purchase drafts for the sample supplier with field overrides."""

    def _make(**overrides):
        data = {
            "supplier_id": sample_supplier.id,
            "material_name": "Teak Wood",
            "quantity": 100,
            "price_per_unit": 800,
            "purchase_date": date(2025, 12, 20).isoformat(),
        }
        data.update(overrides)
        return data

    return _make


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Isolate tests from environment configuration."""
    for name in ("INVENTORY_LEDGER_ENV", "INVENTORY_LEDGER_DB_URL", "INVENTORY_LEDGER_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()
