"""
Pytest fixtures for stockdesk tests.

Every test gets a fresh in-memory SQLite database shared by the service
layer (``db``) and the HTTP client (``client``).
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from stockdesk.database import Base, get_db, import_models
from stockdesk.main import app
from stockdesk.schemas.product import ProductCreate
from stockdesk.schemas.warehouse import WarehouseCreate
from stockdesk.services import auth_service, product_service, warehouse_service

import_models()


@pytest.fixture(scope="function")
def engine():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db(session_factory):
    """Session for calling services directly."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture(scope="function")
def client(session_factory):
    """Test client whose requests use the per-test database."""

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_product(db):
    """Factory: create a product with the given SKU and starting stock."""

    def _make(sku="WID-1", stock_total=100, price="10.00", **kwargs):
        data = ProductCreate(sku=sku, name=kwargs.pop("name", f"Widget {sku}"), stock_total=stock_total, price=price, **kwargs)
        return product_service.create_product(db, data)

    return _make


@pytest.fixture
def product(make_product):
    return make_product()


@pytest.fixture
def make_warehouse(db):
    def _make(name="Main", location="Dock A"):
        return warehouse_service.create_warehouse(db, WarehouseCreate(name=name, location=location))

    return _make


@pytest.fixture
def admin_user(db):
    return auth_service.create_user(db, "admin", "secret", display_name="Admin User", role="admin")


@pytest.fixture
def admin_headers(admin_user):
    token = auth_service.create_access_token(admin_user)
    return {"Authorization": f"Bearer {token}"}
