import os

# Keep the test run away from any configured Postgres instance
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RUN_MIGRATIONS"] = "false"
os.environ["JWT_SECRET"] = "test-secret"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fakes import (
    ADMIN_ID,
    FakeBackend,
    INACTIVE_PRODUCT_ID,
    NO_STOCK_RECORD_PRODUCT_ID,
    OTHER_USER_ID,
    PRODUCT_ID,
    USER_ID,
)
from orderflow.auth_local import create_access_token
from orderflow.domain.models import Account, Inventory, Product, ProductStatus, Role
from orderflow.infrastructure.db import get_db, init_models
from orderflow.infrastructure.stores import build_order_service

@pytest.fixture
def backend():
    """Fake stores seeded with two users, an admin and three products."""
    b = FakeBackend()
    b.accounts.add(USER_ID, "user@example.com")
    b.accounts.add(ADMIN_ID, "admin@example.com", Role.ADMIN.value)
    b.accounts.add(OTHER_USER_ID, "other@example.com")
    b.products.add(PRODUCT_ID, "Desk Lamp", 10)
    b.products.add(INACTIVE_PRODUCT_ID, "Old Lamp", 25, ProductStatus.INACTIVE.value)
    b.products.add(NO_STOCK_RECORD_PRODUCT_ID, "Lamp Shade", 5)
    b.inventory.add(PRODUCT_ID, 5)
    b.inventory.add(INACTIVE_PRODUCT_ID, 5)
    return b

@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_models(engine)
    yield engine
    engine.dispose()

@pytest.fixture
def db(engine):
    Session = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)
    session = Session()
    session.add_all([
        Account(id=USER_ID, email="user@example.com", role=Role.USER.value),
        Account(id=ADMIN_ID, email="admin@example.com", role=Role.ADMIN.value),
        Account(id=OTHER_USER_ID, email="other@example.com", role=Role.USER.value),
        Product(id=PRODUCT_ID, name="Desk Lamp", price=10, product_status=ProductStatus.ACTIVE.value, is_available=True),
        Product(id=INACTIVE_PRODUCT_ID, name="Old Lamp", price=25, product_status=ProductStatus.INACTIVE.value, is_available=True),
        Product(id=NO_STOCK_RECORD_PRODUCT_ID, name="Lamp Shade", price=5, product_status=ProductStatus.ACTIVE.value, is_available=True),
    ])
    session.flush()
    session.add_all([
        Inventory(product_id=PRODUCT_ID, quantity=5),
        Inventory(product_id=INACTIVE_PRODUCT_ID, quantity=5),
    ])
    session.commit()
    yield session
    session.close()

@pytest.fixture
def sql_service(db):
    return build_order_service(db)

@pytest.fixture
def client(db):
    from orderflow.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()

def auth_headers(account_id: int, role: str = Role.USER.value) -> dict:
    return {"Authorization": f"Bearer {create_access_token(account_id, role)}"}

@pytest.fixture
def user_headers():
    return auth_headers(USER_ID)

@pytest.fixture
def other_user_headers():
    return auth_headers(OTHER_USER_ID)

@pytest.fixture
def admin_headers():
    return auth_headers(ADMIN_ID, Role.ADMIN.value)
