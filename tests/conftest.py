# tests/conftest.py
import itertools
import os

# Must happen before shopstock is imported: keeps the module-level engine in memory
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from shopstock.core.security import create_access_token, get_password_hash
from shopstock.database import Base, get_db
from shopstock.main import app
from shopstock.models.auth import User
from shopstock.services.catalog import CatalogStore
from shopstock.services.ledger import TransactionLedger


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def catalog(db):
    return CatalogStore(db, default_alert_threshold=10)


@pytest.fixture
def ledger(db):
    return TransactionLedger(db, insufficient_stock_policy="reject", missing_product_policy="fail")


@pytest.fixture
def make_product(catalog):
    counter = itertools.count(1)

    def _make(**overrides):
        data = {
            "name": f"Product {next(counter)}",
            "quantity": 10,
            "purchase_price": "1.00",
            "selling_price": "2.00",
        }
        data.update(overrides)
        return catalog.create_product(data)

    return _make


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def _make(role="owner", username=None, password="secret123", is_active=True):
        user = User(
            username=username or f"{role}-{next(counter)}",
            password_hash=get_password_hash(password),
            full_name=f"Test {role}",
            role=role,
            is_active=is_active,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user):
        return {"Authorization": f"Bearer {create_access_token(subject=user.id)}"}

    return _headers


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
