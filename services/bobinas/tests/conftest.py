"""
Pytest fixtures for the Bobinas service tests.

Provides an in-memory database, record factories, an in-process redis
replacement for the token revocation list and an authenticated test client.
"""
import os

# Point the engine at SQLite before the application modules are imported.
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import date
from typing import Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from bobinas import auth, cache, crud, models, schemas
from bobinas.database import Base, get_db
from bobinas.main import app, get_storage
from bobinas.service import InventoryService
from bobinas.stores import SqlRecordStore


class FakeRedis:
    """Dict-backed stand-in for the few redis calls cache.py makes."""

    def __init__(self):
        self.data = {}

    def get(self, key):
        return self.data.get(key)

    def setex(self, key, ttl, value):
        self.data[key] = value


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch):
    client = FakeRedis()
    monkeypatch.setattr(cache, "redis_client", client)
    return client


@pytest.fixture
def db_session():
    """Fresh in-memory database for each test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def store(db_session):
    return SqlRecordStore(db_session)


@pytest.fixture
def service(store):
    return InventoryService(store)


def make_candidate(**overrides) -> dict:
    """A complete, valid bobina candidate as it would come from the form."""
    candidate = {
        "code": "BOB001",
        "plastic_type": "PE",
        "color": "Transparente",
        "thickness": "0.050",
        "width": "1200",
        "weight": "25.5",
        "stock_quantity": "10",
        "location": "Galpão A - Prateleira 3",
        "entry_date": "2024-03-01",
        "expiry_date": "",
        "supplier": "Plastiflex",
        "notes": "",
    }
    candidate.update(overrides)
    return candidate


def make_bobina(code: str = "BOB001", stock_quantity: int = 10, supplier: Optional[str] = None, **overrides) -> schemas.Bobina:
    """A persisted-looking Bobina record for the pure derived-state functions."""
    fields = {
        "id": f"id-{code}",
        "owner_id": "user-1",
        "code": code,
        "plastic_type": "PE",
        "color": "Transparente",
        "thickness": "0.05",
        "width": "1000",
        "weight": "20",
        "stock_quantity": stock_quantity,
        "entry_date": date(2024, 1, 1),
        "supplier": supplier,
        "created_at": "2024-01-01T00:00:00Z",
    }
    fields.update(overrides)
    return schemas.Bobina(**fields)


@pytest.fixture
def candidate_factory():
    return make_candidate


@pytest.fixture
def bobina_factory():
    return make_bobina


@pytest.fixture
def user(db_session):
    return crud.create_user(
        db_session,
        name="Ana Souza",
        email="ana@fabrica.com.br",
        password_hash=auth.get_password_hash("segredo123"),
    )


@pytest.fixture
def token(user):
    return auth.create_access_token(user)


class StubStorage:
    """Object storage double returning a fixed URL or raising a given error."""

    def __init__(self, url="https://cdn.example.com/photos/bobina.jpg", error=None):
        self.url = url
        self.error = error
        self.uploads = []

    def upload(self, data, filename, content_type=None):
        self.uploads.append((filename, content_type, len(data)))
        if self.error is not None:
            raise self.error
        return self.url


@pytest.fixture
def storage():
    return StubStorage()


@pytest.fixture
def client(db_session, storage, token):
    """Test client with the database and storage overridden, authenticated as user."""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    test_client = TestClient(app)
    test_client.headers.update({"Authorization": f"Bearer {token}"})
    try:
        yield test_client
    finally:
        app.dependency_overrides.clear()
