import asyncio

import pytest
from fastapi.testclient import TestClient

from app.core.security import encode_session_token
from app.db.storage import MemoryStorage
from app.main import app
from app.services.record_service import RecordStore
from app.services.session_service import SessionStore

SEED_PASSWORD = "password123"


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def session_store(storage):
    store = SessionStore(storage, seed_password=SEED_PASSWORD)
    run(store.load())
    return store


@pytest.fixture
def record_store(storage):
    store = RecordStore(storage, seed_product_count=10)
    run(store.load())
    return store


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_client(client):
    client.cookies.set("session", encode_session_token("admin123"))
    return client


@pytest.fixture
def user_client(client):
    client.cookies.set("session", encode_session_token("user456"))
    return client
