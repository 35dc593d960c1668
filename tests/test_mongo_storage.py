import importlib.util
import json
from pathlib import Path

from mongomock_motor import AsyncMongoMockClient

from app.core.config import Settings
from app.db import storage as storage_module
from app.db.storage import MongoStorage, close_storage, create_storage
from app.services.record_service import RecordStore
from app.services.session_service import SessionStore
from utils.constants import IDENTITIES_STORAGE_KEY

from conftest import SEED_PASSWORD, run


def _collection():
    return AsyncMongoMockClient()["admin_dashboard"]["local_storage"]


def _load_init_script():
    path = Path(__file__).resolve().parent.parent / "scripts" / "init_db.py"
    spec = importlib.util.spec_from_file_location("init_db", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_item_round_trip():
    collection = _collection()
    storage = MongoStorage(collection)

    assert run(storage.get_item("mock_products")) is None
    run(storage.set_item("mock_products", "[]"))
    run(storage.set_item("mock_products", '[{"id": "p1"}]'))
    assert run(storage.get_item("mock_products")) == '[{"id": "p1"}]'

    doc = run(collection.find_one({"_id": "mock_products"}))
    assert doc["value"] == '[{"id": "p1"}]'
    assert doc["updated_at"] is not None
    assert run(collection.count_documents({})) == 1


def test_keys_and_remove_item():
    storage = MongoStorage(_collection())
    run(storage.set_item("mock_users", "[]"))
    run(storage.set_item("mockUsers", "[]"))
    assert sorted(run(storage.keys())) == ["mockUsers", "mock_users"]

    run(storage.remove_item("mock_users"))
    run(storage.remove_item("never-stored"))
    assert run(storage.keys()) == ["mockUsers"]
    assert run(storage.get_item("mock_users")) is None


def test_stores_persist_through_mongo():
    storage = MongoStorage(_collection())
    records = RecordStore(storage, seed_product_count=3)
    sessions = SessionStore(storage, seed_password=SEED_PASSWORD)
    run(records.load())
    run(sessions.load())

    run(records.create("products", {"id": "kept", "name": "Kept", "price": 2.5}))
    run(sessions.create_identity("mongo@example.com", "mongo-pass", "Mongo"))

    reloaded_records = RecordStore(storage, seed_product_count=3)
    reloaded_sessions = SessionStore(storage, seed_password=SEED_PASSWORD)
    run(reloaded_records.load())
    run(reloaded_sessions.load())

    assert reloaded_records.get_by_id("products", "kept").price == 2.5
    assert reloaded_records.count("products") == 4
    assert "mongo@example.com" in {i.email for i in reloaded_sessions.identities}


def test_create_storage_picks_mongo_backend(monkeypatch):
    collection = _collection()
    calls = []

    async def fake_connect():
        calls.append("connect")

    async def fake_close():
        calls.append("close")

    monkeypatch.setattr(storage_module, "connect_to_mongo", fake_connect)
    monkeypatch.setattr(storage_module, "close_mongo_connection", fake_close)
    monkeypatch.setattr(storage_module, "get_storage_collection", lambda: collection)

    storage = run(create_storage(Settings(STORAGE_BACKEND="mongo")))
    assert isinstance(storage, MongoStorage)
    run(storage.set_item("mock_users", "[]"))
    assert run(collection.count_documents({})) == 1

    run(close_storage(storage))
    assert calls == ["connect", "close"]


def test_create_storage_defaults_to_memory():
    storage = run(create_storage(Settings(STORAGE_BACKEND="memory")))
    assert storage.name == "memory"
    run(close_storage(storage))


def test_seed_script_fills_missing_keys_and_resets():
    init_db = _load_init_script()
    storage = MongoStorage(_collection())
    run(storage.set_item(IDENTITIES_STORAGE_KEY, "[]"))
    run(storage.set_item("stale_key", "[]"))

    removed, seeded = run(init_db.seed_storage(storage, password=SEED_PASSWORD, product_count=2))
    assert removed == []
    assert sorted(seeded) == ["mock_products", "mock_users"]
    assert run(storage.get_item(IDENTITIES_STORAGE_KEY)) == "[]"

    removed, seeded = run(init_db.seed_storage(storage, reset=True, password=SEED_PASSWORD, product_count=2))
    assert sorted(removed) == sorted([IDENTITIES_STORAGE_KEY, "mock_products", "mock_users", "stale_key"])
    assert sorted(seeded) == sorted([IDENTITIES_STORAGE_KEY, "mock_products", "mock_users"])
    assert "stale_key" not in run(storage.keys())
    assert len(json.loads(run(storage.get_item("mock_products")))) == 2
