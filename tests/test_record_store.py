import json

import pytest

from app.core.exceptions import (
    DuplicateRecordError,
    RecordNotFoundError,
    UnknownCollectionError,
    ValidationError,
)
from app.db.storage import MemoryStorage
from app.models.record import ProductRecord, UserRecord
from app.schemas.query import FieldFilter, FilterOp, ListOptions
from app.services.record_service import RecordStore
from utils.constants import collection_storage_key

from conftest import run


def _ids(records):
    return [r.id for r in records]


def test_seeds_collections(record_store, storage):
    assert record_store.count("users") == 2
    assert record_store.count("products") == 10
    stored = json.loads(run(storage.get_item("mock_products")))
    assert len(stored) == 10


def test_create_assigns_id_and_equal_timestamps(record_store):
    created = run(record_store.create("products", {"name": "Lamp", "price": 19.5}))

    fetched = record_store.get_by_id("products", created.id)
    assert fetched is not None
    assert fetched.id
    assert fetched.created_at == fetched.updated_at
    assert isinstance(fetched, ProductRecord)


def test_create_ignores_caller_timestamps(record_store):
    created = run(record_store.create(
        "users",
        UserRecord(email="t@example.com", created_at="2001-01-01T00:00:00"),
    ))
    assert created.created_at.year != 2001


def test_create_keeps_given_id_and_rejects_duplicates(record_store):
    run(record_store.create("products", {"id": "fixed", "name": "Chair"}))
    with pytest.raises(DuplicateRecordError):
        run(record_store.create("products", {"id": "fixed", "name": "Chair again"}))


def test_create_persists_whole_collection(record_store, storage):
    created = run(record_store.create("users", {"email": "p@example.com"}))
    stored = json.loads(run(storage.get_item(collection_storage_key("users"))))
    assert created.id in [row["id"] for row in stored]
    assert len(stored) == 3


def test_unknown_collection_rejected(record_store):
    with pytest.raises(UnknownCollectionError):
        run(record_store.create("orders", {"name": "x"}))


def test_update_restamps_and_keeps_other_fields(record_store):
    created = run(record_store.create("products", {"name": "Mug", "price": 5.0, "category": "Home"}))

    updated = run(record_store.update("products", created.id, {"price": 6.5}))

    assert updated.updated_at > updated.created_at
    assert updated.created_at == created.created_at
    assert updated.price == 6.5
    assert updated.name == "Mug"
    assert updated.category == "Home"
    assert record_store.get_by_id("products", created.id).price == 6.5


def test_update_missing_record_or_collection(record_store):
    with pytest.raises(RecordNotFoundError):
        run(record_store.update("products", "missing", {"price": 1}))
    with pytest.raises(RecordNotFoundError):
        run(record_store.update("orders", "product_1", {"price": 1}))


def test_update_rejects_store_managed_fields(record_store):
    with pytest.raises(ValidationError):
        run(record_store.update("products", "product_1", {"created_at": "2001-01-01T00:00:00"}))


def test_delete_removes_exactly_one(record_store):
    before = _ids(record_store.all("products"))
    run(record_store.delete("products", "product_3"))
    after = _ids(record_store.all("products"))
    assert len(after) == len(before) - 1
    assert after == [i for i in before if i != "product_3"]


def test_delete_absent_fails_without_mutation(record_store, storage):
    before = _ids(record_store.all("products"))
    stored_before = run(storage.get_item("mock_products"))
    with pytest.raises(RecordNotFoundError):
        run(record_store.delete("products", "missing"))
    assert _ids(record_store.all("products")) == before
    assert run(storage.get_item("mock_products")) == stored_before


def test_bulk_delete_reports_missing(record_store):
    deleted, missing = run(record_store.bulk_delete("products", ["product_1", "nope", "product_2"]))
    assert deleted == ["product_1", "product_2"]
    assert missing == ["nope"]
    assert record_store.count("products") == 8


def test_filter_equality(record_store):
    result = record_store.list("users", ListOptions(filters=[FieldFilter(field="role", op="==", value="admin")]))
    assert result.total_count == 1
    assert all(r.role.value == "admin" for r in result.items)


def test_two_filters_are_an_intersection(record_store):
    first = FieldFilter(field="price", op=FilterOp.GTE, value=20)
    second = FieldFilter(field="in_stock", op=FilterOp.EQ, value=True)
    big = ListOptions(page_size=100)

    only_first = set(_ids(record_store.list("products", big.model_copy(update={"filters": [first]})).items))
    only_second = set(_ids(record_store.list("products", big.model_copy(update={"filters": [second]})).items))
    both = set(_ids(record_store.list("products", big.model_copy(update={"filters": [first, second]})).items))

    assert both == only_first & only_second


def test_textual_filter_values_are_coerced(record_store):
    run(record_store.create("products", {"id": "cheap", "name": "Cheap", "price": 0.5}))
    result = record_store.list("products", ListOptions(
        filters=[FieldFilter.parse("price:<:1")], page_size=100,
    ))
    assert "cheap" in _ids(result.items)
    assert all(r.price < 1 for r in result.items)


def test_contains_is_case_insensitive(record_store):
    result = record_store.list("users", ListOptions(filters=[FieldFilter(field="email", op="contains", value="ADMIN")]))
    assert _ids(result.items) == ["admin123"]


def test_search_matches_any_search_field(record_store):
    result = record_store.list("users", ListOptions(search="regular"))
    assert _ids(result.items) == ["user456"]


def test_unknown_filter_field_rejected(record_store):
    with pytest.raises(ValidationError):
        record_store.list("users", ListOptions(filters=[FieldFilter(field="password", value="x")]))


def test_sort_ascending_and_descending(record_store):
    asc = record_store.list("products", ListOptions(order_by="price", order_direction="asc", page_size=100)).items
    desc = record_store.list("products", ListOptions(order_by="price", order_direction="desc", page_size=100)).items
    assert [p.price for p in asc] == sorted(p.price for p in asc)
    assert [p.price for p in desc] == sorted((p.price for p in desc), reverse=True)


def test_pages_concatenate_to_full_result(record_store):
    full = record_store.list("products", ListOptions(order_by="name", order_direction="asc", page_size=100))

    collected, page, flags = [], 1, []
    while True:
        result = record_store.list(
            "products", ListOptions(order_by="name", order_direction="asc", page=page, page_size=3)
        )
        collected.extend(result.items)
        flags.append(result.has_more)
        assert result.total_count == full.total_count
        if not result.has_more:
            break
        page += 1

    assert _ids(collected) == _ids(full.items)
    assert flags == [True, True, True, False]


def test_list_unknown_collection_is_empty(record_store):
    result = record_store.list("orders")
    assert result.items == []
    assert result.has_more is False
    assert result.total_count == 0


def test_load_reads_back_persisted_state(storage, record_store):
    run(record_store.create("products", {"id": "kept", "name": "Kept"}))

    reloaded = RecordStore(storage)
    run(reloaded.load())
    assert reloaded.get_by_id("products", "kept").name == "Kept"
    assert reloaded.count("products") == 11


def test_unparsable_collection_falls_back_to_seed():
    storage = MemoryStorage({"mock_products": "[{\"broken\": true}]"})
    store = RecordStore(storage, seed_product_count=4)
    run(store.load())
    assert store.count("products") == 4


def test_contains_skips_missing_values(record_store):
    run(record_store.create("products", {"id": "nocat", "name": "No category"}))
    result = record_store.list("products", ListOptions(
        filters=[FieldFilter(field="category", op="contains", value="on")], page_size=100,
    ))
    assert "nocat" not in _ids(result.items)
    assert all("on" in r.category.lower() for r in result.items)


class BrokenStorage(MemoryStorage):
    fail = False

    async def set_item(self, key, value):
        if self.fail:
            raise ConnectionError("storage offline")
        await super().set_item(key, value)


def test_failed_write_leaves_memory_untouched():
    storage = BrokenStorage()
    store = RecordStore(storage, seed_product_count=3)
    run(store.load())
    before = store.all("products")
    stored_before = run(storage.get_item("mock_products"))

    storage.fail = True
    with pytest.raises(ConnectionError):
        run(store.create("products", {"name": "Lost"}))
    with pytest.raises(ConnectionError):
        run(store.update("products", "product_1", {"price": 1.0}))
    with pytest.raises(ConnectionError):
        run(store.delete("products", "product_2"))
    with pytest.raises(ConnectionError):
        run(store.bulk_delete("products", ["product_1", "product_3"]))

    assert store.all("products") == before
    assert run(storage.get_item("mock_products")) == stored_before
