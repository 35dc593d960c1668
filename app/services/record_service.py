"""
app/services/record_service.py

Purpose: Collection record management

- Create, read, update and delete typed records
- Filtered, searched, sorted and paginated listing
- Whole-collection persistence to the storage substrate
- Seed data fallback on empty or unreadable storage
"""

import asyncio
import json
import uuid
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from app.core.exceptions import (
    DuplicateRecordError,
    RecordNotFoundError,
    UnknownCollectionError,
    ValidationError,
)
from app.core.logging import get_logger, LogContext
from app.db.seed import seed_collections
from app.db.storage import StorageBackend
from app.models.record import COLLECTIONS, CollectionSchema, StoredRecord
from app.schemas.query import FieldFilter, FilterOp, ListOptions, ListResult
from utils.constants import collection_storage_key
from utils.time_utils import next_timestamp

logger = get_logger(__name__)


def generate_id() -> str:
    return uuid.uuid4().hex[:12]


def field_value(record: StoredRecord, field: str) -> Any:
    """
    Reads a field for comparison, unwrapping enums to their plain value.
    """
    value = getattr(record, field, None)
    if isinstance(value, Enum):
        return value.value
    return value


def matches_filter(record: StoredRecord, condition: FieldFilter) -> bool:
    actual = field_value(record, condition.field)
    expected = condition.value.value if isinstance(condition.value, Enum) else condition.value
    op = condition.op

    if op == FilterOp.CONTAINS:
        if actual is None:
            return False
        return str(expected).lower() in str(actual).lower()
    if op == FilterOp.EQ:
        return actual == expected
    if op == FilterOp.NE:
        return actual != expected

    # Ordering comparisons between incomparable values never match
    try:
        if op == FilterOp.GT:
            return actual > expected
        if op == FilterOp.GTE:
            return actual >= expected
        if op == FilterOp.LT:
            return actual < expected
        if op == FilterOp.LTE:
            return actual <= expected
    except TypeError:
        return False
    return True


def matches_search(record: StoredRecord, term: str, fields: Iterable[str]) -> bool:
    term = term.lower()
    for field in fields:
        value = field_value(record, field)
        if value is not None and term in str(value).lower():
            return True
    return False


def sort_records(records: List[StoredRecord], field: str, direction: str) -> List[StoredRecord]:
    """
    Stable sort on one field. Missing values go last when ascending.
    """
    present = [r for r in records if field_value(r, field) is not None]
    missing = [r for r in records if field_value(r, field) is None]
    try:
        present.sort(key=lambda r: field_value(r, field), reverse=direction == "desc")
    except TypeError:
        logger.warning(f"Mixed value types in {field}; sorting by their text form")
        present.sort(key=lambda r: str(field_value(r, field)), reverse=direction == "desc")
    if direction == "desc":
        return missing + present
    return present + missing


class RecordStore:
    """
    In-memory collections of typed records, mirrored to storage on every mutation.

    One instance is built at startup and shared through dependency injection.
    """

    def __init__(self, storage: StorageBackend, seed_product_count: int = 10):
        self._storage = storage
        self._seed_product_count = seed_product_count
        self._collections: Dict[str, List[StoredRecord]] = {}
        self._lock = asyncio.Lock()

    def schema(self, collection: str) -> CollectionSchema:
        schema = COLLECTIONS.get(collection)
        if schema is None:
            raise UnknownCollectionError(collection)
        return schema

    def count(self, collection: str) -> int:
        return len(self._collections.get(collection, []))

    def all(self, collection: str) -> List[StoredRecord]:
        return list(self._collections.get(collection, []))

    async def load(self) -> None:
        """
        Reads every known collection from storage. A collection that is
        missing or fails to parse falls back to its seed data.
        """
        seeds = seed_collections(self._seed_product_count)
        for name, schema in COLLECTIONS.items():
            key = collection_storage_key(name)
            raw = await self._storage.get_item(key)
            if raw:
                try:
                    adapter = TypeAdapter(List[schema.model])
                    self._collections[name] = adapter.validate_json(raw)
                    logger.info(f"Loaded {len(self._collections[name])} {name} from storage")
                    continue
                except PydanticValidationError as e:
                    logger.error(f"Error parsing stored {name}, falling back to seed data: {e}")

            async with self._lock:
                await self._commit(name, list(seeds.get(name, [])))
            logger.info(f"Seeded {len(self._collections[name])} {name}")

    async def _commit(self, collection: str, records: List[StoredRecord]) -> None:
        """
        Writes `records` to storage, then makes them the live collection.
        A failed write leaves memory untouched. Callers hold the lock.
        """
        payload = json.dumps([record.model_dump(mode="json") for record in records])
        await self._storage.set_item(collection_storage_key(collection), payload)
        self._collections[collection] = records

    def _index_of(self, collection: str, record_id: str) -> int:
        records = self._collections.get(collection)
        if records is None:
            raise RecordNotFoundError(f"Collection {collection} does not exist")
        for index, record in enumerate(records):
            if record.id == record_id:
                return index
        raise RecordNotFoundError(
            f"Item with ID {record_id} not found in {collection}",
            details={"collection": collection, "id": record_id},
        )

    async def create(self, collection: str, record: Any) -> StoredRecord:
        """
        Stores a new record.

        Args:
            collection: Collection name
            record: Schema instance or a mapping of its fields

        Returns:
            The stored record, with id and timestamps assigned
        """
        schema = self.schema(collection)
        data = record.model_dump(exclude_unset=True) if isinstance(record, StoredRecord) else dict(record)
        data.pop("created_at", None)
        data.pop("updated_at", None)

        now = next_timestamp()
        data["id"] = data.get("id") or generate_id()
        data["created_at"] = now
        data["updated_at"] = now

        try:
            stored = schema.model.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid {collection} record", details=e.errors(include_url=False))

        async with self._lock:
            records = self._collections.get(collection, [])
            if any(r.id == stored.id for r in records):
                raise DuplicateRecordError(
                    f"Item with ID {stored.id} already exists in {collection}",
                    details={"collection": collection, "id": stored.id},
                )
            await self._commit(collection, records + [stored])

        with LogContext(collection=collection, record_id=stored.id):
            logger.info("Record created")
        return stored

    def get_by_id(self, collection: str, record_id: str) -> Optional[StoredRecord]:
        for record in self._collections.get(collection, []):
            if record.id == record_id:
                return record
        return None

    async def update(self, collection: str, record_id: str, fields: Dict[str, Any]) -> StoredRecord:
        """
        Merges `fields` into an existing record and restamps `updated_at`.

        Raises:
            RecordNotFoundError: If the collection or id does not exist
            ValidationError: If a field is unknown or the merged record is invalid
        """
        with LogContext(collection=collection, record_id=record_id):
            async with self._lock:
                updated = await self._update_locked(collection, record_id, fields)
            logger.info(f"Record updated: {sorted(fields)}")
            return updated

    async def _update_locked(self, collection: str, record_id: str, fields: Dict[str, Any]) -> StoredRecord:
        index = self._index_of(collection, record_id)
        schema = self.schema(collection)

        unknown = set(fields) - schema.editable_fields
        if unknown:
            raise ValidationError(
                f"Fields cannot be updated: {', '.join(sorted(unknown))}",
                details={"fields": sorted(unknown)},
            )

        records = list(self._collections[collection])
        current = records[index]
        merged = {**current.model_dump(), **fields}
        merged["updated_at"] = next_timestamp(current.updated_at or current.created_at)

        try:
            updated = schema.model.model_validate(merged)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid {collection} record", details=e.errors(include_url=False))

        records[index] = updated
        await self._commit(collection, records)
        return updated

    async def delete(self, collection: str, record_id: str) -> None:
        """
        Removes one record.

        Raises:
            RecordNotFoundError: If the collection or id does not exist
        """
        with LogContext(collection=collection, record_id=record_id):
            async with self._lock:
                index = self._index_of(collection, record_id)
                records = list(self._collections[collection])
                del records[index]
                await self._commit(collection, records)
            logger.info("Record deleted")

    async def bulk_delete(self, collection: str, record_ids: Iterable[str]) -> Tuple[List[str], List[str]]:
        """
        Removes every listed record that exists, persisting once.

        Returns:
            (deleted ids, ids that were not found)
        """
        self.schema(collection)
        wanted = list(dict.fromkeys(record_ids))
        async with self._lock:
            records = self._collections.get(collection, [])
            present = {r.id for r in records}

            deleted = [record_id for record_id in wanted if record_id in present]
            missing = [record_id for record_id in wanted if record_id not in present]

            if deleted:
                doomed = set(deleted)
                await self._commit(collection, [r for r in records if r.id not in doomed])

        with LogContext(collection=collection):
            logger.info(f"Bulk delete removed {len(deleted)} records, {len(missing)} not found")
        return deleted, missing

    def _coerce(self, schema: CollectionSchema, condition: FieldFilter) -> FieldFilter:
        """
        Converts a textual filter value to the field's type (e.g. "9.5" for price).
        """
        if condition.op == FilterOp.CONTAINS or not isinstance(condition.value, str):
            return condition
        annotation = schema.model.model_fields[condition.field].annotation
        try:
            value = TypeAdapter(annotation).validate_python(condition.value)
        except PydanticValidationError:
            return condition
        return condition.model_copy(update={"value": value})

    def select(self, collection: str, options: ListOptions) -> List[StoredRecord]:
        """
        Applies filters, search and sorting; no pagination.
        """
        records = self._collections.get(collection)
        if records is None:
            return []
        schema = self.schema(collection)

        unknown = {f.field for f in options.filters} - schema.fields
        if options.order_by and options.order_by not in schema.fields:
            unknown.add(options.order_by)
        if unknown:
            raise ValidationError(
                f"Unknown {collection} fields: {', '.join(sorted(unknown))}",
                details={"fields": sorted(unknown)},
            )

        conditions = [self._coerce(schema, f) for f in options.filters]
        items = [r for r in records if all(matches_filter(r, c) for c in conditions)]

        if options.search:
            items = [r for r in items if matches_search(r, options.search, schema.search_fields)]

        if options.order_by:
            items = sort_records(items, options.order_by, options.order_direction)

        return items

    def list(self, collection: str, options: Optional[ListOptions] = None) -> ListResult:
        """
        Lists one page of a collection.

        Returns:
            ListResult with the page items, whether more pages follow, and
            the number of records matching the query
        """
        options = options or ListOptions()
        if collection not in self._collections:
            return ListResult(items=[], has_more=False, total_count=0, page=options.page, page_size=options.page_size)

        items = self.select(collection, options)

        start = (options.page - 1) * options.page_size
        end = start + options.page_size

        return ListResult(
            items=items[start:end],
            has_more=end < len(items),
            total_count=len(items),
            page=options.page,
            page_size=options.page_size,
        )
