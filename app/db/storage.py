"""
app/db/storage.py

Purpose: Key/value storage substrate

- Async get/set/remove of JSON text by key
- MemoryStorage for development and tests
- MongoStorage persisting each key as one MongoDB document
- Backend selection from settings
"""

from typing import Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorCollection

from app.core.config import Settings
from app.db.mongo import (
    connect_to_mongo,
    close_mongo_connection,
    check_database_health,
    get_storage_collection,
)
from app.core.logging import get_logger
from utils.time_utils import utcnow

logger = get_logger(__name__)


class StorageBackend:
    """
    Interface shared by the storage backends. Values are JSON text.
    """

    name = "abstract"

    async def get_item(self, key: str) -> Optional[str]:
        raise NotImplementedError

    async def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError

    async def remove_item(self, key: str) -> None:
        raise NotImplementedError

    async def keys(self) -> List[str]:
        raise NotImplementedError

    async def is_healthy(self) -> bool:
        return True


class MemoryStorage(StorageBackend):
    """
    Process-local storage. Contents are lost on restart.
    """

    name = "memory"

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    async def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    async def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    async def keys(self) -> List[str]:
        return list(self._items)


class MongoStorage(StorageBackend):
    """
    Storage backed by a MongoDB collection, one document per key.
    """

    name = "mongo"

    def __init__(self, collection: AsyncIOMotorCollection):
        self._collection = collection

    async def get_item(self, key: str) -> Optional[str]:
        doc = await self._collection.find_one({"_id": key})
        if not doc:
            return None
        return doc.get("value")

    async def set_item(self, key: str, value: str) -> None:
        await self._collection.update_one(
            {"_id": key},
            {"$set": {"value": value, "updated_at": utcnow()}},
            upsert=True,
        )
        logger.debug(f"Stored {key} ({len(value)} bytes)")

    async def remove_item(self, key: str) -> None:
        await self._collection.delete_one({"_id": key})

    async def keys(self) -> List[str]:
        cursor = self._collection.find({}, {"_id": 1})
        return [doc["_id"] async for doc in cursor]

    async def is_healthy(self) -> bool:
        return await check_database_health()


async def create_storage(settings: Settings) -> StorageBackend:
    """
    Builds the configured storage backend, connecting to MongoDB if needed.
    """
    if settings.STORAGE_BACKEND == "mongo":
        await connect_to_mongo()
        return MongoStorage(get_storage_collection())

    logger.info("Using in-memory storage; data will not survive a restart")
    return MemoryStorage()


async def close_storage(storage: StorageBackend) -> None:
    if storage.name == "mongo":
        await close_mongo_connection()
