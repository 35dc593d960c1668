"""
Storage initialization script - seeds the MongoDB key/value collection

Run once before starting the app with STORAGE_BACKEND=mongo:
    python scripts/init_db.py            # seed keys that are missing
    python scripts/init_db.py --reset    # drop every key and seed again
"""

import asyncio
import json
import sys
from pathlib import Path
import os
from dotenv import load_dotenv

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Load environment variables
load_dotenv()

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import DESCENDING
import logging

from app.db.seed import seed_collections, seed_identities
from app.db.storage import StorageBackend, MongoStorage
from utils.constants import IDENTITIES_STORAGE_KEY, collection_storage_key

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)


# MongoDB connection - load from .env
MONGODB_URL = os.getenv("MONGODB_URL")
MONGODB_DB_NAME = os.getenv("MONGODB_DB_NAME", "admin_dashboard")
STORAGE_COLLECTION = os.getenv("MONGODB_STORAGE_COLLECTION", "local_storage")
SEED_PASSWORD = os.getenv("SEED_PASSWORD", "password123")
SEED_PRODUCT_COUNT = int(os.getenv("SEED_PRODUCT_COUNT", "10"))


def build_seed_payloads(password: str = SEED_PASSWORD, product_count: int = SEED_PRODUCT_COUNT):
    """JSON text for every storage key, in the format the stores write."""
    payloads = {
        IDENTITIES_STORAGE_KEY: json.dumps(
            [identity.model_dump(mode="json") for identity in seed_identities(password)]
        ),
    }
    for name, records in seed_collections(product_count).items():
        payloads[collection_storage_key(name)] = json.dumps(
            [record.model_dump(mode="json") for record in records]
        )
    return payloads


async def seed_storage(storage: StorageBackend, reset: bool = False, **seed_options):
    """
    Writes the seed payloads for keys that are missing.

    Returns:
        (removed keys, seeded keys)
    """
    removed = []
    if reset:
        for key in await storage.keys():
            await storage.remove_item(key)
            removed.append(key)
        logger.info(f"🧹 Removed {len(removed)} stored keys")

    seeded = []
    for key, value in build_seed_payloads(**seed_options).items():
        if await storage.get_item(key) is not None:
            logger.info(f"  ℹ️  {key} already present, left untouched")
            continue
        await storage.set_item(key, value)
        seeded.append(key)
        logger.info(f"  ✅ Seeded {key}")

    return removed, seeded


async def init_storage(reset: bool = False):
    logger.info(f"🔌 Connecting to MongoDB: {MONGODB_DB_NAME}")
    client = AsyncIOMotorClient(MONGODB_URL)
    collection = client[MONGODB_DB_NAME][STORAGE_COLLECTION]

    try:
        await client.admin.command('ping')
        logger.info("✅ Connected successfully\n")

        await collection.create_index([("updated_at", DESCENDING)], name="idx_updated_at")
        logger.info("  ✅ updated_at index created")

        storage = MongoStorage(collection)
        await seed_storage(storage, reset=reset)

        logger.info(f"\n📊 Stored keys: {len(await storage.keys())}")
        logger.info("\n✅ Storage initialization complete!")

    except Exception as e:
        logger.error(f"\n❌ Error: {e}")
        raise

    finally:
        client.close()


async def main():
    if not MONGODB_URL:
        raise ValueError("❌ MONGODB_URL must be set in .env file")

    logger.info("=" * 60)
    logger.info("  Admin Dashboard Storage Setup")
    logger.info("=" * 60 + "\n")

    await init_storage(reset="--reset" in sys.argv[1:])

    logger.info("\n" + "=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
