"""
app/db/seed.py

Purpose: Demo data for an empty store

- Two identities (admin and regular user)
- Matching rows in the users collection
- A batch of demo products with spread-out creation dates
"""

import random
from typing import Dict, List

from app.core.security import hash_password
from app.models.identity import Identity, Role
from app.models.record import ProductRecord, StoredRecord, UserRecord
from utils.constants import PRODUCT_CATEGORIES, PRODUCT_DESCRIPTION
from utils.time_utils import days_ago, utcnow


def seed_identities(password: str) -> List[Identity]:
    now = utcnow()
    return [
        Identity(
            uid="admin123",
            email="admin@example.com",
            display_name="Admin User",
            role=Role.ADMIN,
            created_at=now,
            password_hash=hash_password(password),
        ),
        Identity(
            uid="user456",
            email="user@example.com",
            display_name="Regular User",
            role=Role.USER,
            created_at=now,
            password_hash=hash_password(password),
        ),
    ]


def seed_users() -> List[UserRecord]:
    now = utcnow()
    return [
        UserRecord(
            id="admin123",
            email="admin@example.com",
            display_name="Admin User",
            role=Role.ADMIN,
            created_at=now,
            updated_at=now,
        ),
        UserRecord(
            id="user456",
            email="user@example.com",
            display_name="Regular User",
            role=Role.USER,
            created_at=now,
            updated_at=now,
        ),
    ]


def seed_products(count: int = 10, seed: int = 42) -> List[ProductRecord]:
    """
    Generates `count` demo products. A fixed seed keeps prices stable between runs.
    """
    rng = random.Random(seed)
    products = []
    for i in range(1, count + 1):
        created_at = days_ago(rng.randint(0, 89))
        products.append(
            ProductRecord(
                id=f"product_{i}",
                name=f"Product {i}",
                description=PRODUCT_DESCRIPTION,
                price=rng.randint(0, 9999) / 100,
                image_url=f"https://picsum.photos/seed/product{i}/200/200",
                category=rng.choice(PRODUCT_CATEGORIES),
                in_stock=rng.random() > 0.2,
                created_at=created_at,
                updated_at=created_at,
            )
        )
    return products


def seed_collections(product_count: int = 10) -> Dict[str, List[StoredRecord]]:
    return {
        "users": seed_users(),
        "products": seed_products(product_count),
    }
