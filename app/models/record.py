"""
app/models/record.py

Purpose: Typed collection records

- StoredRecord base (id, created_at, updated_at)
- One schema per collection (users, products)
- Registry mapping collection names to schemas and search fields
"""

from pydantic import BaseModel, Field
from typing import Dict, Optional, Tuple, Type
from datetime import datetime
from dataclasses import dataclass

from app.models.identity import Role


class StoredRecord(BaseModel):
    """
    Fields every record carries. Timestamps are owned by the store.
    """
    id: Optional[str] = Field(None, description="Unique id within the collection")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserRecord(StoredRecord):
    """
    Row of the users management screen.
    """
    email: str
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    role: Role = Role.USER


class ProductRecord(StoredRecord):
    """
    Row of the products management screen.
    """
    name: str
    description: str = ""
    price: float = Field(0.0, ge=0)
    image_url: Optional[str] = None
    category: Optional[str] = None
    in_stock: bool = True


STORE_MANAGED_FIELDS = frozenset({"id", "created_at", "updated_at"})


@dataclass(frozen=True)
class CollectionSchema:
    name: str
    model: Type[StoredRecord]
    search_fields: Tuple[str, ...]

    @property
    def fields(self) -> frozenset:
        return frozenset(self.model.model_fields)

    @property
    def editable_fields(self) -> frozenset:
        return self.fields - STORE_MANAGED_FIELDS


COLLECTIONS: Dict[str, CollectionSchema] = {
    "users": CollectionSchema(
        name="users",
        model=UserRecord,
        search_fields=("display_name", "email", "role"),
    ),
    "products": CollectionSchema(
        name="products",
        model=ProductRecord,
        search_fields=("name", "description", "category"),
    ),
}
