"""
app/schemas/records.py

Purpose: Record CRUD payloads

- Create/update bodies for users and products
- Bulk selection payloads and results
"""

from pydantic import BaseModel, Field
from typing import List, Optional

from app.models.identity import Role


class UserCreate(BaseModel):
    id: Optional[str] = None
    email: str
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    role: Role = Role.USER


class UserUpdate(BaseModel):
    email: Optional[str] = None
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    role: Optional[Role] = None


class ProductCreate(BaseModel):
    id: Optional[str] = None
    name: str
    description: str = ""
    price: float = Field(0.0, ge=0)
    image_url: Optional[str] = None
    category: Optional[str] = None
    in_stock: bool = True


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    image_url: Optional[str] = None
    category: Optional[str] = None
    in_stock: Optional[bool] = None


class BulkDeleteRequest(BaseModel):
    ids: List[str] = Field(..., min_length=1)


class BulkDeleteResult(BaseModel):
    deleted: List[str]
    not_found: List[str]
