"""
app/models/identity.py

Purpose: Identity document model

- Authenticated account (uid, email, display name, avatar)
- Role used by the route permission table
- Password hash (never returned by the API)
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum


class Role(str, Enum):
    ADMIN = "admin"
    USER = "user"


class Identity(BaseModel):
    """
    An account able to sign in to the dashboard.
    Persisted as one element of the identity list.
    """
    uid: str = Field(..., description="Unique identity id")
    email: Optional[str] = Field(None, description="Login email (unique)")
    display_name: Optional[str] = Field(None, description="Display name")
    photo_url: Optional[str] = Field(None, description="Avatar URL")
    role: Role = Field(Role.USER, description="Dashboard role")
    created_at: datetime = Field(..., description="Registration time")
    password_hash: Optional[str] = Field(None, description="Salted PBKDF2 hash")

    def public_dict(self) -> dict:
        return self.model_dump(mode="json", exclude={"password_hash"})
