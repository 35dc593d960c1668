"""
app/schemas/auth.py

Purpose: Authentication request/response schemas

- Register and login payloads
- Profile and password change payloads
- Public identity representation
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from app.models.identity import Identity, Role


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: str
    password: str

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Jane Doe",
                "email": "jane@example.com",
                "password": "s3cret-pass"
            }
        }


class LoginRequest(BaseModel):
    email: str
    password: str


class ProfileUpdateRequest(BaseModel):
    display_name: Optional[str] = None
    email: Optional[str] = None


class PasswordChangeRequest(BaseModel):
    current_password: str
    new_password: str


class IdentityResponse(BaseModel):
    """
    Identity as returned by the API. Never carries the password hash.
    """
    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    role: Role
    created_at: datetime

    @classmethod
    def from_identity(cls, identity: Identity) -> "IdentityResponse":
        return cls.model_validate(identity.public_dict())
