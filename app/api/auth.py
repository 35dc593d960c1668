"""
app/api/auth.py

Purpose: Authentication endpoints

- Register, login and logout (session cookie)
- Current identity lookup
- Profile and password changes
"""

from fastapi import APIRouter, Depends, Response

from app.api.deps import (
    clear_session_cookie,
    get_session_store,
    require_identity,
    set_session_cookie,
)
from app.core.logging import get_logger
from app.models.identity import Identity
from app.schemas.auth import (
    IdentityResponse,
    LoginRequest,
    PasswordChangeRequest,
    ProfileUpdateRequest,
    RegisterRequest,
)
from app.schemas.response import MessageResponse
from app.services.session_service import SessionStore

logger = get_logger(__name__)
router = APIRouter(prefix="/auth")


@router.post("/register", response_model=IdentityResponse, status_code=201)
async def register(
    payload: RegisterRequest,
    response: Response,
    sessions: SessionStore = Depends(get_session_store),
):
    """
    Creates an account and signs it in.
    """
    identity = await sessions.create_identity(payload.email, payload.password, payload.name)
    set_session_cookie(response, sessions.token_for(identity))
    return IdentityResponse.from_identity(identity)


@router.post("/login", response_model=IdentityResponse)
async def login(
    payload: LoginRequest,
    response: Response,
    sessions: SessionStore = Depends(get_session_store),
):
    identity = sessions.authenticate(payload.email, payload.password)
    set_session_cookie(response, sessions.token_for(identity))
    return IdentityResponse.from_identity(identity)


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response, sessions: SessionStore = Depends(get_session_store)):
    sessions.end_session()
    clear_session_cookie(response)
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=IdentityResponse)
async def me(identity: Identity = Depends(require_identity)):
    return IdentityResponse.from_identity(identity)


@router.patch("/me", response_model=IdentityResponse)
async def update_me(
    payload: ProfileUpdateRequest,
    identity: Identity = Depends(require_identity),
    sessions: SessionStore = Depends(get_session_store),
):
    updated = await sessions.update_profile(
        identity.uid,
        display_name=payload.display_name,
        email=payload.email,
    )
    return IdentityResponse.from_identity(updated)


@router.post("/me/password", response_model=MessageResponse)
async def change_password(
    payload: PasswordChangeRequest,
    identity: Identity = Depends(require_identity),
    sessions: SessionStore = Depends(get_session_store),
):
    await sessions.change_password(identity.uid, payload.current_password, payload.new_password)
    return MessageResponse(message="Password updated successfully")
