"""
app/api/deps.py

Purpose: Request dependencies

- Hands out the stores built at startup
- Resolves the signed-in identity from the session cookie
- Enforces the route permission table on API and page endpoints
"""

from typing import Optional

from fastapi import Depends, Request, Response

from app.core.config import settings
from app.core.exceptions import AuthenticationError, AuthorizationError
from app.models.identity import Identity
from app.services.access_service import AccessPolicy
from app.services.record_service import RecordStore
from app.services.session_service import SessionStore
from utils.constants import NOT_AUTHENTICATED_MESSAGE, UNAUTHORIZED_MESSAGE


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_record_store(request: Request) -> RecordStore:
    return request.app.state.record_store


def get_access_policy(request: Request) -> AccessPolicy:
    return request.app.state.access_policy


def get_session_token(request: Request) -> Optional[str]:
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


def get_current_identity(
    token: Optional[str] = Depends(get_session_token),
    sessions: SessionStore = Depends(get_session_store),
) -> Optional[Identity]:
    """
    Identity of the session cookie, or None. Bad tokens count as no session.
    """
    return sessions.identity_from_token(token)


def require_identity(identity: Optional[Identity] = Depends(get_current_identity)) -> Identity:
    if identity is None:
        raise AuthenticationError(NOT_AUTHENTICATED_MESSAGE)
    return identity


def require_route(route: str):
    """
    Builds a dependency admitting only identities whose role may view `route`.

    Usage:
        @router.get("/users", dependencies=[Depends(require_route("/dashboard/users"))])
    """
    def dependency(
        identity: Identity = Depends(require_identity),
        policy: AccessPolicy = Depends(get_access_policy),
    ) -> Identity:
        if not policy.check_access(route, identity.role):
            raise AuthorizationError(UNAUTHORIZED_MESSAGE, details={"route": route})
        return identity

    return dependency


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=settings.SESSION_COOKIE_NAME, path="/")
