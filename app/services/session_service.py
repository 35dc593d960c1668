"""
app/services/session_service.py

Purpose: Identity and session management

- Registers identities and verifies credentials
- Tracks the current identity and mirrors it into a session token
- Resolves identities from session tokens
- Persists the identity list to the storage substrate
"""

import asyncio
import json
import secrets
from typing import List, Optional

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from app.core.exceptions import (
    AuthenticationError,
    DuplicateIdentityError,
    RecordNotFoundError,
    ValidationError,
)
from app.core.logging import get_logger, LogContext
from app.core.security import (
    decode_session_token,
    encode_session_token,
    hash_password,
    verify_password,
)
from app.db.seed import seed_identities
from app.db.storage import StorageBackend
from app.models.identity import Identity, Role
from utils.constants import (
    CURRENT_PASSWORD_INCORRECT_MESSAGE,
    CURRENT_PASSWORD_REQUIRED_MESSAGE,
    DUPLICATE_EMAIL_MESSAGE,
    IDENTITIES_STORAGE_KEY,
    INVALID_CREDENTIALS_MESSAGE,
    NAME_REQUIRED_MESSAGE,
    USER_NOT_FOUND_MESSAGE,
)
from utils.time_utils import utcnow
from utils.validation_utils import (
    normalize_email,
    sanitize_display_name,
    validate_email,
    validate_password,
)

logger = get_logger(__name__)

_identity_list = TypeAdapter(List[Identity])


class SessionStore:
    """
    Holds the identity list and the current session.

    One instance is built at startup and shared through dependency injection.
    The HTTP layer resolves every request from its own cookie with
    `identity_from_token`; the in-memory current identity serves callers that
    drive a single session (scripts, tests).
    """

    def __init__(
        self,
        storage: StorageBackend,
        seed_password: str = "password123",
        password_min_length: int = 6,
    ):
        self._storage = storage
        self._seed_password = seed_password
        self._password_min_length = password_min_length
        self._identities: List[Identity] = []
        self._current: Optional[Identity] = None
        self._token: Optional[str] = None
        self._lock = asyncio.Lock()

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def identities(self) -> List[Identity]:
        return list(self._identities)

    async def load(self) -> None:
        """
        Reads the identity list from storage, seeding it when missing or unreadable.
        """
        raw = await self._storage.get_item(IDENTITIES_STORAGE_KEY)
        if raw:
            try:
                self._identities = _identity_list.validate_json(raw)
                logger.info(f"Loaded {len(self._identities)} identities from storage")
                return
            except PydanticValidationError as e:
                logger.error(f"Error parsing stored identities, falling back to seed data: {e}")

        async with self._lock:
            await self._commit(seed_identities(self._seed_password))
        logger.info(f"Seeded {len(self._identities)} identities")

    async def _commit(self, identities: List[Identity]) -> None:
        """
        Writes the identity list to storage, then makes it the live list.
        A failed write leaves memory untouched. Callers hold the lock.
        """
        payload = json.dumps([identity.model_dump(mode="json") for identity in identities])
        await self._storage.set_item(IDENTITIES_STORAGE_KEY, payload)
        self._identities = identities
        if self._current is not None:
            self._current = self.identity_by_id(self._current.uid)

    def _find_by_email(self, email: Optional[str]) -> Optional[Identity]:
        if not email:
            return None
        return next((i for i in self._identities if i.email == email), None)

    def _new_uid(self) -> str:
        uid = f"user_{int(utcnow().timestamp() * 1000)}"
        while self.identity_by_id(uid) is not None:
            uid = f"{uid}_{secrets.token_hex(2)}"
        return uid

    def _start_session(self, identity: Identity) -> None:
        self._current = identity
        self._token = encode_session_token(identity.uid)

    def token_for(self, identity: Identity) -> str:
        return encode_session_token(identity.uid)

    async def create_identity(self, email: str, password: str, name: str) -> Identity:
        """
        Registers a new identity and makes it the current session.

        Raises:
            DuplicateIdentityError: If the email is already registered
            ValidationError: If email or password are unusable
        """
        email = normalize_email(email)
        if not validate_email(email):
            raise ValidationError("A valid email address is required", details={"field": "email"})

        async with self._lock:
            if self._find_by_email(email):
                logger.warning("Registration rejected, email already registered")
                raise DuplicateIdentityError(DUPLICATE_EMAIL_MESSAGE)

            problem = validate_password(password, self._password_min_length)
            if problem:
                raise ValidationError(problem, details={"field": "password"})

            identity = Identity(
                uid=self._new_uid(),
                email=email,
                display_name=sanitize_display_name(name),
                role=Role.USER,
                created_at=utcnow(),
                password_hash=hash_password(password),
            )
            await self._commit(self._identities + [identity])

        self._start_session(identity)

        with LogContext(uid=identity.uid):
            logger.info("Identity created")

        return identity

    def authenticate(self, email: str, password: str) -> Identity:
        """
        Verifies credentials and makes the identity the current session.

        Raises:
            AuthenticationError: Unknown email or wrong password
        """
        identity = self._find_by_email(normalize_email(email))
        if identity is None or not verify_password(password or "", identity.password_hash):
            logger.info("Login failed")
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

        self._start_session(identity)
        with LogContext(uid=identity.uid):
            logger.info("Login succeeded")
        return identity

    def end_session(self) -> None:
        self._current = None
        self._token = None

    def current_identity(self, token: Optional[str] = None) -> Optional[Identity]:
        """
        Returns the in-memory current identity, or re-resolves it from a token.

        Args:
            token: Persisted session token; defaults to the store's own token

        Returns:
            The identity, or None when there is no usable session
        """
        if self._current is not None:
            return self._current

        identity = self.identity_from_token(token or self._token)
        if identity is not None:
            self._current = identity
        return identity

    def identity_from_token(self, token: Optional[str]) -> Optional[Identity]:
        uid = decode_session_token(token)
        if uid is None:
            return None
        return self.identity_by_id(uid)

    def identity_by_id(self, uid: str) -> Optional[Identity]:
        return next((i for i in self._identities if i.uid == uid), None)

    async def _replace(self, updated: Identity) -> None:
        await self._commit([updated if i.uid == updated.uid else i for i in self._identities])

    async def update_profile(
        self,
        uid: str,
        display_name: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Identity:
        """
        Updates the display name and/or email of an identity.
        """
        async with self._lock:
            updated = self._profile_changes(uid, display_name, email)
            if updated is None:
                return self.identity_by_id(uid)
            await self._replace(updated)

        with LogContext(uid=uid):
            logger.info("Profile updated")
        return updated

    def _profile_changes(
        self,
        uid: str,
        display_name: Optional[str],
        email: Optional[str],
    ) -> Optional[Identity]:
        identity = self.identity_by_id(uid)
        if identity is None:
            raise RecordNotFoundError(USER_NOT_FOUND_MESSAGE, details={"uid": uid})

        changes = {}
        if display_name is not None:
            name = sanitize_display_name(display_name)
            if not name:
                raise ValidationError(NAME_REQUIRED_MESSAGE, details={"field": "display_name"})
            changes["display_name"] = name

        if email is not None:
            email = normalize_email(email)
            if not validate_email(email):
                raise ValidationError("A valid email address is required", details={"field": "email"})
            owner = self._find_by_email(email)
            if owner is not None and owner.uid != uid:
                raise DuplicateIdentityError(DUPLICATE_EMAIL_MESSAGE)
            changes["email"] = email

        if not changes:
            return None
        return identity.model_copy(update=changes)

    async def change_password(self, uid: str, current_password: str, new_password: str) -> None:
        async with self._lock:
            identity = self.identity_by_id(uid)
            if identity is None:
                raise RecordNotFoundError(USER_NOT_FOUND_MESSAGE, details={"uid": uid})

            if not current_password:
                raise ValidationError(CURRENT_PASSWORD_REQUIRED_MESSAGE, details={"field": "current_password"})
            if not verify_password(current_password, identity.password_hash):
                raise AuthenticationError(CURRENT_PASSWORD_INCORRECT_MESSAGE)

            problem = validate_password(new_password, self._password_min_length)
            if problem:
                raise ValidationError(problem, details={"field": "new_password"})

            await self._replace(identity.model_copy(update={"password_hash": hash_password(new_password)}))

        with LogContext(uid=uid):
            logger.info("Password changed")
