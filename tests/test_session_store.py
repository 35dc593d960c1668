import pytest

from app.core.exceptions import (
    AuthenticationError,
    DuplicateIdentityError,
    RecordNotFoundError,
    ValidationError,
)
from app.core.security import decode_session_token, encode_session_token
from app.db.storage import MemoryStorage
from app.models.identity import Role
from app.services.session_service import SessionStore
from utils.constants import IDENTITIES_STORAGE_KEY

from conftest import SEED_PASSWORD, run


def test_seeds_identities_on_empty_storage(session_store, storage):
    emails = {i.email for i in session_store.identities}
    assert emails == {"admin@example.com", "user@example.com"}
    assert run(storage.get_item(IDENTITIES_STORAGE_KEY)) is not None


def test_create_identity_defaults_and_session(session_store):
    identity = run(session_store.create_identity("New@Example.com", "secret1", "New Person"))

    assert identity.uid.startswith("user_")
    assert identity.role == Role.USER
    assert identity.email == "new@example.com"
    assert session_store.current_identity() == identity
    assert decode_session_token(session_store.token) == identity.uid


def test_duplicate_email_fails_without_mutation(session_store, storage):
    before = list(session_store.identities)
    stored_before = run(storage.get_item(IDENTITIES_STORAGE_KEY))

    with pytest.raises(DuplicateIdentityError):
        run(session_store.create_identity("admin@example.com", "another-pass", "Someone"))

    assert session_store.identities == before
    assert run(storage.get_item(IDENTITIES_STORAGE_KEY)) == stored_before
    assert session_store.current_identity() is None


def test_short_password_rejected(session_store):
    with pytest.raises(ValidationError):
        run(session_store.create_identity("short@example.com", "123", "Short"))


def test_authenticate_verifies_password(session_store):
    identity = session_store.authenticate("admin@example.com", SEED_PASSWORD)
    assert identity.uid == "admin123"
    assert session_store.current_identity().uid == "admin123"

    session_store.end_session()
    with pytest.raises(AuthenticationError):
        session_store.authenticate("admin@example.com", "wrong-password")
    with pytest.raises(AuthenticationError):
        session_store.authenticate("ghost@example.com", SEED_PASSWORD)
    assert session_store.current_identity() is None


def test_end_session_clears_identity_and_token(session_store):
    session_store.authenticate("user@example.com", SEED_PASSWORD)
    session_store.end_session()
    assert session_store.token is None
    assert session_store.current_identity() is None


def test_current_identity_resolves_persisted_token(storage):
    first = SessionStore(storage, seed_password=SEED_PASSWORD)
    run(first.load())
    created = run(first.create_identity("carol@example.com", "carol-pass", "Carol"))
    token = first.token

    # a fresh store over the same storage only has the token to go on
    second = SessionStore(storage, seed_password=SEED_PASSWORD)
    run(second.load())
    assert second.current_identity() is None
    assert second.current_identity(token).uid == created.uid


@pytest.mark.parametrize("token", ["", "not base64!", encode_session_token("nobody"), "WzFd"])
def test_bad_tokens_mean_no_session(session_store, token):
    assert session_store.current_identity(token) is None
    assert session_store.identity_from_token(token) is None


def test_identity_by_id(session_store):
    assert session_store.identity_by_id("user456").email == "user@example.com"
    assert session_store.identity_by_id("missing") is None


def test_unparsable_storage_falls_back_to_seed():
    storage = MemoryStorage({IDENTITIES_STORAGE_KEY: "{not json"})
    store = SessionStore(storage, seed_password=SEED_PASSWORD)
    run(store.load())
    assert {i.uid for i in store.identities} == {"admin123", "user456"}


def test_update_profile(session_store):
    updated = run(session_store.update_profile("user456", display_name="  Renamed   User "))
    assert updated.display_name == "Renamed User"
    assert session_store.identity_by_id("user456").display_name == "Renamed User"

    with pytest.raises(ValidationError):
        run(session_store.update_profile("user456", display_name="   "))
    with pytest.raises(DuplicateIdentityError):
        run(session_store.update_profile("user456", email="admin@example.com"))
    with pytest.raises(RecordNotFoundError):
        run(session_store.update_profile("missing", display_name="X"))


def test_change_password(session_store):
    with pytest.raises(AuthenticationError):
        run(session_store.change_password("user456", "wrong", "brand-new"))
    with pytest.raises(ValidationError):
        run(session_store.change_password("user456", SEED_PASSWORD, "tiny"))

    run(session_store.change_password("user456", SEED_PASSWORD, "brand-new"))
    assert session_store.authenticate("user@example.com", "brand-new").uid == "user456"


class BrokenStorage(MemoryStorage):
    fail = False

    async def set_item(self, key, value):
        if self.fail:
            raise ConnectionError("storage offline")
        await super().set_item(key, value)


def test_failed_write_leaves_identities_untouched():
    storage = BrokenStorage()
    store = SessionStore(storage, seed_password=SEED_PASSWORD)
    run(store.load())
    before = store.identities

    storage.fail = True
    with pytest.raises(ConnectionError):
        run(store.create_identity("lost@example.com", "lost-pass", "Lost"))
    with pytest.raises(ConnectionError):
        run(store.update_profile("user456", display_name="Renamed"))
    with pytest.raises(ConnectionError):
        run(store.change_password("user456", SEED_PASSWORD, "brand-new"))

    assert store.identities == before
    assert store.current_identity() is None
    assert store.authenticate("user@example.com", SEED_PASSWORD).uid == "user456"
