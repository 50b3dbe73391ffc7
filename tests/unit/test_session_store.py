"""Unit tests for sessions and the Google sign-in hand-off."""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from qr_menu_service.auth.session_dependencies import (
    LoginRequiredError,
    get_session_token,
    get_vendor_from_session,
)
from qr_menu_service.auth.session_store import (
    HANDOFFS_COLLECTION,
    SESSIONS_COLLECTION,
    HandoffStore,
    SessionStore,
)
from qr_menu_service.models.vendor_models import AuthUser
from qr_menu_service.repositories.document_store import DocumentStore
from qr_menu_service.repositories.memory_store import InMemoryDocumentStore


@pytest.mark.unit
class TestSessionStore:
    """Test suite for SessionStore."""

    def test_create_and_resolve(
        self, memory_store: InMemoryDocumentStore, vendor_user: AuthUser
    ) -> None:
        sessions = SessionStore(memory_store)

        token = sessions.create(vendor_user)

        assert token
        resolved = sessions.resolve(token)
        assert resolved is not None
        assert resolved.model_dump() == vendor_user.model_dump()

    def test_resolve_unknown_or_empty(self, memory_store: InMemoryDocumentStore) -> None:
        sessions = SessionStore(memory_store)

        assert sessions.resolve("unknown") is None
        assert sessions.resolve(None) is None

    def test_expired_session_is_deleted(
        self, memory_store: InMemoryDocumentStore, vendor_user: AuthUser
    ) -> None:
        sessions = SessionStore(memory_store, ttl=timedelta(seconds=-1))
        token = sessions.create(vendor_user)
        assert token is not None

        assert sessions.resolve(token) is None
        assert memory_store.get_document(SESSIONS_COLLECTION, token) is None

    def test_revoke(self, memory_store: InMemoryDocumentStore, vendor_user: AuthUser) -> None:
        sessions = SessionStore(memory_store)
        token = sessions.create(vendor_user)

        assert sessions.revoke(token)
        assert sessions.resolve(token) is None

    def test_create_fails_when_store_fails(self, vendor_user: AuthUser) -> None:
        store = MagicMock(spec=DocumentStore)
        store.set_document.return_value = False

        assert SessionStore(store).create(vendor_user) is None


@pytest.mark.unit
class TestHandoffStore:
    """Test suite for HandoffStore."""

    def test_consume_is_one_shot(
        self, memory_store: InMemoryDocumentStore, vendor_user: AuthUser
    ) -> None:
        handoffs = HandoffStore(memory_store)
        token = handoffs.put(vendor_user)

        first = handoffs.consume(token)
        second = handoffs.consume(token)

        assert first is not None
        assert first["user"]["uid"] == vendor_user.uid
        assert first["credential"]["access_token"] == "mock-google-access-token"
        assert second is None
        assert memory_store.query_documents(HANDOFFS_COLLECTION) == []

    def test_expired_handoff_is_discarded(
        self, memory_store: InMemoryDocumentStore, vendor_user: AuthUser
    ) -> None:
        handoffs = HandoffStore(memory_store, ttl=timedelta(seconds=-1))
        token = handoffs.put(vendor_user)

        assert handoffs.consume(token) is None
        assert memory_store.query_documents(HANDOFFS_COLLECTION) == []

    def test_consume_without_token(self, memory_store: InMemoryDocumentStore) -> None:
        assert HandoffStore(memory_store).consume(None) is None


@pytest.mark.unit
class TestSessionDependencies:
    """Tests for session token extraction."""

    def test_cookie_wins_over_header(self) -> None:
        assert get_session_token(session="cookie-token", authorization="Bearer header-token") == "cookie-token"

    def test_bearer_header(self) -> None:
        assert get_session_token(session=None, authorization="Bearer abc") == "abc"

    def test_other_schemes_ignored(self) -> None:
        assert get_session_token(session=None, authorization="Basic abc") is None
        assert get_session_token(session=None, authorization=None) is None

    def test_missing_session_requires_login(self, memory_store: InMemoryDocumentStore) -> None:
        with pytest.raises(LoginRequiredError):
            get_vendor_from_session("nope", SessionStore(memory_store))

    def test_valid_session_resolves_vendor(
        self, memory_store: InMemoryDocumentStore, vendor_user: AuthUser
    ) -> None:
        sessions = SessionStore(memory_store)
        token = sessions.create(vendor_user)

        assert get_vendor_from_session(token, sessions).model_dump() == vendor_user.model_dump()
