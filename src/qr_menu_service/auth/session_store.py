"""Application sessions and the one-shot Google sign-in hand-off."""

import logging
import secrets
from datetime import UTC, datetime, timedelta

from qr_menu_service.models.vendor_models import AuthUser
from qr_menu_service.repositories.document_store import DocumentStore

logger = logging.getLogger(__name__)

SESSIONS_COLLECTION = "sessions"
HANDOFFS_COLLECTION = "auth_handoffs"


class SessionStore:
    """Issues, resolves and revokes opaque session tokens.

    Sessions are documents in the ``sessions`` collection keyed by token.
    """

    def __init__(self, store: DocumentStore, ttl: timedelta = timedelta(days=7)) -> None:
        """Initialize the session store.

        Args:
            store: Backing document store
            ttl: Session lifetime
        """
        self.store = store
        self.ttl = ttl

    def create(self, user: AuthUser) -> str | None:
        """Open a session for a user.

        Returns:
            The session token, or None if it could not be stored
        """
        token = secrets.token_urlsafe(32)
        now = datetime.now(UTC)
        document = {
            **user.model_dump(),
            "created_at": now.isoformat(),
            "expires_at": (now + self.ttl).isoformat(),
        }

        if not self.store.set_document(SESSIONS_COLLECTION, token, document):
            return None
        return token

    def resolve(self, token: str | None) -> AuthUser | None:
        """Return the user a session token belongs to.

        Expired sessions are deleted and treated as absent.
        """
        if not token:
            return None

        document = self.store.get_document(SESSIONS_COLLECTION, token)
        if document is None:
            return None

        expires_at = document.get("expires_at")
        if expires_at and datetime.fromisoformat(expires_at) <= datetime.now(UTC):
            logger.info("Session expired")
            self.store.delete_document(SESSIONS_COLLECTION, token)
            return None

        return AuthUser(
            uid=document["uid"],
            email=document.get("email"),
            display_name=document.get("display_name"),
            photo_url=document.get("photo_url"),
            provider_id=document.get("provider_id", "password"),
        )

    def revoke(self, token: str | None) -> bool:
        """Delete a session. Unknown tokens are ignored."""
        if not token:
            return True
        return self.store.delete_document(SESSIONS_COLLECTION, token)


class HandoffStore:
    """Short-lived storage for a simulated external sign-in result.

    A hand-off is written once by the simulated Google page and consumed at
    most once by the login route.
    """

    def __init__(self, store: DocumentStore, ttl: timedelta = timedelta(minutes=5)) -> None:
        self.store = store
        self.ttl = ttl

    def put(self, user: AuthUser) -> str | None:
        """Store a sign-in result and return its token."""
        token = secrets.token_urlsafe(24)
        now = datetime.now(UTC)
        document = {
            "user": user.model_dump(),
            "credential": {
                "access_token": "mock-google-access-token",
                "id_token": "mock-google-id-token",
            },
            "created_at": now.isoformat(),
            "expires_at": (now + self.ttl).isoformat(),
        }

        if not self.store.set_document(HANDOFFS_COLLECTION, token, document):
            return None
        return token

    def consume(self, token: str | None) -> dict | None:
        """Return the stored sign-in result and delete it.

        Returns:
            The hand-off payload (with a ``user`` key), or None if missing,
            expired or already consumed
        """
        if not token:
            return None

        document = self.store.get_document(HANDOFFS_COLLECTION, token)
        if document is None:
            return None

        self.store.delete_document(HANDOFFS_COLLECTION, token)

        expires_at = document.get("expires_at")
        if expires_at and datetime.fromisoformat(expires_at) <= datetime.now(UTC):
            logger.info("Discarding expired sign-in hand-off")
            return None

        return document
