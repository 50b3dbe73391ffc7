"""Typed repositories over the document store.

Each repository owns one collection and converts between documents and the
pydantic models. Failures are reported through simple return values
(None/False/empty list), matching the underlying store.
"""

import logging
import secrets
import time
from datetime import UTC, datetime

from qr_menu_service.models.analytics_models import ViewEvent
from qr_menu_service.models.menu_models import Menu
from qr_menu_service.models.vendor_models import UserProfile, VendorProfile
from qr_menu_service.repositories.document_store import DocumentStore

logger = logging.getLogger(__name__)

VENDORS_COLLECTION = "restaurants"
USERS_COLLECTION = "users"
MENUS_COLLECTION = "menus"
VIEW_EVENTS_COLLECTION = "menu_views"


class VendorRepository:
    """Repository for vendor profiles, keyed by vendor uid."""

    def __init__(self, store: DocumentStore) -> None:
        """Initialize repository.

        Args:
            store: Backing document store
        """
        self.store = store

    def get(self, user_id: str) -> VendorProfile | None:
        """Retrieve a vendor profile, or None if it does not exist."""
        document = self.store.get_document(VENDORS_COLLECTION, user_id)
        if document is None:
            return None
        return VendorProfile.from_document(user_id, document)

    def save(self, profile: VendorProfile, merge: bool = True) -> bool:
        """Create or update a vendor profile."""
        return self.store.set_document(
            VENDORS_COLLECTION, profile.user_id, profile.to_document(), merge=merge
        )


class UserProfileRepository:
    """Repository for user profiles, keyed by uid."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    def get(self, uid: str) -> UserProfile | None:
        document = self.store.get_document(USERS_COLLECTION, uid)
        if document is None:
            return None
        return UserProfile.from_document(uid, document)

    def save(self, profile: UserProfile) -> bool:
        return self.store.set_document(USERS_COLLECTION, profile.uid, profile.to_document())


class MenuRepository:
    """Repository for menu documents.

    A menu, its categories and its items are always written together as one
    document.
    """

    def __init__(self, store: DocumentStore) -> None:
        """Initialize repository.

        Args:
            store: Backing document store
        """
        self.store = store

    def get(self, menu_id: str) -> Menu | None:
        """Retrieve a menu by id.

        Returns:
            Menu if found, None otherwise
        """
        document = self.store.get_document(MENUS_COLLECTION, menu_id)
        if document is None:
            return None
        return Menu.from_document(menu_id, document)

    def list_for_vendor(self, restaurant_id: str) -> list[Menu]:
        """List all menus owned by a vendor.

        Returns:
            list: Menus (empty list if none found)
        """
        documents = self.store.query_documents(
            MENUS_COLLECTION, filters={"restaurant_id": restaurant_id}
        )
        return [Menu.from_document(doc.id, doc.data) for doc in documents]

    def create(self, menu: Menu) -> str | None:
        """Create a menu document with a generated id.

        Returns:
            The new menu id, or None if the write failed
        """
        return self.store.add_document(MENUS_COLLECTION, menu.to_document())

    def save(self, menu_id: str, menu: Menu, merge: bool = True) -> bool:
        """Write the whole menu document.

        With ``merge`` the view counter and timestamps missing from ``menu``
        are preserved.
        """
        document = menu.to_document()
        if merge:
            # The counter is only ever changed by atomic increments
            document.pop("view_count", None)
        return self.store.set_document(MENUS_COLLECTION, menu_id, document, merge=merge)

    def increment_view_count(self, menu_id: str) -> bool:
        """Atomically add one view and stamp ``last_viewed``."""
        return self.store.increment_field(
            MENUS_COLLECTION,
            menu_id,
            "view_count",
            amount=1,
            extra_fields={"last_viewed": datetime.now(UTC).isoformat()},
        )


class ViewEventRepository:
    """Append-only repository for menu view events."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    @staticmethod
    def new_event_id(menu_id: str) -> str:
        """Build a unique view id from the menu id, time and a random suffix."""
        return f"{menu_id}_{int(time.time() * 1000)}_{secrets.token_hex(4)}"

    def append(self, event: ViewEvent) -> bool:
        """Store a new view event."""
        return self.store.set_document(
            VIEW_EVENTS_COLLECTION, self.new_event_id(event.menu_id), event.to_document()
        )

    def list_recent(
        self, menu_id: str, restaurant_id: str | None = None, limit: int = 30
    ) -> list[ViewEvent]:
        """List the most recent events for a menu, newest first.

        Args:
            menu_id: Menu identifier
            restaurant_id: Optional vendor filter
            limit: Maximum number of events to return

        Returns:
            list: View events (empty list if none found)
        """
        filters = {"menu_id": menu_id}
        if restaurant_id is not None:
            filters["restaurant_id"] = restaurant_id

        documents = self.store.query_documents(
            VIEW_EVENTS_COLLECTION,
            filters=filters,
            order_by="timestamp",
            descending=True,
            limit=limit,
        )
        return [ViewEvent.from_document(doc.data) for doc in documents]
