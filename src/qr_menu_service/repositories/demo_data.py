"""Demo data loaded into the in-memory store in developer mode."""

import logging
from datetime import UTC, datetime

from qr_menu_service.repositories.document_store import DocumentStore
from qr_menu_service.repositories.menu_repositories import MENUS_COLLECTION, VENDORS_COLLECTION

logger = logging.getLogger(__name__)

DEMO_USER_ID = "demo-user-id"
DEMO_EMAIL = "demo@example.com"
DEMO_MENU_ID = "demo-menu-1"


def demo_menu_document(now: datetime) -> dict:
    """The demo vendor's menu document."""
    return {
        "name": "Main Menu",
        "description": "Our regular menu with all offerings",
        "whatsapp_number": "919999999999",
        "restaurant_id": DEMO_USER_ID,
        "view_count": 0,
        "created_at": now.isoformat(),
        "updated_at": now.isoformat(),
        "categories": [
            {
                "name": "Appetizers",
                "items": [
                    {"name": "Garlic Bread", "description": "Toasted bread with garlic butter and herbs", "price": 5.99},
                    {"name": "Mozzarella Sticks", "description": "Breaded and fried mozzarella with marinara sauce", "price": 7.99},
                    {"name": "Bruschetta", "description": "Toasted bread topped with tomatoes, basil, and olive oil", "price": 6.99},
                ],
            },
            {
                "name": "Main Courses",
                "items": [
                    {"name": "Spaghetti Bolognese", "description": "Classic pasta with rich meat sauce", "price": 14.99},
                    {"name": "Grilled Salmon", "description": "Fresh salmon with lemon butter sauce and seasonal vegetables", "price": 18.99},
                    {"name": "Chicken Parmesan", "description": "Breaded chicken topped with marinara and mozzarella, served with pasta", "price": 16.99},
                ],
            },
            {
                "name": "Desserts",
                "items": [
                    {"name": "Tiramisu", "description": "Classic Italian dessert with coffee-soaked ladyfingers", "price": 7.99},
                    {"name": "Chocolate Lava Cake", "description": "Warm chocolate cake with a molten center", "price": 8.99},
                ],
            },
        ],
    }


def seed_demo_data(store: DocumentStore) -> None:
    """Load the demo vendor and its menu into a store.

    Args:
        store: Store to seed (normally the in-memory store)
    """
    now = datetime.now(UTC)

    store.set_document(
        VENDORS_COLLECTION,
        DEMO_USER_ID,
        {
            "user_id": DEMO_USER_ID,
            "restaurant_name": "Demo Restaurant",
            "email": DEMO_EMAIL,
            "created_at": now.isoformat(),
        },
    )
    store.set_document(MENUS_COLLECTION, DEMO_MENU_ID, demo_menu_document(now))

    logger.info(f"Seeded demo vendor {DEMO_USER_ID} with menu {DEMO_MENU_ID}")
