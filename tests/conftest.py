"""Shared pytest fixtures and configuration for all tests."""

import os
from datetime import UTC, datetime

import pytest

# Entry-point modules build the real app at import unless running under test
os.environ.setdefault("ENVIRONMENT", "test")

from qr_menu_service.models.menu_models import Category, Menu, MenuItem  # noqa: E402
from qr_menu_service.models.vendor_models import AuthUser  # noqa: E402
from qr_menu_service.repositories.memory_store import InMemoryDocumentStore  # noqa: E402


@pytest.fixture
def vendor_id() -> str:
    """Fixture providing a standard test vendor ID."""
    return "vendor_123"


@pytest.fixture
def vendor_user(vendor_id: str) -> AuthUser:
    return AuthUser(uid=vendor_id, email="owner@example.com", display_name="owner")


@pytest.fixture
def memory_store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def sample_menu(vendor_id: str) -> Menu:
    """Fixture providing a two-category menu owned by the test vendor."""
    return Menu(
        id="menu_1",
        name="Cafe Menu",
        description="Breakfast all day",
        whatsapp_number="919876543210",
        restaurant_id=vendor_id,
        view_count=3,
        created_at=datetime(2024, 1, 15, 10, 30, tzinfo=UTC),
        updated_at=datetime(2024, 1, 15, 10, 30, tzinfo=UTC),
        categories=[
            Category(
                name="Drinks",
                items=[
                    MenuItem(name="Cola", description="Chilled", price=2.5),
                    MenuItem(name="Masala Chai", description="Spiced tea", price=1.75),
                ],
            ),
            Category(
                name="Snacks",
                items=[MenuItem(name="Samosa", description="Two pieces", price=3.0)],
            ),
        ],
    )
