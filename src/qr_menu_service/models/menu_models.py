"""Menu data models.

A menu is stored as a single document: its categories and items have no
identity beyond their position inside the parent menu.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class MenuItem(BaseModel):
    """Menu item model."""

    name: str = Field(..., description="Item name")
    description: str = Field(default="", description="Item description")
    price: float = Field(..., description="Item price", ge=0)


class Category(BaseModel):
    """Menu category model."""

    name: str = Field(..., description="Category name")
    items: list[MenuItem] = Field(default_factory=list, description="Ordered items")


class Menu(BaseModel):
    """A vendor's menu document.

    Stored in the ``menus`` collection. One menu per vendor is enforced by a
    pre-check in the menu service, not by the store.
    """

    id: str | None = Field(None, description="Document identifier")
    name: str = Field(..., description="Menu name")
    description: str = Field(default="", description="Menu description")
    whatsapp_number: str = Field(default="", description="Vendor WhatsApp number, digits only")
    categories: list[Category] = Field(default_factory=list, description="Ordered categories")
    restaurant_id: str = Field(..., description="Owning vendor identifier")
    view_count: int = Field(default=0, description="Number of public page views", ge=0)
    created_at: datetime | None = Field(None, description="Creation timestamp")
    updated_at: datetime | None = Field(None, description="Last update timestamp")
    last_viewed: datetime | None = Field(None, description="Last public page view")

    @property
    def item_count(self) -> int:
        """Total number of items across all categories."""
        return sum(len(category.items) for category in self.categories)

    def find_item(self, name: str) -> MenuItem | None:
        """Return the first item with the given name, or None."""
        for category in self.categories:
            for item in category.items:
                if item.name == name:
                    return item
        return None

    def to_document(self) -> dict[str, Any]:
        """Convert to document store format.

        Returns:
            dict: Document representation without the id
        """
        document: dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "whatsapp_number": self.whatsapp_number,
            "categories": [category.model_dump() for category in self.categories],
            "restaurant_id": self.restaurant_id,
            "view_count": self.view_count,
        }

        for field in ("created_at", "updated_at", "last_viewed"):
            value = getattr(self, field)
            if value is not None:
                document[field] = value.isoformat()

        return document

    @classmethod
    def from_document(cls, doc_id: str, document: dict[str, Any]) -> "Menu":
        """Create Menu from a stored document.

        Args:
            doc_id: Document identifier
            document: Stored document data

        Returns:
            Menu: Parsed model instance
        """
        data: dict[str, Any] = {
            "id": doc_id,
            "name": document.get("name", ""),
            "description": document.get("description") or "",
            "whatsapp_number": document.get("whatsapp_number") or "",
            "categories": document.get("categories", []),
            "restaurant_id": document["restaurant_id"],
            "view_count": int(document.get("view_count", 0)),
        }

        for field in ("created_at", "updated_at", "last_viewed"):
            if document.get(field):
                data[field] = datetime.fromisoformat(document[field])

        return cls(**data)
