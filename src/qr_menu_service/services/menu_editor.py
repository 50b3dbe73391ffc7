"""Editable menu tree.

The editor works on form values: prices are strings while editing and are
only parsed back to numbers when the draft is turned into categories for
saving.
"""

import itertools
import time
from typing import Literal

from pydantic import BaseModel, Field

from qr_menu_service.models.menu_models import Category, Menu, MenuItem

NEW_CATEGORY_NAME = "New Category"
NEW_ITEM_NAME = "New Item"
NEW_ITEM_DESCRIPTION = "Description"
NEW_ITEM_PRICE = "0.00"

_sequence = itertools.count()


def _new_id(prefix: str) -> str:
    return f"{prefix}-{int(time.time() * 1000)}-{next(_sequence)}"


def parse_price(value: str | float | int | None) -> float:
    """Parse a price form value; anything unparsable or negative becomes 0."""
    try:
        price = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0

    if price != price or price < 0 or price == float("inf"):
        return 0.0
    return price


def format_price(price: float) -> str:
    """Render a stored price the way it is shown in the editor form."""
    return str(int(price)) if price == int(price) else str(price)


class DraftItem(BaseModel):
    """An item being edited."""

    id: str = Field(default_factory=lambda: _new_id("item"))
    name: str = NEW_ITEM_NAME
    description: str = NEW_ITEM_DESCRIPTION
    price: str = NEW_ITEM_PRICE


class DraftCategory(BaseModel):
    """A category being edited."""

    id: str = Field(default_factory=lambda: _new_id("category"))
    name: str = NEW_CATEGORY_NAME
    items: list[DraftItem] = Field(default_factory=list)


class MenuDraft(BaseModel):
    """The whole editable menu form.

    Categories and items get editor-only ids so they can be addressed while
    editing; the ids are dropped when the draft is saved.
    """

    name: str = ""
    description: str = ""
    whatsapp_number: str = ""
    categories: list[DraftCategory] = Field(default_factory=list)

    @classmethod
    def blank(cls) -> "MenuDraft":
        """A new draft with one empty category, as shown on the create page."""
        return cls(categories=[DraftCategory()])

    @classmethod
    def from_menu(cls, menu: Menu) -> "MenuDraft":
        """Load a stored menu into an editable draft."""
        return cls(
            name=menu.name,
            description=menu.description or "",
            whatsapp_number=menu.whatsapp_number or "",
            categories=[
                DraftCategory(
                    id=f"category-{category_index}",
                    name=category.name,
                    items=[
                        DraftItem(
                            id=f"item-{category_index}-{item_index}",
                            name=item.name,
                            description=item.description or "",
                            price=format_price(item.price),
                        )
                        for item_index, item in enumerate(category.items)
                    ],
                )
                for category_index, category in enumerate(menu.categories)
            ],
        )

    def _category(self, category_id: str) -> DraftCategory:
        for category in self.categories:
            if category.id == category_id:
                return category
        raise KeyError(f"Unknown category {category_id}")

    def add_category(self, name: str = NEW_CATEGORY_NAME) -> DraftCategory:
        """Append a new empty category."""
        category = DraftCategory(name=name)
        self.categories.append(category)
        return category

    def remove_category(self, category_id: str) -> None:
        """Remove a category and its items. Unknown ids are ignored."""
        self.categories = [c for c in self.categories if c.id != category_id]

    def rename_category(self, category_id: str, name: str) -> None:
        """Rename a category.

        Raises:
            KeyError: If the category does not exist
        """
        self._category(category_id).name = name

    def add_item(self, category_id: str) -> DraftItem:
        """Append a placeholder item to a category.

        Raises:
            KeyError: If the category does not exist
        """
        item = DraftItem()
        self._category(category_id).items.append(item)
        return item

    def remove_item(self, category_id: str, item_id: str) -> None:
        """Remove an item from a category. Unknown item ids are ignored."""
        category = self._category(category_id)
        category.items = [item for item in category.items if item.id != item_id]

    def update_item(
        self,
        category_id: str,
        item_id: str,
        field: Literal["name", "description", "price"],
        value: str,
    ) -> None:
        """Set one field of an item to a form value.

        Raises:
            KeyError: If the category or item does not exist
        """
        for item in self._category(category_id).items:
            if item.id == item_id:
                setattr(item, field, value)
                return
        raise KeyError(f"Unknown item {item_id}")

    def to_categories(self) -> list[Category]:
        """Convert the draft into stored categories with numeric prices."""
        return [
            Category(
                name=category.name,
                items=[
                    MenuItem(
                        name=item.name,
                        description=item.description,
                        price=parse_price(item.price),
                    )
                    for item in category.items
                ],
            )
            for category in self.categories
        ]
