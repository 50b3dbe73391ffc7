"""Customer cart and WhatsApp order hand-off.

No order record is ever stored: placing an order only produces a pre-filled
message link addressed to the vendor.
"""

from dataclasses import dataclass
from urllib.parse import quote

from qr_menu_service.models.menu_models import MenuItem

WHATSAPP_BASE_URL = "https://wa.me"
CURRENCY_SYMBOL = "₹"


@dataclass
class CartEntry:
    """An item in the cart and how many of it were added."""

    item: MenuItem
    quantity: int = 1

    @property
    def line_total(self) -> float:
        return self.item.price * self.quantity


class Cart:
    """In-memory cart keyed by item name."""

    def __init__(self) -> None:
        self.entries: dict[str, CartEntry] = {}

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def add(self, item: MenuItem, quantity: int = 1) -> CartEntry:
        """Add an item, incrementing its quantity if it is already in the cart.

        Raises:
            ValueError: If quantity is not positive
        """
        if quantity < 1:
            raise ValueError("quantity must be positive")

        entry = self.entries.get(item.name)
        if entry is None:
            entry = CartEntry(item=item, quantity=quantity)
            self.entries[item.name] = entry
        else:
            entry.quantity += quantity
            entry.item = item
        return entry

    @property
    def total(self) -> float:
        """Sum of price x quantity across all entries."""
        return sum(entry.line_total for entry in self.entries.values())

    def build_order_message(self, menu_name: str) -> str:
        """Format the order summary sent to the vendor."""
        lines = [f"*New Order from: {menu_name}*", ""]
        for index, entry in enumerate(self.entries.values(), start=1):
            lines.append(
                f"{index}. {entry.item.name} x{entry.quantity} - "
                f"{CURRENCY_SYMBOL}{entry.line_total:.2f}"
            )
        lines.append("")
        lines.append(f"*Total: {CURRENCY_SYMBOL}{self.total:.2f}*")
        return "\n".join(lines)

    def order_link(self, whatsapp_number: str, menu_name: str) -> str:
        """WhatsApp link addressed to the vendor with the order message pre-filled."""
        message = quote(self.build_order_message(menu_name), safe="")
        return f"{WHATSAPP_BASE_URL}/{whatsapp_number}?text={message}"
