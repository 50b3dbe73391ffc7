"""Unit tests for the cart and WhatsApp order link."""

from urllib.parse import parse_qs, urlparse

import pytest

from qr_menu_service.models.menu_models import MenuItem
from qr_menu_service.services.cart import Cart


@pytest.mark.unit
class TestCart:
    """Test suite for Cart."""

    @pytest.fixture
    def cola(self) -> MenuItem:
        return MenuItem(name="Cola", description="Chilled", price=2.5)

    @pytest.fixture
    def samosa(self) -> MenuItem:
        return MenuItem(name="Samosa", price=3.0)

    def test_adding_same_item_twice_increments_quantity(self, cola: MenuItem) -> None:
        cart = Cart()

        cart.add(cola)
        cart.add(cola)

        assert len(cart) == 1
        assert cart.entries["Cola"].quantity == 2
        assert cart.total == 5.0

    def test_total_sums_lines(self, cola: MenuItem, samosa: MenuItem) -> None:
        cart = Cart()
        cart.add(cola, 3)
        cart.add(samosa)

        assert cart.total == pytest.approx(10.5)

    def test_quantity_must_be_positive(self, cola: MenuItem) -> None:
        with pytest.raises(ValueError):
            Cart().add(cola, 0)

    def test_empty_cart(self) -> None:
        cart = Cart()

        assert cart.is_empty
        assert cart.total == 0

    def test_order_message_format(self, cola: MenuItem, samosa: MenuItem) -> None:
        cart = Cart()
        cart.add(cola, 2)
        cart.add(samosa)

        message = cart.build_order_message("Cafe Menu")

        assert message == (
            "*New Order from: Cafe Menu*\n"
            "\n"
            "1. Cola x2 - ₹5.00\n"
            "2. Samosa x1 - ₹3.00\n"
            "\n"
            "*Total: ₹8.00*"
        )

    def test_order_link_encodes_message(self, cola: MenuItem) -> None:
        cart = Cart()
        cart.add(cola)

        link = cart.order_link("919876543210", "Cafe & Bar")

        parsed = urlparse(link)
        assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == "https://wa.me/919876543210"
        assert " " not in link
        assert parse_qs(parsed.query)["text"][0] == cart.build_order_message("Cafe & Bar")
