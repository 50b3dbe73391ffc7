"""Menu service: creating, editing and publicly serving menus."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from qr_menu_service.models.analytics_models import ViewEvent
from qr_menu_service.models.menu_models import Menu
from qr_menu_service.observability.decorators import traced
from qr_menu_service.observability.metrics import (
    record_menu_save,
    record_menu_view,
    record_view_tracking_failure,
)
from qr_menu_service.repositories.menu_repositories import MenuRepository, ViewEventRepository
from qr_menu_service.services.device_detection import detect_device
from qr_menu_service.services.menu_editor import MenuDraft

logger = logging.getLogger(__name__)


class MenuAccess(str, Enum):
    """Outcome of loading a menu for editing."""

    OK = "ok"
    NOT_FOUND = "menu_not_found"
    UNAUTHORIZED = "unauthorized"


class MenuAlreadyExistsError(Exception):
    """Raised when a vendor tries to create a second menu."""


class MenuSaveError(Exception):
    """Raised when a menu write fails; the caller keeps its form and may retry."""


@dataclass
class ViewContext:
    """Request details recorded with a public menu view.

    Attributes:
        user_agent: Raw User-Agent header
        referrer: Referer header or 'direct'
        screen_size: Viewport reported by the client
        language: Preferred locale
    """

    user_agent: str = ""
    referrer: str = "direct"
    screen_size: str = "unknown"
    language: str = "unknown"


class MenuService:
    """Service for vendor menus.

    A vendor owns at most one menu. The check is advisory: it reads before
    writing and no store constraint backs it.
    """

    def __init__(
        self,
        menu_repository: MenuRepository,
        view_event_repository: ViewEventRepository,
    ) -> None:
        """Initialize the MenuService.

        Args:
            menu_repository: Repository for menu documents
            view_event_repository: Repository for view events
        """
        self.menu_repository = menu_repository
        self.view_event_repository = view_event_repository

    async def get_vendor_menu(self, restaurant_id: str) -> Menu | None:
        """Return the vendor's menu, or None if they have not created one."""
        menus = self.menu_repository.list_for_vendor(restaurant_id)
        return menus[0] if menus else None

    async def list_vendor_menus(self, restaurant_id: str) -> list[Menu]:
        return self.menu_repository.list_for_vendor(restaurant_id)

    async def can_create_menu(self, restaurant_id: str) -> bool:
        """Whether the vendor may create a menu (they have none yet)."""
        return await self.get_vendor_menu(restaurant_id) is None

    @traced("create_menu", service_name="qr-menu-svc")
    async def create_menu(self, restaurant_id: str, draft: MenuDraft) -> str:
        """Create the vendor's menu from an editor draft.

        Returns:
            The new menu id

        Raises:
            MenuAlreadyExistsError: If the vendor already has a menu
            MenuSaveError: If the write failed
        """
        if not await self.can_create_menu(restaurant_id):
            raise MenuAlreadyExistsError("You can only create one menu")

        now = datetime.now(UTC)
        menu = Menu(
            name=draft.name,
            description=draft.description,
            whatsapp_number=draft.whatsapp_number,
            categories=draft.to_categories(),
            restaurant_id=restaurant_id,
            created_at=now,
            updated_at=now,
        )

        menu_id = self.menu_repository.create(menu)
        record_menu_save("create", success=menu_id is not None)

        if menu_id is None:
            raise MenuSaveError("Failed to create menu")

        logger.info(f"Created menu {menu_id} for vendor {restaurant_id}")
        return menu_id

    async def get_menu_for_edit(
        self, restaurant_id: str, menu_id: str
    ) -> tuple[MenuAccess, Menu | None]:
        """Load a menu for its owner.

        Returns:
            Tuple of (access outcome, menu); the menu is only returned when access is OK
        """
        menu = self.menu_repository.get(menu_id)
        if menu is None:
            return MenuAccess.NOT_FOUND, None

        if menu.restaurant_id != restaurant_id:
            logger.warning(f"Vendor {restaurant_id} tried to edit menu {menu_id}")
            return MenuAccess.UNAUTHORIZED, None

        return MenuAccess.OK, menu

    @traced("update_menu", service_name="qr-menu-svc")
    async def update_menu(self, restaurant_id: str, menu_id: str, draft: MenuDraft) -> MenuAccess:
        """Overwrite a menu's content with an editor draft.

        The whole category tree is replaced in one merge-write; the view
        counter and creation time are kept.

        Raises:
            MenuSaveError: If the write failed
        """
        access, existing = await self.get_menu_for_edit(restaurant_id, menu_id)
        if access is not MenuAccess.OK or existing is None:
            return access

        menu = Menu(
            name=draft.name,
            description=draft.description,
            whatsapp_number=draft.whatsapp_number,
            categories=draft.to_categories(),
            restaurant_id=restaurant_id,
            updated_at=datetime.now(UTC),
        )

        success = self.menu_repository.save(menu_id, menu, merge=True)
        record_menu_save("update", success=success)

        if not success:
            raise MenuSaveError("Failed to update menu")

        logger.info(f"Updated menu {menu_id}")
        return MenuAccess.OK

    async def get_public_menu(self, menu_id: str) -> Menu | None:
        """Fetch a menu for the public page; never modifies it."""
        return self.menu_repository.get(menu_id)

    async def record_view(self, menu: Menu, context: ViewContext) -> bool:
        """Count a public view and append a view event.

        The counter increment and the event append are independent: the
        counter is bumped even when the append fails. Failures are logged and
        never raised.

        Returns:
            bool: True if both writes succeeded
        """
        if menu.id is None:
            return False

        counted = False
        try:
            counted = self.menu_repository.increment_view_count(menu.id)
        except Exception as e:
            logger.error(f"Error tracking menu view for {menu.id}: {e}")

        if counted:
            record_menu_view(menu.id)

        appended = False
        try:
            now = datetime.now(UTC)
            device = detect_device(context.user_agent)
            event = ViewEvent(
                menu_id=menu.id,
                restaurant_id=menu.restaurant_id,
                timestamp=now,
                user_agent=context.user_agent,
                device_type=device.device_type,
                device_vendor=device.vendor,
                browser_name=device.browser_name,
                referrer=context.referrer or "direct",
                screen_size=context.screen_size or "unknown",
                language=context.language or "unknown",
                time_of_day=now.hour,
                day_of_week=(now.weekday() + 1) % 7,
            )
            appended = self.view_event_repository.append(event)
        except Exception as e:
            logger.error(f"Error recording view event for {menu.id}: {e}")

        if not (counted and appended):
            record_view_tracking_failure(menu.id)

        return counted and appended
