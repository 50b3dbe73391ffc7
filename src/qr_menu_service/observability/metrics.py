"""Custom metrics for the QR menu service."""

from opentelemetry import metrics

meter = metrics.get_meter("qr-menu-svc")

menu_view_counter = meter.create_counter(
    name="menu_views_total",
    description="Public menu views counted on the menu document",
    unit="1",
)

view_tracking_failure_counter = meter.create_counter(
    name="menu_view_tracking_failures_total",
    description="Views where the counter increment or the event append failed",
    unit="1",
)

menu_save_counter = meter.create_counter(
    name="menu_saves_total",
    description="Menu create/update attempts by outcome",
    unit="1",
)

sign_in_counter = meter.create_counter(
    name="vendor_sign_ins_total",
    description="Vendor sign-in attempts by provider and outcome",
    unit="1",
)


def record_menu_view(menu_id: str) -> None:
    menu_view_counter.add(1, {"menu_id": menu_id})


def record_view_tracking_failure(menu_id: str) -> None:
    view_tracking_failure_counter.add(1, {"menu_id": menu_id})


def record_menu_save(operation: str, success: bool) -> None:
    """Record a menu write.

    Args:
        operation: "create" or "update"
        success: Whether the store accepted the write
    """
    menu_save_counter.add(1, {"operation": operation, "success": success})


def record_sign_in(provider: str, success: bool) -> None:
    """Record a sign-in attempt.

    Args:
        provider: Provider id, e.g. "password" or "google.com"
        success: Whether a session was opened
    """
    sign_in_counter.add(1, {"provider": provider, "success": success})
