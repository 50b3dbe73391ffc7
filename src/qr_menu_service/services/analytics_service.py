"""View analytics: per-day aggregation and dashboard summaries."""

import logging
from collections import Counter
from datetime import UTC, datetime, timedelta

from qr_menu_service.models.analytics_models import (
    DailyViewSummary,
    DashboardAnalytics,
    DeviceViewShare,
    ViewEvent,
)
from qr_menu_service.observability.decorators import traced
from qr_menu_service.repositories.menu_repositories import ViewEventRepository
from qr_menu_service.services.device_detection import classify_device_type

logger = logging.getLogger(__name__)

QR_PAGE_EVENT_LIMIT = 30
DASHBOARD_EVENT_LIMIT = 50
DASHBOARD_DAYS = 7
DEVICE_CLASSES = ("mobile", "tablet", "desktop")


def _most_common(counter: Counter, default: str) -> str:
    # Counter.most_common keeps first-seen order for ties
    if not counter:
        return default
    return counter.most_common(1)[0][0]


def aggregate_daily_views(
    events: list[ViewEvent],
    max_days: int | None = None,
    with_breakdown: bool = False,
) -> list[DailyViewSummary]:
    """Group view events by UTC calendar day.

    Events without a timestamp are skipped and days without events are
    omitted. The result is sorted ascending by date and, when ``max_days``
    is given, restricted to the most recent ``max_days`` days that have data.

    Args:
        events: View events in any order
        max_days: Optional number of most recent days to keep
        with_breakdown: Also compute each day's most frequent device class and referrer

    Returns:
        list: One DailyViewSummary per day with views
    """
    counts: dict[str, int] = {}
    devices: dict[str, Counter] = {}
    referrers: dict[str, Counter] = {}

    for event in events:
        if event.timestamp is None:
            continue

        timestamp = event.timestamp
        if timestamp.tzinfo is not None:
            timestamp = timestamp.astimezone(UTC)
        day = timestamp.date().isoformat()

        counts[day] = counts.get(day, 0) + 1
        devices.setdefault(day, Counter())[classify_device_type(event.user_agent)] += 1
        referrers.setdefault(day, Counter())[event.referrer or "direct"] += 1

    summaries = []
    for day in sorted(counts):
        summary = DailyViewSummary(date=day, count=counts[day])
        if with_breakdown:
            summary.device_type = _most_common(devices[day], "unknown")
            summary.referrer = _most_common(referrers[day], "direct")
        summaries.append(summary)

    if max_days is not None:
        summaries = summaries[-max_days:] if max_days > 0 else []

    return summaries


def summarize_dashboard(events: list[ViewEvent], now: datetime | None = None) -> DashboardAnalytics:
    """Build the dashboard analytics from recent events.

    Today's views count events at or after midnight UTC of ``now``; weekly
    views count events at or after midnight seven days earlier. ``now`` is
    converted to UTC first; a naive value is taken as local time.
    """
    now = (now or datetime.now(UTC)).astimezone(UTC)
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    last_week = today - timedelta(days=7)

    today_views = 0
    weekly_views = 0
    for event in events:
        if event.timestamp is None:
            continue
        timestamp = event.timestamp
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=UTC)
        if timestamp >= today:
            today_views += 1
        if timestamp >= last_week:
            weekly_views += 1

    return DashboardAnalytics(
        today_views=today_views,
        weekly_views=weekly_views,
        recent_views=aggregate_daily_views(events, max_days=DASHBOARD_DAYS),
    )


def summarize_devices(daily_views: list[DailyViewSummary], total_views: int) -> list[DeviceViewShare]:
    """Split views across device classes using each day's dominant device.

    A day's whole count goes to its most frequent device class. Percentages
    are relative to ``total_views`` (the menu's stored view counter), so they
    need not add up to 100 when the per-day window covers fewer views.
    """
    shares = []
    for device in DEVICE_CLASSES:
        count = sum(day.count for day in daily_views if day.device_type == device)
        percentage = round(count / total_views * 100) if total_views > 0 else 0
        shares.append(DeviceViewShare(device=device, count=count, percentage=percentage))
    return shares


class AnalyticsService:
    """Fetches view events and aggregates them.

    Analytics are best effort: fetch failures are logged and produce empty
    results instead of errors.
    """

    def __init__(self, view_event_repository: ViewEventRepository) -> None:
        """Initialize the AnalyticsService.

        Args:
            view_event_repository: Repository for view events
        """
        self.view_event_repository = view_event_repository

    @traced("get_daily_views", service_name="qr-menu-svc")
    async def get_daily_views(self, menu_id: str) -> list[DailyViewSummary]:
        """Per-day views with device/referrer breakdown for the QR page."""
        try:
            events = self.view_event_repository.list_recent(menu_id, limit=QR_PAGE_EVENT_LIMIT)
        except Exception as e:
            logger.error(f"Error fetching view data for menu {menu_id}: {e}")
            return []

        return aggregate_daily_views(events, with_breakdown=True)

    @traced("get_dashboard_analytics", service_name="qr-menu-svc")
    async def get_dashboard_analytics(
        self, restaurant_id: str, menu_id: str, now: datetime | None = None
    ) -> DashboardAnalytics:
        """Today/weekly counts and the last seven days with data."""
        try:
            events = self.view_event_repository.list_recent(
                menu_id, restaurant_id=restaurant_id, limit=DASHBOARD_EVENT_LIMIT
            )
        except Exception as e:
            logger.error(f"Error fetching analytics for menu {menu_id}: {e}")
            return DashboardAnalytics()

        return summarize_dashboard(events, now)
