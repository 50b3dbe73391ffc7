"""View tracking and analytics models."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class ViewEvent(BaseModel):
    """A single public menu view.

    Stored in the ``menu_views`` collection. Events are append-only and never
    updated.
    """

    menu_id: str = Field(..., description="Viewed menu")
    restaurant_id: str = Field(..., description="Vendor owning the menu")
    timestamp: datetime | None = Field(None, description="When the view happened (UTC)")
    user_agent: str = Field(default="", description="Raw User-Agent header")
    device_type: str = Field(default="unknown", description="mobile, tablet, desktop or unknown")
    device_vendor: str = Field(default="unknown", description="Device vendor")
    browser_name: str = Field(default="unknown", description="Browser family")
    referrer: str = Field(default="direct", description="Referrer or 'direct'")
    screen_size: str = Field(default="unknown", description="Viewport as WIDTHxHEIGHT")
    language: str = Field(default="unknown", description="Preferred locale")
    time_of_day: int = Field(default=0, description="Hour of day", ge=0, le=23)
    day_of_week: int = Field(default=0, description="0 = Sunday .. 6 = Saturday", ge=0, le=6)

    def to_document(self) -> dict[str, Any]:
        """Convert to document store format."""
        document = self.model_dump(exclude={"timestamp"})
        if self.timestamp is not None:
            document["timestamp"] = self.timestamp.isoformat()
        return document

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "ViewEvent":
        """Create ViewEvent from a stored document."""
        data = {key: value for key, value in document.items() if key in cls.model_fields}

        if data.get("timestamp"):
            data["timestamp"] = datetime.fromisoformat(data["timestamp"])
        else:
            data["timestamp"] = None

        for field in ("time_of_day", "day_of_week"):
            if field in data:
                data[field] = int(data[field])

        return cls(**data)


class DailyViewSummary(BaseModel):
    """Views for one calendar day."""

    date: str = Field(..., description="UTC date key (YYYY-MM-DD)")
    count: int = Field(..., description="Number of views", ge=0)
    device_type: str | None = Field(None, description="Most frequent device class")
    referrer: str | None = Field(None, description="Most frequent referrer")


class DashboardAnalytics(BaseModel):
    """Aggregate analytics shown on the dashboard."""

    today_views: int = 0
    weekly_views: int = 0
    recent_views: list[DailyViewSummary] = Field(default_factory=list)


class DeviceViewShare(BaseModel):
    """Views attributed to one device class."""

    device: str = Field(..., description="mobile, tablet or desktop")
    count: int = Field(default=0, ge=0)
    percentage: int = Field(default=0, description="Share of the menu's total views, rounded")
