"""Vendor, user and authentication models."""

from datetime import datetime
from typing import Any
from urllib.parse import quote

from pydantic import BaseModel, Field

DEFAULT_RESTAURANT_NAME = "My Restaurant"


def avatar_url(name: str, background: str = "f97316") -> str:
    """Build a generated avatar URL for a display name."""
    return f"https://ui-avatars.com/api/?name={quote(name)}&background={background}&color=fff"


class AuthUser(BaseModel):
    """An authenticated identity as returned by the identity provider."""

    uid: str = Field(..., description="Stable user identifier")
    email: str | None = Field(None, description="Email address")
    display_name: str | None = Field(None, description="Display name")
    photo_url: str | None = Field(None, description="Avatar URL")
    provider_id: str = Field(default="password", description="'password' or 'google.com'")


class VendorProfile(BaseModel):
    """Vendor (restaurant) profile.

    Stored in the ``restaurants`` collection keyed by the vendor uid.
    """

    user_id: str = Field(..., description="Vendor identifier")
    restaurant_name: str = Field(default=DEFAULT_RESTAURANT_NAME, description="Restaurant name")
    email: str | None = Field(None, description="Contact email")
    created_at: datetime | None = Field(None, description="Creation timestamp")

    def to_document(self) -> dict[str, Any]:
        """Convert to document store format."""
        document: dict[str, Any] = {
            "user_id": self.user_id,
            "restaurant_name": self.restaurant_name,
        }

        if self.email is not None:
            document["email"] = self.email

        if self.created_at is not None:
            document["created_at"] = self.created_at.isoformat()

        return document

    @classmethod
    def from_document(cls, doc_id: str, document: dict[str, Any]) -> "VendorProfile":
        """Create VendorProfile from a stored document."""
        data: dict[str, Any] = {
            "user_id": document.get("user_id") or doc_id,
            "restaurant_name": document.get("restaurant_name") or DEFAULT_RESTAURANT_NAME,
            "email": document.get("email"),
        }

        if document.get("created_at"):
            data["created_at"] = datetime.fromisoformat(document["created_at"])

        return cls(**data)


class UserProfile(BaseModel):
    """User profile created on first Google sign-in.

    Stored in the ``users`` collection keyed by uid.
    """

    uid: str
    display_name: str = "User"
    email: str | None = None
    photo_url: str | None = None
    created_at: datetime | None = None

    def to_document(self) -> dict[str, Any]:
        """Convert to document store format."""
        document: dict[str, Any] = {"display_name": self.display_name}

        if self.email is not None:
            document["email"] = self.email

        if self.photo_url is not None:
            document["photo_url"] = self.photo_url

        if self.created_at is not None:
            document["created_at"] = self.created_at.isoformat()

        return document

    @classmethod
    def from_document(cls, doc_id: str, document: dict[str, Any]) -> "UserProfile":
        """Create UserProfile from a stored document."""
        created_at = document.get("created_at")
        return cls(
            uid=doc_id,
            display_name=document.get("display_name") or "User",
            email=document.get("email"),
            photo_url=document.get("photo_url"),
            created_at=datetime.fromisoformat(created_at) if created_at else None,
        )
