"""Developer-mode identity provider.

Accepts any non-empty credentials and keeps a single current session, so the
whole product can be exercised without a real identity service.
"""

import logging
import uuid
from typing import Any

from qr_menu_service.auth.auth_errors import AuthError, AuthErrorCode
from qr_menu_service.auth.identity_provider import IdentityProvider
from qr_menu_service.models.vendor_models import AuthUser, avatar_url
from qr_menu_service.repositories.demo_data import DEMO_EMAIL, DEMO_USER_ID

logger = logging.getLogger(__name__)

GOOGLE_DEMO_UID = "google-user-id"


def dev_uid_for_email(email: str) -> str:
    """Derive a stable uid for an email so repeated sign-ins map to one vendor."""
    if email.lower() == DEMO_EMAIL:
        return DEMO_USER_ID
    return f"email-user-{uuid.uuid5(uuid.NAMESPACE_URL, email.lower()).hex[:12]}"


def simulated_google_user(email: str) -> AuthUser:
    """Build the user the simulated Google sign-in page hands back."""
    name = email.split("@")[0]
    return AuthUser(
        uid=GOOGLE_DEMO_UID,
        email=email,
        display_name=name,
        photo_url=avatar_url(name, background="4285F4"),
        provider_id="google.com",
    )


class DevIdentityProvider(IdentityProvider):
    """In-process identity provider with a single mutable current user."""

    def __init__(self) -> None:
        super().__init__("dev")
        self.current_user: AuthUser | None = None

    @property
    def supports_simulated_google(self) -> bool:
        return True

    def _email_user(self, email: str) -> AuthUser:
        name = email.split("@")[0]
        return AuthUser(
            uid=dev_uid_for_email(email),
            email=email,
            display_name=name,
            photo_url=avatar_url(name),
            provider_id="password",
        )

    async def sign_in_with_email(self, email: str, password: str) -> AuthUser:
        if not email or not password:
            raise AuthError(AuthErrorCode.MISSING_CREDENTIALS)
        if "@" not in email:
            raise AuthError(AuthErrorCode.INVALID_EMAIL, f"Malformed email: {email}")

        logger.info(f"DEMO: Signing in user with {email}")
        self.current_user = self._email_user(email)
        return self.current_user

    async def sign_up_with_email(
        self, email: str, password: str, display_name: str | None = None
    ) -> AuthUser:
        if not email or not password:
            raise AuthError(AuthErrorCode.MISSING_CREDENTIALS)
        if "@" not in email:
            raise AuthError(AuthErrorCode.INVALID_EMAIL, f"Malformed email: {email}")

        logger.info(f"DEMO: Creating user with {email}")
        user = self._email_user(email)
        if display_name:
            user.display_name = display_name
        self.current_user = user
        return user

    async def sign_in_with_google(self, credential: dict[str, Any]) -> AuthUser:
        user_data = credential.get("user")
        if not isinstance(user_data, dict) or not user_data.get("uid"):
            raise AuthError(AuthErrorCode.GOOGLE_FAILED, "Hand-off carries no user")

        logger.info("DEMO: Google sign in from stored hand-off")
        self.current_user = AuthUser(**user_data)
        return self.current_user

    async def sign_out(self, user: AuthUser | None) -> None:
        logger.info("DEMO: Sign out")
        self.current_user = None
