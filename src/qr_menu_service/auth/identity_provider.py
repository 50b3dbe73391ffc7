"""Base class for identity providers.

An identity provider only verifies credentials and returns the identity they
belong to. Sessions are issued by the application afterwards, the same way for
every provider.
"""

from abc import ABC, abstractmethod
from typing import Any

from qr_menu_service.models.vendor_models import AuthUser


class IdentityProvider(ABC):
    """Abstract base class for identity providers.

    Failures raise :class:`~qr_menu_service.auth.auth_errors.AuthError`
    carrying one of the fixed error codes.
    """

    def __init__(self, provider_name: str) -> None:
        """Initialize the provider.

        Args:
            provider_name: Short name used in logs and metrics (e.g. 'cognito')
        """
        self.provider_name = provider_name

    @property
    def supports_simulated_google(self) -> bool:
        """Whether Google sign-in goes through the simulated hand-off page."""
        return False

    @abstractmethod
    async def sign_in_with_email(self, email: str, password: str) -> AuthUser:
        """Verify email/password credentials.

        Returns:
            AuthUser: The signed-in identity
        """
        pass

    @abstractmethod
    async def sign_up_with_email(
        self, email: str, password: str, display_name: str | None = None
    ) -> AuthUser:
        """Register a new email/password account and sign it in.

        Returns:
            AuthUser: The new identity
        """
        pass

    @abstractmethod
    async def sign_in_with_google(self, credential: dict[str, Any]) -> AuthUser:
        """Sign in with a Google credential.

        Args:
            credential: Provider-specific payload (an ID token, or the
                simulated hand-off user in developer mode)

        Returns:
            AuthUser: The signed-in identity
        """
        pass

    @abstractmethod
    async def sign_out(self, user: AuthUser | None) -> None:
        """Release any provider-side state for the user."""
        pass
