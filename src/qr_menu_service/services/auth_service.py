"""Auth service: sign-in flows, vendor profiles and sessions."""

import logging
from collections.abc import Awaitable
from dataclasses import dataclass
from datetime import UTC, datetime

from qr_menu_service.auth.auth_errors import AuthError, AuthErrorCode
from qr_menu_service.auth.auth_state import AuthStateNotifier
from qr_menu_service.auth.dev_provider import simulated_google_user
from qr_menu_service.auth.identity_provider import IdentityProvider
from qr_menu_service.auth.session_store import HandoffStore, SessionStore
from qr_menu_service.models.vendor_models import (
    DEFAULT_RESTAURANT_NAME,
    AuthUser,
    UserProfile,
    VendorProfile,
)
from qr_menu_service.observability.metrics import record_sign_in
from qr_menu_service.repositories.menu_repositories import UserProfileRepository, VendorRepository

logger = logging.getLogger(__name__)


@dataclass
class SignInResult:
    """Outcome of a successful sign-in.

    Attributes:
        user: The signed-in identity
        session_token: Token for the new application session
    """

    user: AuthUser
    session_token: str


class AuthService:
    """Coordinates the identity provider, vendor profiles and sessions.

    Every successful sign-in opens an application session and publishes the
    new auth state; sign-out revokes the session and publishes None.
    """

    def __init__(
        self,
        identity_provider: IdentityProvider,
        session_store: SessionStore,
        handoff_store: HandoffStore,
        vendor_repository: VendorRepository,
        user_repository: UserProfileRepository,
        notifier: AuthStateNotifier | None = None,
    ) -> None:
        """Initialize the AuthService.

        Args:
            identity_provider: Verifies credentials
            session_store: Issues application sessions
            handoff_store: Holds simulated Google sign-in results
            vendor_repository: Vendor profiles
            user_repository: User profiles
            notifier: Auth state observable
        """
        self.identity_provider = identity_provider
        self.session_store = session_store
        self.handoff_store = handoff_store
        self.vendor_repository = vendor_repository
        self.user_repository = user_repository
        self.notifier = notifier or AuthStateNotifier()

    @property
    def simulated_google_enabled(self) -> bool:
        return self.identity_provider.supports_simulated_google

    async def sign_up(
        self, email: str, password: str, restaurant_name: str | None = None
    ) -> SignInResult:
        """Register a vendor account and create its profile.

        Raises:
            AuthError: If the provider rejects the registration
        """
        user = await self._authenticate(
            self.identity_provider.sign_up_with_email(email, password, restaurant_name)
        )

        profile = VendorProfile(
            user_id=user.uid,
            restaurant_name=restaurant_name or DEFAULT_RESTAURANT_NAME,
            email=user.email,
            created_at=datetime.now(UTC),
        )
        if not self.vendor_repository.save(profile, merge=True):
            logger.error(f"Failed to create vendor profile for {user.uid}")

        return self._open_session(user)

    async def sign_in(self, email: str, password: str) -> SignInResult:
        """Sign in with email and password.

        Raises:
            AuthError: If the credentials are missing or rejected
        """
        if not email or not password:
            raise AuthError(AuthErrorCode.MISSING_CREDENTIALS)

        user = await self._authenticate(self.identity_provider.sign_in_with_email(email, password))
        return self._open_session(user)

    async def sign_in_with_google(self, id_token: str) -> SignInResult:
        """Sign in with a Google ID token.

        Creates the user profile on first sign-in and merges the vendor profile.
        """
        user = await self._authenticate(
            self.identity_provider.sign_in_with_google({"id_token": id_token})
        )
        self._ensure_google_profiles(user)
        return self._open_session(user)

    def start_simulated_google(self, email: str) -> str:
        """Store a simulated Google sign-in result for the next login visit.

        Returns:
            The hand-off token

        Raises:
            AuthError: If simulated sign-in is unavailable or the hand-off could not be stored
        """
        if not self.simulated_google_enabled:
            raise AuthError(AuthErrorCode.GOOGLE_FAILED, "Simulated Google sign-in is disabled")
        if not email or "@" not in email:
            raise AuthError(AuthErrorCode.INVALID_EMAIL)

        token = self.handoff_store.put(simulated_google_user(email))
        if token is None:
            raise AuthError(AuthErrorCode.GOOGLE_FAILED, "Could not store hand-off")
        return token

    async def complete_google_handoff(self, handoff_token: str | None) -> SignInResult | None:
        """Consume a stored hand-off and sign its user in.

        The hand-off is deleted on first use, so a second call with the same
        token returns None.
        """
        handoff = self.handoff_store.consume(handoff_token)
        if handoff is None:
            return None

        user = await self._authenticate(self.identity_provider.sign_in_with_google(handoff))

        profile = VendorProfile(
            user_id=user.uid,
            restaurant_name=user.display_name or DEFAULT_RESTAURANT_NAME,
            email=user.email,
            created_at=datetime.now(UTC),
        )
        if not self.vendor_repository.save(profile, merge=True):
            logger.error(f"Failed to merge vendor profile for {user.uid}")

        return self._open_session(user)

    async def sign_out(self, session_token: str | None) -> None:
        """Revoke a session and publish the signed-out state."""
        user = self.session_store.resolve(session_token)
        self.session_store.revoke(session_token)
        await self.identity_provider.sign_out(user)
        self.notifier.publish(None)

    def resolve_session(self, session_token: str | None) -> AuthUser | None:
        """Return the user for a session token, or None."""
        return self.session_store.resolve(session_token)

    def get_vendor_profile(self, user_id: str) -> VendorProfile:
        """Vendor profile for a signed-in user, with defaults when none is stored."""
        return self.vendor_repository.get(user_id) or VendorProfile(user_id=user_id)

    async def _authenticate(self, attempt: Awaitable[AuthUser]) -> AuthUser:
        provider = self.identity_provider.provider_name
        try:
            user: AuthUser = await attempt
        except AuthError as e:
            logger.warning(f"Authentication failed via {provider}: {e.code.value}")
            record_sign_in(provider, success=False)
            raise

        record_sign_in(provider, success=True)
        return user

    def _open_session(self, user: AuthUser) -> SignInResult:
        token = self.session_store.create(user)
        if token is None:
            raise AuthError(AuthErrorCode.UNKNOWN, "Could not store session")

        self.notifier.publish(user)
        return SignInResult(user=user, session_token=token)

    def _ensure_google_profiles(self, user: AuthUser) -> None:
        now = datetime.now(UTC)

        if self.user_repository.get(user.uid) is None:
            self.user_repository.save(
                UserProfile(
                    uid=user.uid,
                    display_name=user.display_name or "User",
                    email=user.email,
                    photo_url=user.photo_url,
                    created_at=now,
                )
            )

        profile = VendorProfile(
            user_id=user.uid,
            restaurant_name=user.display_name or DEFAULT_RESTAURANT_NAME,
            email=user.email,
            created_at=now,
        )
        if not self.vendor_repository.save(profile, merge=True):
            logger.error(f"Failed to merge vendor profile for {user.uid}")
