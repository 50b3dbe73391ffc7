"""Auth state change notifications."""

import logging
from collections.abc import Callable

from qr_menu_service.models.vendor_models import AuthUser

logger = logging.getLogger(__name__)

AuthStateListener = Callable[[AuthUser | None], None]


class AuthStateNotifier:
    """Observable holding the current signed-in user.

    Subscribers receive the current state when they subscribe and then once
    per state change. Publishing the same state twice in a row is not a
    change, so nothing is delivered the second time.
    """

    def __init__(self, initial_user: AuthUser | None = None) -> None:
        self._current: AuthUser | None = initial_user
        self._listeners: list[AuthStateListener] = []

    @property
    def current_user(self) -> AuthUser | None:
        """The most recently published user, or None when signed out."""
        return self._current

    def subscribe(self, listener: AuthStateListener) -> Callable[[], None]:
        """Register a listener and deliver the current state to it.

        Args:
            listener: Called with the user, or None when signed out

        Returns:
            A function that removes the listener; calling it twice is harmless
        """
        self._listeners.append(listener)
        self._deliver(listener, self._current)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, user: AuthUser | None) -> bool:
        """Publish a new state.

        Args:
            user: The signed-in user, or None for signed out

        Returns:
            bool: True if the state changed and listeners were notified
        """
        if _state_key(user) == _state_key(self._current):
            self._current = user
            return False

        self._current = user
        for listener in list(self._listeners):
            self._deliver(listener, user)
        return True

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def _deliver(self, listener: AuthStateListener, user: AuthUser | None) -> None:
        try:
            listener(user)
        except Exception as e:
            logger.error(f"Auth state listener failed: {e}")


def _state_key(user: AuthUser | None) -> str | None:
    return user.uid if user is not None else None
