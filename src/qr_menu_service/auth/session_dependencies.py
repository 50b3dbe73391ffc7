"""FastAPI dependencies for session authentication.

Dashboard routes depend on these to resolve the signed-in vendor from the
session cookie or a bearer token.
"""

from typing import Annotated

from fastapi import Cookie, Header

from qr_menu_service.auth.session_store import SessionStore
from qr_menu_service.models.vendor_models import AuthUser

SESSION_COOKIE = "session"
HANDOFF_COOKIE = "google_auth_handoff"


class LoginRequiredError(Exception):
    """Raised when a route needs a signed-in vendor and there is none."""


def get_session_token(
    session: Annotated[str | None, Cookie()] = None,
    authorization: Annotated[str | None, Header()] = None,
) -> str | None:
    """FastAPI dependency extracting the session token.

    The ``session`` cookie wins over an ``Authorization: Bearer`` header.

    Returns:
        The raw token, or None if the request carries neither
    """
    if session:
        return session

    if authorization:
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() == "bearer" and token:
            return token.strip()

    return None


def get_vendor_from_session(token: str | None, session_store: SessionStore) -> AuthUser:
    """Resolve the signed-in vendor for a token.

    Raises:
        LoginRequiredError: If the token is missing, unknown or expired
    """
    user = session_store.resolve(token)
    if user is None:
        raise LoginRequiredError()
    return user
