"""Amazon Cognito identity provider.

Email/password accounts live in a Cognito user pool. Google sign-in is
verified against Google's tokeninfo endpoint and mapped onto a stable uid.
"""

import logging
from typing import Any

import httpx
from botocore.exceptions import ClientError

from qr_menu_service.auth.auth_errors import AuthError, AuthErrorCode
from qr_menu_service.auth.identity_provider import IdentityProvider
from qr_menu_service.models.vendor_models import AuthUser

logger = logging.getLogger(__name__)

GOOGLE_TOKENINFO_URL = "https://oauth2.googleapis.com/tokeninfo"


class GoogleTokenVerifier:
    """Verifies Google ID tokens with the tokeninfo endpoint."""

    def __init__(self, client_id: str | None = None, tokeninfo_url: str = GOOGLE_TOKENINFO_URL) -> None:
        """Initialize the verifier.

        Args:
            client_id: Expected OAuth client id (audience); not checked when None
            tokeninfo_url: Verification endpoint
        """
        self.client_id = client_id
        self.tokeninfo_url = tokeninfo_url

    async def verify(self, id_token: str) -> dict[str, Any] | None:
        """Verify an ID token.

        Returns:
            The token claims, or None if the token is invalid or verification failed
        """
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(self.tokeninfo_url, params={"id_token": id_token})
                response.raise_for_status()
                claims: dict[str, Any] = response.json()

        except (httpx.HTTPStatusError, httpx.RequestError) as e:
            logger.warning(f"Google token verification failed: {e}")
            return None

        if self.client_id and claims.get("aud") != self.client_id:
            logger.warning("Google token issued for another audience")
            return None

        if not claims.get("sub"):
            return None

        return claims


class CognitoIdentityProvider(IdentityProvider):
    """Identity provider backed by a Cognito user pool."""

    def __init__(
        self,
        cognito_client: Any,
        client_id: str,
        user_pool_id: str | None = None,
        google_verifier: GoogleTokenVerifier | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            cognito_client: Boto3 ``cognito-idp`` client
            client_id: User pool app client id
            user_pool_id: User pool id; when set, new sign-ups are confirmed immediately
            google_verifier: Verifier for Google ID tokens
        """
        super().__init__("cognito")
        if not client_id:
            raise ValueError("A Cognito app client id must be provided")

        self.client = cognito_client
        self.client_id = client_id
        self.user_pool_id = user_pool_id
        self.google_verifier = google_verifier or GoogleTokenVerifier()

    async def sign_in_with_email(self, email: str, password: str) -> AuthUser:
        if not email or not password:
            raise AuthError(AuthErrorCode.MISSING_CREDENTIALS)

        try:
            response = self.client.initiate_auth(
                ClientId=self.client_id,
                AuthFlow="USER_PASSWORD_AUTH",
                AuthParameters={"USERNAME": email, "PASSWORD": password},
            )
            access_token = response["AuthenticationResult"]["AccessToken"]
            user_response = self.client.get_user(AccessToken=access_token)

        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            raise AuthError.from_cognito_code(code, str(e)) from e

        return self._user_from_attributes(user_response, fallback_email=email)

    async def sign_up_with_email(
        self, email: str, password: str, display_name: str | None = None
    ) -> AuthUser:
        if not email or not password:
            raise AuthError(AuthErrorCode.MISSING_CREDENTIALS)

        attributes = [{"Name": "email", "Value": email}]
        if display_name:
            attributes.append({"Name": "name", "Value": display_name})

        try:
            self.client.sign_up(
                ClientId=self.client_id,
                Username=email,
                Password=password,
                UserAttributes=attributes,
            )
            if self.user_pool_id:
                self.client.admin_confirm_sign_up(UserPoolId=self.user_pool_id, Username=email)

        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            raise AuthError.from_cognito_code(code, str(e)) from e

        return await self.sign_in_with_email(email, password)

    async def sign_in_with_google(self, credential: dict[str, Any]) -> AuthUser:
        id_token = credential.get("id_token")
        if not id_token:
            raise AuthError(AuthErrorCode.GOOGLE_FAILED, "No ID token supplied")

        claims = await self.google_verifier.verify(id_token)
        if claims is None:
            raise AuthError(AuthErrorCode.GOOGLE_FAILED, "ID token rejected")

        return AuthUser(
            uid=f"google-{claims['sub']}",
            email=claims.get("email"),
            display_name=claims.get("name"),
            photo_url=claims.get("picture"),
            provider_id="google.com",
        )

    async def sign_out(self, user: AuthUser | None) -> None:
        # Cognito tokens are not kept after sign-in; the application session is revoked instead
        return None

    def _user_from_attributes(self, user_response: dict[str, Any], fallback_email: str) -> AuthUser:
        attributes = {
            attribute["Name"]: attribute["Value"]
            for attribute in user_response.get("UserAttributes", [])
        }
        email = attributes.get("email", fallback_email)

        return AuthUser(
            uid=attributes.get("sub", user_response.get("Username", email)),
            email=email,
            display_name=attributes.get("name") or email.split("@")[0],
            photo_url=attributes.get("picture"),
            provider_id="password",
        )
