"""Unit tests for the Cognito identity provider and Google token verification."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from botocore.exceptions import ClientError

from qr_menu_service.auth.auth_errors import AuthError, AuthErrorCode
from qr_menu_service.auth.cognito_provider import CognitoIdentityProvider, GoogleTokenVerifier


def cognito_error(code: str, operation: str = "InitiateAuth") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": "Cognito said no"}}, operation)


@pytest.mark.unit
class TestGoogleTokenVerifier:
    """Test suite for GoogleTokenVerifier."""

    def make_response(self, claims: dict) -> MagicMock:
        response = MagicMock()
        response.json.return_value = claims
        response.raise_for_status.return_value = None
        return response

    @pytest.mark.asyncio
    async def test_verify_success(self) -> None:
        verifier = GoogleTokenVerifier(client_id="client-1")
        response = self.make_response({"sub": "123", "aud": "client-1", "email": "g@example.com"})

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=response) as mock_get:
            claims = await verifier.verify("token-abc")

        assert claims is not None
        assert claims["sub"] == "123"
        assert mock_get.call_args.kwargs["params"] == {"id_token": "token-abc"}

    @pytest.mark.asyncio
    async def test_verify_rejects_other_audience(self) -> None:
        verifier = GoogleTokenVerifier(client_id="client-1")
        response = self.make_response({"sub": "123", "aud": "someone-else"})

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=response):
            assert await verifier.verify("token-abc") is None

    @pytest.mark.asyncio
    async def test_verify_http_error(self) -> None:
        verifier = GoogleTokenVerifier()
        response = MagicMock()
        response.raise_for_status.side_effect = httpx.HTTPStatusError(
            "400 Bad Request", request=MagicMock(), response=MagicMock()
        )

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=response):
            assert await verifier.verify("bad-token") is None

    @pytest.mark.asyncio
    async def test_verify_network_error(self) -> None:
        verifier = GoogleTokenVerifier()

        with patch(
            "httpx.AsyncClient.get",
            new_callable=AsyncMock,
            side_effect=httpx.RequestError("Connection failed", request=MagicMock()),
        ):
            assert await verifier.verify("token") is None


@pytest.mark.unit
class TestCognitoIdentityProvider:
    """Test suite for CognitoIdentityProvider."""

    @pytest.fixture
    def mock_client(self) -> MagicMock:
        client = MagicMock()
        client.initiate_auth.return_value = {"AuthenticationResult": {"AccessToken": "access-1"}}
        client.get_user.return_value = {
            "Username": "owner@example.com",
            "UserAttributes": [
                {"Name": "sub", "Value": "sub-123"},
                {"Name": "email", "Value": "owner@example.com"},
                {"Name": "name", "Value": "Owner"},
            ],
        }
        return client

    @pytest.fixture
    def mock_verifier(self) -> MagicMock:
        return MagicMock(spec=GoogleTokenVerifier)

    @pytest.fixture
    def provider(self, mock_client: MagicMock, mock_verifier: MagicMock) -> CognitoIdentityProvider:
        return CognitoIdentityProvider(
            cognito_client=mock_client,
            client_id="app-client",
            user_pool_id="pool-1",
            google_verifier=mock_verifier,
        )

    def test_requires_client_id(self, mock_client: MagicMock) -> None:
        with pytest.raises(ValueError):
            CognitoIdentityProvider(cognito_client=mock_client, client_id="")

    def test_does_not_offer_simulated_google(self, provider: CognitoIdentityProvider) -> None:
        assert provider.supports_simulated_google is False

    @pytest.mark.asyncio
    async def test_sign_in(self, provider: CognitoIdentityProvider, mock_client: MagicMock) -> None:
        user = await provider.sign_in_with_email("owner@example.com", "Secret123!")

        mock_client.initiate_auth.assert_called_once_with(
            ClientId="app-client",
            AuthFlow="USER_PASSWORD_AUTH",
            AuthParameters={"USERNAME": "owner@example.com", "PASSWORD": "Secret123!"},
        )
        mock_client.get_user.assert_called_once_with(AccessToken="access-1")
        assert user.uid == "sub-123"
        assert user.display_name == "Owner"
        assert user.provider_id == "password"

    @pytest.mark.asyncio
    async def test_sign_in_wrong_password(
        self, provider: CognitoIdentityProvider, mock_client: MagicMock
    ) -> None:
        mock_client.initiate_auth.side_effect = cognito_error("NotAuthorizedException")

        with pytest.raises(AuthError) as exc_info:
            await provider.sign_in_with_email("owner@example.com", "wrong")

        assert exc_info.value.code == AuthErrorCode.INVALID_CREDENTIALS

    @pytest.mark.asyncio
    async def test_sign_up_confirms_and_signs_in(
        self, provider: CognitoIdentityProvider, mock_client: MagicMock
    ) -> None:
        user = await provider.sign_up_with_email("owner@example.com", "Secret123!", "Owner's Diner")

        mock_client.sign_up.assert_called_once_with(
            ClientId="app-client",
            Username="owner@example.com",
            Password="Secret123!",
            UserAttributes=[
                {"Name": "email", "Value": "owner@example.com"},
                {"Name": "name", "Value": "Owner's Diner"},
            ],
        )
        mock_client.admin_confirm_sign_up.assert_called_once_with(
            UserPoolId="pool-1", Username="owner@example.com"
        )
        assert user.uid == "sub-123"

    @pytest.mark.asyncio
    async def test_sign_up_existing_email(
        self, provider: CognitoIdentityProvider, mock_client: MagicMock
    ) -> None:
        mock_client.sign_up.side_effect = cognito_error("UsernameExistsException", "SignUp")

        with pytest.raises(AuthError) as exc_info:
            await provider.sign_up_with_email("owner@example.com", "Secret123!")

        assert exc_info.value.code == AuthErrorCode.EMAIL_IN_USE
        mock_client.initiate_auth.assert_not_called()

    @pytest.mark.asyncio
    async def test_sign_up_weak_password(
        self, provider: CognitoIdentityProvider, mock_client: MagicMock
    ) -> None:
        mock_client.sign_up.side_effect = cognito_error("InvalidPasswordException", "SignUp")

        with pytest.raises(AuthError) as exc_info:
            await provider.sign_up_with_email("owner@example.com", "short")

        assert exc_info.value.user_message == "Password does not meet the requirements."

    @pytest.mark.asyncio
    async def test_google_sign_in(
        self, provider: CognitoIdentityProvider, mock_verifier: MagicMock
    ) -> None:
        mock_verifier.verify = AsyncMock(
            return_value={"sub": "g-42", "email": "g@example.com", "name": "Gita", "picture": "p.png"}
        )

        user = await provider.sign_in_with_google({"id_token": "google-token"})

        mock_verifier.verify.assert_awaited_once_with("google-token")
        assert user.uid == "google-g-42"
        assert user.provider_id == "google.com"
        assert user.photo_url == "p.png"

    @pytest.mark.asyncio
    async def test_google_sign_in_rejected_token(
        self, provider: CognitoIdentityProvider, mock_verifier: MagicMock
    ) -> None:
        mock_verifier.verify = AsyncMock(return_value=None)

        with pytest.raises(AuthError) as exc_info:
            await provider.sign_in_with_google({"id_token": "forged"})

        assert exc_info.value.code == AuthErrorCode.GOOGLE_FAILED
