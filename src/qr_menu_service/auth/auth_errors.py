"""Authentication errors and their user-facing messages."""

from enum import Enum


class AuthErrorCode(str, Enum):
    """Enumeration of authentication failure kinds."""

    INVALID_CREDENTIALS = "invalid_credentials"
    INVALID_EMAIL = "invalid_email"
    TOO_MANY_REQUESTS = "too_many_requests"
    EMAIL_IN_USE = "email_in_use"
    WEAK_PASSWORD = "weak_password"
    MISSING_CREDENTIALS = "missing_credentials"
    GOOGLE_FAILED = "google_failed"
    UNKNOWN = "unknown"


USER_MESSAGES: dict[AuthErrorCode, str] = {
    AuthErrorCode.INVALID_CREDENTIALS: "Invalid email or password. Please try again.",
    AuthErrorCode.INVALID_EMAIL: "Invalid email format. Please check and try again.",
    AuthErrorCode.TOO_MANY_REQUESTS: "Too many failed login attempts. Please try again later.",
    AuthErrorCode.EMAIL_IN_USE: "An account with this email already exists.",
    AuthErrorCode.WEAK_PASSWORD: "Password does not meet the requirements.",
    AuthErrorCode.MISSING_CREDENTIALS: "Please enter both email and password",
    AuthErrorCode.GOOGLE_FAILED: "Failed to sign in with Google. Please try again.",
    AuthErrorCode.UNKNOWN: "Failed to log in",
}

STATUS_CODES: dict[AuthErrorCode, int] = {
    AuthErrorCode.INVALID_CREDENTIALS: 401,
    AuthErrorCode.TOO_MANY_REQUESTS: 429,
    AuthErrorCode.EMAIL_IN_USE: 409,
    AuthErrorCode.GOOGLE_FAILED: 401,
}

# Cognito error codes mapped onto our fixed set
COGNITO_ERROR_CODES: dict[str, AuthErrorCode] = {
    "NotAuthorizedException": AuthErrorCode.INVALID_CREDENTIALS,
    "UserNotFoundException": AuthErrorCode.INVALID_CREDENTIALS,
    "UserNotConfirmedException": AuthErrorCode.INVALID_CREDENTIALS,
    "TooManyRequestsException": AuthErrorCode.TOO_MANY_REQUESTS,
    "TooManyFailedAttemptsException": AuthErrorCode.TOO_MANY_REQUESTS,
    "LimitExceededException": AuthErrorCode.TOO_MANY_REQUESTS,
    "InvalidParameterException": AuthErrorCode.INVALID_EMAIL,
    "UsernameExistsException": AuthErrorCode.EMAIL_IN_USE,
    "InvalidPasswordException": AuthErrorCode.WEAK_PASSWORD,
}


class AuthError(Exception):
    """Raised by identity providers when authentication fails."""

    def __init__(self, code: AuthErrorCode, detail: str | None = None) -> None:
        """Initialize the error.

        Args:
            code: Failure kind
            detail: Provider-specific detail for logs (never shown to users)
        """
        super().__init__(detail or code.value)
        self.code = code
        self.detail = detail

    @property
    def user_message(self) -> str:
        """Fixed message safe to show to the user."""
        return USER_MESSAGES[self.code]

    @property
    def status_code(self) -> int:
        """HTTP status code for this failure."""
        return STATUS_CODES.get(self.code, 400)

    @classmethod
    def from_cognito_code(cls, error_code: str, detail: str | None = None) -> "AuthError":
        """Map a Cognito error code to an AuthError."""
        return cls(COGNITO_ERROR_CODES.get(error_code, AuthErrorCode.UNKNOWN), detail)
