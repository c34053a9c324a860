from __future__ import annotations

"""Centralized, structured exception hierarchy for the authentication core.

Every error carries a machine-readable `code` for programmatic handling and a
human-readable, translated `message`. The transport layer maps them to HTTP
statuses; nothing here knows about HTTP.

Taxonomy:
- `InvalidCredentialsError` (Unauthorized): bad password, bad social assertion,
  wrong old password, invalid access token. Deliberately generic.
- `TokenNotFoundError` (NotFound): unknown, forged or superseded token.
- `TokenExpiredError` (Expired): token past, or already at, its recorded expiry.
- `UserNotFoundError` (NotFound): unknown email in forgot-password flows.
- `InvalidProviderError`: unmapped social provider tag.

Infrastructure failures (database unavailable, provider network failure that a
caller did not translate) are not wrapped here and propagate unchanged.
"""

from typing import Final, Optional

from codedrafts_auth.utils.i18n import get_translated_message

__all__: Final = [
    "CodeDraftsError",
    "AuthenticationError",
    "InvalidCredentialsError",
    "TokenError",
    "InvalidTokenError",
    "TokenNotFoundError",
    "TokenExpiredError",
    "UserNotFoundError",
    "InvalidProviderError",
    "IdentityProviderError",
    "DuplicateUserError",
    "EmailServiceError",
]


class CodeDraftsError(Exception):
    """Base exception class for all custom errors of the authentication core.

    Attributes:
        message (str): A human-readable error message, suitable for logging.
                       This message can be translated.
        code (str): A unique, machine-readable error code for identifying
                    the type of error programmatically.
    """

    message: str
    code: str = "generic_error"

    def __init__(self, message: str, code: str = "generic_error"):
        self.message = message
        self.code = code
        Exception.__init__(self, self.message)

    def __str__(self) -> str:
        return self.message


def _message(message: Optional[str], key: str) -> str:
    return message if message is not None else get_translated_message(key)


# ---------------------------------------------------------------------------
# Auth-related errors
# ---------------------------------------------------------------------------


class AuthenticationError(CodeDraftsError):
    """Raised for general authentication failures.

    This exception is the base for more specific authentication-related
    errors. It typically maps to a `401 Unauthorized` HTTP status code.
    """

    def __init__(self, message: str, code: str = "authentication_error"):
        super().__init__(message, code)


class InvalidCredentialsError(AuthenticationError):
    """Raised when credentials or an external identity assertion are rejected.

    To prevent account enumeration the message never says which part of the
    credentials was wrong. Maps to a `401 Unauthorized` HTTP status.
    """

    def __init__(self, message: Optional[str] = None, code: str = "invalid_credentials"):
        super().__init__(_message(message, code), code)


# ---------------------------------------------------------------------------
# Token errors
# ---------------------------------------------------------------------------


class TokenError(CodeDraftsError):
    """Base class for purpose-scoped token failures."""

    def __init__(self, message: str, code: str = "token_error"):
        super().__init__(message, code)


class InvalidTokenError(TokenError):
    """Raised by the token codec when a signed string cannot be trusted.

    Covers a bad signature, a malformed payload and a purpose mismatch.
    Token flows translate it to `TokenNotFoundError`.
    """

    def __init__(self, message: Optional[str] = None, code: str = "invalid_token"):
        super().__init__(_message(message, code), code)


class TokenNotFoundError(TokenError):
    """Raised when no persisted token matches the presented string.

    Maps to a `404 Not Found` HTTP status.
    """

    def __init__(self, message: Optional[str] = None, code: str = "token_not_found"):
        super().__init__(_message(message, code), code)


class TokenExpiredError(TokenError):
    """Raised when a token is past its expiry or was already consumed.

    Consumption and natural expiry share the same field, so the two cases are
    reported identically.
    """

    def __init__(self, message: Optional[str] = None, code: str = "token_expired"):
        super().__init__(_message(message, code), code)


# ---------------------------------------------------------------------------
# Account errors
# ---------------------------------------------------------------------------


class UserNotFoundError(CodeDraftsError):
    """Raised when a requested user is not found in the database.

    This typically maps to a `404 Not Found` HTTP status code.
    """

    def __init__(self, message: Optional[str] = None, code: str = "user_not_found"):
        super().__init__(_message(message, code), code)


class DuplicateUserError(CodeDraftsError):
    """Raised when registering an email address that already belongs to a user.

    Maps to a `409 Conflict` HTTP status code.
    """

    def __init__(self, message: Optional[str] = None, code: str = "email_already_registered"):
        super().__init__(_message(message, code), code)


# ---------------------------------------------------------------------------
# Social login errors
# ---------------------------------------------------------------------------


class InvalidProviderError(CodeDraftsError):
    """Raised when a social provider tag has no registered handler."""

    def __init__(self, message: Optional[str] = None, code: str = "invalid_provider"):
        super().__init__(_message(message, code), code)


class IdentityProviderError(CodeDraftsError):
    """Raised by identity provider clients when a token cannot be verified or a
    profile cannot be fetched.

    Social login services translate it to `InvalidCredentialsError`.
    """

    def __init__(self, message: Optional[str] = None, code: str = "identity_provider_error"):
        super().__init__(_message(message, code), code)


# ---------------------------------------------------------------------------
# Infrastructure errors
# ---------------------------------------------------------------------------


class EmailServiceError(CodeDraftsError):
    """Raised when an email cannot be rendered or delivered.

    Never surfaces from auth flows: dispatch failures are logged and absorbed.
    """

    def __init__(self, message: Optional[str] = None, code: str = "email_service_error"):
        super().__init__(_message(message, code), code)
