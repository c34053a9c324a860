"""Credential Authentication Domain Service.

Orchestrates the password based flows on top of the token and account
services:

- login and registration
- email verification (`VERIFY_EMAIL` tokens)
- forgot / reset password (`RESET_PASSWORD` tokens)
- password change
- access token issuance and authentication (`ACCESS` tokens, not persisted)
"""

from datetime import timedelta

import structlog

from codedrafts_auth.core.config.settings import settings
from codedrafts_auth.core.exceptions import (
    InvalidCredentialsError,
    InvalidTokenError,
    UserNotFoundError,
)
from codedrafts_auth.domain.entities.token import TokenType
from codedrafts_auth.domain.entities.user import User
from codedrafts_auth.domain.interfaces.repositories import IUserRepository
from codedrafts_auth.domain.interfaces.services import IMailDispatcher
from codedrafts_auth.domain.services.auth.account_provisioner import AccountProvisioner
from codedrafts_auth.domain.services.auth.password_manager import PasswordManager
from codedrafts_auth.domain.services.auth.token_codec import TokenCodec
from codedrafts_auth.domain.services.auth.token_store import TokenStore
from codedrafts_auth.domain.value_objects.token_claims import AccessToken
from codedrafts_auth.utils.clock import utc_now
from codedrafts_auth.utils.security import mask_email

logger = structlog.get_logger(__name__)


class CredentialAuthenticator:
    """Entry point for email and password authentication flows.

    Every flow is a short awaited sequence; the only state between requests is
    what `TokenStore` and the user repository persist. Errors raised here are
    the typed ones from `codedrafts_auth.core.exceptions`; infrastructure
    failures propagate unchanged.
    """

    def __init__(
        self,
        user_repository: IUserRepository,
        password_manager: PasswordManager,
        token_codec: TokenCodec,
        token_store: TokenStore,
        account_provisioner: AccountProvisioner,
        mail_dispatcher: IMailDispatcher,
    ):
        self._user_repository = user_repository
        self._password_manager = password_manager
        self._token_codec = token_codec
        self._token_store = token_store
        self._account_provisioner = account_provisioner
        self._mail_dispatcher = mail_dispatcher

    async def login(self, email: str, password: str) -> User:
        """Authenticate a user with a verified email address.

        An unknown or unverified email and a wrong password raise the very same
        error, so the response does not reveal whether the account exists.

        Raises:
            InvalidCredentialsError: On any failure.
        """
        normalized_email = email.strip().lower()
        user = await self._user_repository.get_verified_by_email(normalized_email)
        if user is None or not self._password_manager.verify(password, user.password):
            logger.warning("Invalid credentials", email=mask_email(normalized_email))
            raise InvalidCredentialsError()

        logger.info("User logged in", user_id=user.id)
        return user

    async def register(self, email: str, username: str, password: str) -> User:
        """Create a local account; the verification email is sent in the background."""
        return await self._account_provisioner.create_local(email, username, password)

    async def verify_email(self, token: str) -> None:
        """Redeem a verification token and mark the owner's email verified.

        Raises:
            TokenNotFoundError: If the token is unknown, forged or superseded.
            TokenExpiredError: If the token expired or was already used.
        """
        record = await self._token_store.consume(TokenType.VERIFY_EMAIL, token)
        await self._account_provisioner.mark_email_verified(record.user_id)

    async def resend_verification(self, email: str) -> None:
        """Issue a fresh verification token, replacing any earlier one.

        Does nothing when the email is already verified.

        Raises:
            UserNotFoundError: If no account uses ``email``.
        """
        user = await self._get_user_by_email(email)
        user_settings = await self._user_repository.get_settings(user.id)
        if user_settings is not None and user_settings.is_email_verified:
            logger.info("Verification resend skipped, already verified", user_id=user.id)
            return

        signed = await self._token_store.issue(
            user.id,
            TokenType.VERIFY_EMAIL,
            timedelta(minutes=settings.VERIFY_EMAIL_TOKEN_EXPIRE_MINUTES),
        )
        self._account_provisioner.dispatch_in_background(
            self._mail_dispatcher.send_verification_email(user.email, user.username, user.id, signed),
            description="send_verification_email",
        )

    async def forgot_password(self, email: str) -> None:
        """Start a password reset for ``email``.

        Any reset token issued earlier for the user stops working.

        Raises:
            UserNotFoundError: If no account uses ``email``.
        """
        user = await self._get_user_by_email(email)
        signed = await self._token_store.issue(
            user.id,
            TokenType.RESET_PASSWORD,
            timedelta(minutes=settings.RESET_PASSWORD_TOKEN_EXPIRE_MINUTES),
        )
        self._account_provisioner.dispatch_in_background(
            self._mail_dispatcher.send_password_reset_email(user.username, user.email, user.id, signed),
            description="send_password_reset_email",
        )
        logger.info("Password reset requested", user_id=user.id)

    async def reset_password(self, token: str, new_password: str) -> None:
        """Set a new password for the owner of a reset token.

        Possession of the token is the only proof required.

        Raises:
            TokenNotFoundError: If the token is unknown, forged or superseded.
            TokenExpiredError: If the token expired or was already used.
        """
        record = await self._token_store.consume(TokenType.RESET_PASSWORD, token)
        await self._user_repository.update_password(record.user_id, self._password_manager.hash(new_password))
        logger.info("Password reset", user_id=record.user_id)

    async def change_password(self, user: User, old_password: str, new_password: str) -> None:
        """Replace the password of an authenticated user.

        Raises:
            InvalidCredentialsError: If ``old_password`` does not match; the
                stored hash is left untouched.
        """
        if not self._password_manager.verify(old_password, user.password):
            logger.warning("Password change with wrong old password", user_id=user.id)
            raise InvalidCredentialsError(code="invalid_old_password")

        hashed = self._password_manager.hash(new_password)
        await self._user_repository.update_password(user.id, hashed)
        user.password = hashed
        logger.info("Password changed", user_id=user.id)

    def issue_access_token(self, user: User) -> AccessToken:
        """Sign a bearer token for a logged-in user.

        Access tokens are stateless and are not stored.
        """
        ttl = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        signed = self._token_codec.issue(user.id, TokenType.ACCESS, ttl)
        return AccessToken(access_token=signed, expires_in=int(ttl.total_seconds()))

    async def authenticate_access_token(self, token: str) -> User:
        """Resolve the user behind a bearer token.

        Raises:
            InvalidCredentialsError: If the token is untrusted, expired or its
                user no longer exists.
        """
        try:
            claims = self._token_codec.verify(token, TokenType.ACCESS)
        except InvalidTokenError as e:
            raise InvalidCredentialsError(code="invalid_access_token") from e

        if utc_now() >= claims.expires_at:
            logger.warning("Access token expired", user_id=claims.subject)
            raise InvalidCredentialsError(code="invalid_access_token")

        user = await self._user_repository.get_by_id(claims.subject)
        if user is None:
            raise InvalidCredentialsError(code="invalid_access_token")
        return user

    async def _get_user_by_email(self, email: str) -> User:
        normalized_email = email.strip().lower()
        user = await self._user_repository.get_by_email(normalized_email)
        if user is None:
            logger.warning("User not found", email=mask_email(normalized_email))
            raise UserNotFoundError()
        return user
