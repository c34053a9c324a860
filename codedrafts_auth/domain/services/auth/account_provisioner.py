"""Account Provisioning Domain Service.

Creates and removes user accounts together with the rows that hang off them:
`UserSettings` (created with the user), the instructor balance ledger (created
when the email is verified) and, for self-registered accounts, the email
verification token.
"""

from datetime import timedelta
from typing import Any, Coroutine, Optional

import structlog

from codedrafts_auth.core.config.settings import settings
from codedrafts_auth.core.exceptions import DuplicateUserError, UserNotFoundError
from codedrafts_auth.domain.entities.token import TokenType
from codedrafts_auth.domain.entities.user import Role, Social, User, UserSettings
from codedrafts_auth.domain.interfaces.repositories import IUserRepository
from codedrafts_auth.domain.interfaces.services import IMailDispatcher
from codedrafts_auth.domain.services.auth.password_manager import PasswordManager
from codedrafts_auth.domain.services.auth.token_store import TokenStore
from codedrafts_auth.utils.background import BackgroundDispatcher
from codedrafts_auth.utils.security import mask_email

logger = structlog.get_logger(__name__)


class AccountProvisioner:
    """Domain service owning the creation and deletion of user records.

    Self-registered accounts start unverified and receive a verification email;
    accounts created from a social login are trusted as verified and skip the
    token flow entirely.

    Attributes:
        background (BackgroundDispatcher): Runs email delivery detached from
            the calling flow. Shared with `CredentialAuthenticator`.
    """

    def __init__(
        self,
        user_repository: IUserRepository,
        token_store: TokenStore,
        mail_dispatcher: IMailDispatcher,
        password_manager: PasswordManager,
        background: Optional[BackgroundDispatcher] = None,
    ):
        self._user_repository = user_repository
        self._token_store = token_store
        self._mail_dispatcher = mail_dispatcher
        self._password_manager = password_manager
        self.background = background or BackgroundDispatcher()

    async def create_local(self, email: str, username: str, password: str) -> User:
        """Register a password account and start its email verification.

        The verification token is stored before this method returns; only the
        email delivery runs in the background, so the caller never waits on
        the mail provider.

        Args:
            email: Email address, stored lower-cased.
            username: Display name.
            password: Plain text password, stored as a bcrypt hash.

        Returns:
            User: The created, not yet verified, user.

        Raises:
            DuplicateUserError: If the email address is already registered.
        """
        normalized_email = email.strip().lower()
        if await self._user_repository.get_by_email(normalized_email) is not None:
            logger.warning("Registration for existing email", email=mask_email(normalized_email))
            raise DuplicateUserError()

        user = User(
            email=normalized_email,
            username=username,
            password=self._password_manager.hash(password),
            role=Role.USER,
        )
        user = await self._user_repository.create(user, UserSettings(is_email_verified=False))

        signed = await self._token_store.issue(
            user.id,
            TokenType.VERIFY_EMAIL,
            timedelta(minutes=settings.VERIFY_EMAIL_TOKEN_EXPIRE_MINUTES),
        )
        self.dispatch_in_background(
            self._mail_dispatcher.send_verification_email(user.email, user.username, user.id, signed),
            description="send_verification_email",
        )

        logger.info("Local account created", user_id=user.id, email=mask_email(user.email))
        return user

    async def create_social(
        self,
        email: str,
        avatar: Optional[str],
        username: str,
        provider: Social,
    ) -> User:
        """Create a pre-verified account for a federated identity.

        Args:
            email: Email attested by the provider.
            avatar: Profile picture URL, if any.
            username: Display name supplied by the provider.
            provider: The originating provider.

        Returns:
            User: The created user. It has no password.

        Raises:
            DuplicateUserError: If the email address is already registered.
        """
        user = User(
            email=email.strip().lower(),
            username=username,
            password=None,
            avatar=avatar,
            role=Role.USER,
            social=provider,
        )
        user = await self._user_repository.create(user, UserSettings(is_email_verified=True))
        logger.info(
            "Social account created",
            user_id=user.id,
            email=mask_email(user.email),
            provider=provider.value,
        )
        return user

    async def mark_email_verified(self, user_id: int) -> None:
        """Flag the user's email as verified and open their balance ledger.

        Safe to call more than once: the ledger row is only created when none
        exists yet.

        Raises:
            UserNotFoundError: If the user no longer exists.
        """
        user_settings = await self._user_repository.get_settings(user_id)
        if user_settings is None:
            raise UserNotFoundError()

        if not user_settings.is_email_verified:
            await self._user_repository.set_email_verified(user_id)

        if await self._user_repository.get_balance(user_id) is None:
            await self._user_repository.create_balance(user_id)
            logger.info("Instructor balance opened", user_id=user_id)

        logger.info("Email verified", user_id=user_id)

    async def delete_by_id(self, user_id: int) -> None:
        """Hard-delete a user with their settings, balance and tokens."""
        await self._user_repository.delete(user_id)
        logger.info("Account deleted", user_id=user_id)

    def dispatch_in_background(self, coro: Coroutine[Any, Any, Any], *, description: str) -> None:
        """Run ``coro`` detached from the current flow.

        Failures are logged at the task boundary and never reach the caller.
        """
        self.background.spawn(coro, description=description)
