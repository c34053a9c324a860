"""Interfaces of the collaborators the authentication services depend on.

- `IMailDispatcher`: delivers verification and reset emails, fire-and-forget.
- `ISigningKeyProvider`: key material used by the token codec.
- `IIdentityProviderClient`: talks to one external identity provider.
- `ISocialAuthService`: the common login capability of every social provider.
"""

from abc import ABC, abstractmethod
from typing import Optional

from codedrafts_auth.domain.entities.user import User
from codedrafts_auth.domain.value_objects.social_profile import SocialProfile


class IMailDispatcher(ABC):
    """Sends account emails.

    Implementations absorb delivery failures: they log them and return
    normally, so callers never observe a mail provider outage.
    """

    @abstractmethod
    async def send_verification_email(self, email: str, username: str, user_id: int, token: str) -> None:
        """Sends the link that verifies ``email``.

        Args:
            email: Recipient address.
            username: Name used to greet the recipient.
            user_id: Owner of the token, for logging.
            token: The signed `VERIFY_EMAIL` token embedded in the link.
        """
        raise NotImplementedError

    @abstractmethod
    async def send_password_reset_email(self, username: str, email: str, user_id: int, token: str) -> None:
        """Sends the password reset link.

        Args:
            username: Name used to greet the recipient.
            email: Recipient address.
            user_id: Owner of the token, for logging.
            token: The signed `RESET_PASSWORD` token embedded in the link.
        """
        raise NotImplementedError


class ISigningKeyProvider(ABC):
    """Supplies the algorithm and keys used to sign and verify tokens."""

    @property
    @abstractmethod
    def algorithm(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def get_signing_key(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def get_verification_key(self) -> str:
        raise NotImplementedError


class IIdentityProviderClient(ABC):
    """Client of a single external identity provider."""

    @abstractmethod
    async def fetch_profile(self, access_token: str, social_user_id: Optional[str] = None) -> SocialProfile:
        """Verifies the provider token and returns the attested profile.

        Args:
            access_token: The token obtained by the client from the provider.
            social_user_id: The provider-side user id, for providers that need it.

        Returns:
            SocialProfile: Normalized email, name and avatar URL.

        Raises:
            IdentityProviderError: If the token is rejected or the provider
                cannot be reached.
        """
        raise NotImplementedError


class ISocialAuthService(ABC):
    """Login capability shared by every social provider."""

    @abstractmethod
    async def login(self, access_token: str, social_user_id: Optional[str] = None) -> User:
        """Logs a user in from a provider token, creating the account if needed.

        Raises:
            InvalidCredentialsError: If the provider does not vouch for the user.
        """
        raise NotImplementedError
