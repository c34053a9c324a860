"""Provider tag to social login service lookup."""

from typing import Mapping, Optional, Union

import structlog

from codedrafts_auth.core.exceptions import InvalidCredentialsError, InvalidProviderError
from codedrafts_auth.domain.entities.user import Social, User
from codedrafts_auth.domain.interfaces.services import ISocialAuthService

logger = structlog.get_logger(__name__)


class SocialAuthenticator:
    """Dispatches a social login to the service registered for its provider.

    Args:
        services: One `ISocialAuthService` per supported provider.
    """

    def __init__(self, services: Mapping[Social, ISocialAuthService]):
        self._services = dict(services)

    @property
    def providers(self) -> list:
        return [provider.value for provider in self._services]

    def resolve(self, provider: Union[Social, str]) -> ISocialAuthService:
        """Return the service for ``provider``.

        Raises:
            InvalidProviderError: If the tag is unknown or has no service.
        """
        try:
            key = Social(provider.lower() if isinstance(provider, str) else provider)
        except ValueError as e:
            logger.warning("Unknown social provider", provider=provider)
            raise InvalidProviderError() from e

        service = self._services.get(key)
        if service is None:
            logger.warning("Social provider not configured", provider=key.value)
            raise InvalidProviderError()
        return service

    async def login(
        self,
        provider: Union[Social, str],
        access_token: str,
        social_user_id: Optional[str] = None,
    ) -> User:
        """Log in through ``provider``.

        Raises:
            InvalidProviderError: If the provider tag is not mapped.
            InvalidCredentialsError: If the provider rejects the token or the
                handler yields no user.
        """
        service = self.resolve(provider)
        user = await service.login(access_token, social_user_id)
        if user is None:
            raise InvalidCredentialsError(code="invalid_social_credentials")
        return user
