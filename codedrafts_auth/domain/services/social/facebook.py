"""Facebook social login."""

from typing import Optional

import structlog

from codedrafts_auth.core.exceptions import (
    DuplicateUserError,
    IdentityProviderError,
    InvalidCredentialsError,
)
from codedrafts_auth.domain.entities.user import Social, User
from codedrafts_auth.domain.interfaces.repositories import IUserRepository
from codedrafts_auth.domain.interfaces.services import IIdentityProviderClient, ISocialAuthService
from codedrafts_auth.domain.services.auth.account_provisioner import AccountProvisioner
from codedrafts_auth.utils.security import mask_email

logger = structlog.get_logger(__name__)


class FacebookAuthService(ISocialAuthService):
    """Logs users in with a Facebook user access token and user id.

    Unlike Google and GitHub, an existing account that never verified its
    email is treated as an abandoned registration: it is deleted and replaced
    by a fresh pre-verified account. A verified account is reused unchanged.
    """

    def __init__(
        self,
        identity_client: IIdentityProviderClient,
        user_repository: IUserRepository,
        account_provisioner: AccountProvisioner,
    ):
        self._identity_client = identity_client
        self._user_repository = user_repository
        self._account_provisioner = account_provisioner

    async def login(self, access_token: str, social_user_id: Optional[str] = None) -> User:
        if not social_user_id:
            logger.warning("Facebook login without user id")
            raise InvalidCredentialsError(code="invalid_social_credentials")

        try:
            profile = await self._identity_client.fetch_profile(access_token, social_user_id)

            user = await self._user_repository.get_by_email(profile.email)
            if user is not None:
                user_settings = await self._user_repository.get_settings(user.id)
                if user_settings is not None and user_settings.is_email_verified:
                    logger.info("Facebook login matched existing account", user_id=user.id)
                    return user

                logger.info(
                    "Replacing unverified account with Facebook account",
                    user_id=user.id,
                    email=mask_email(profile.email),
                )
                await self._account_provisioner.delete_by_id(user.id)

            return await self._account_provisioner.create_social(
                profile.email,
                profile.avatar_url,
                profile.display_name,
                Social.FACEBOOK,
            )
        except (IdentityProviderError, DuplicateUserError) as e:
            logger.warning("Facebook login rejected", error=str(e), error_code=e.code)
            raise InvalidCredentialsError(code="invalid_social_credentials") from e
