"""Google social login."""

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
from codedrafts_auth.domain.services.social.accounts import reuse_verified_or_create

logger = structlog.get_logger(__name__)


class GoogleAuthService(ISocialAuthService):
    """Logs users in with a Google ID token.

    The token is checked by the identity client (signature, audience, issuer);
    a verified account with the same email is reused, otherwise a pre-verified
    account is created.
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
        try:
            profile = await self._identity_client.fetch_profile(access_token)
            return await reuse_verified_or_create(
                self._user_repository, self._account_provisioner, profile, Social.GOOGLE
            )
        except (IdentityProviderError, DuplicateUserError) as e:
            logger.warning("Google login rejected", error=str(e), error_code=e.code)
            raise InvalidCredentialsError(code="invalid_social_credentials") from e
