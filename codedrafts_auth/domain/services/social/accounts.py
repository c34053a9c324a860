"""Account resolution shared by the social login services."""

import structlog

from codedrafts_auth.domain.entities.user import Social, User
from codedrafts_auth.domain.interfaces.repositories import IUserRepository
from codedrafts_auth.domain.services.auth.account_provisioner import AccountProvisioner
from codedrafts_auth.domain.value_objects.social_profile import SocialProfile
from codedrafts_auth.utils.security import mask_email

logger = structlog.get_logger(__name__)


async def reuse_verified_or_create(
    user_repository: IUserRepository,
    account_provisioner: AccountProvisioner,
    profile: SocialProfile,
    provider: Social,
) -> User:
    """Return the verified account owning ``profile.email``, or create one.

    An unverified account with the same email is left alone, so creation
    fails with `DuplicateUserError` in that case.
    """
    user = await user_repository.get_verified_by_email(profile.email)
    if user is not None:
        logger.info("Social login matched existing account", user_id=user.id, provider=provider.value)
        return user

    logger.info("Creating account from social login", email=mask_email(profile.email), provider=provider.value)
    return await account_provisioner.create_social(
        profile.email,
        profile.avatar_url,
        profile.display_name,
        provider,
    )
