"""Facebook Graph API profile lookup."""

from typing import Optional

import httpx
import structlog

from codedrafts_auth.core.config.settings import settings
from codedrafts_auth.core.exceptions import IdentityProviderError
from codedrafts_auth.domain.value_objects.social_profile import SocialProfile
from codedrafts_auth.infrastructure.services.identity_providers.base import HttpIdentityProviderClient

logger = structlog.get_logger(__name__)

PROFILE_FIELDS = "id,name,email,picture"


class FacebookIdentityClient(HttpIdentityProviderClient):
    """Fetches ``/{version}/{user_id}`` from the Graph API with the user's token.

    The Graph API only answers for a user id the token is valid for, which is
    what ties the profile to the presented access token.
    """

    provider = "facebook"

    def __init__(
        self,
        graph_api_url: Optional[str] = None,
        api_version: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        super().__init__(http_client=http_client, timeout=timeout)
        self._graph_api_url = (graph_api_url or settings.FACEBOOK_GRAPH_API_URL).rstrip("/")
        self._api_version = api_version or settings.FACEBOOK_GRAPH_API_VERSION

    async def fetch_profile(self, access_token: str, social_user_id: Optional[str] = None) -> SocialProfile:
        if not social_user_id:
            raise IdentityProviderError()

        payload = await self._get_json(
            f"{self._graph_api_url}/{self._api_version}/{social_user_id}",
            params={"fields": PROFILE_FIELDS, "access_token": access_token},
        )
        if str(payload.get("id", social_user_id)) != str(social_user_id):
            logger.warning("Facebook profile id mismatch")
            raise IdentityProviderError()

        picture = payload.get("picture") or {}
        avatar_url = (picture.get("data") or {}).get("url") if isinstance(picture, dict) else None
        try:
            return SocialProfile(
                email=payload.get("email") or "",
                name=payload.get("name") or "",
                avatar_url=avatar_url,
            )
        except ValueError as e:
            logger.warning("Facebook profile has no email")
            raise IdentityProviderError() from e
