"""GitHub REST API profile lookup."""

from typing import Optional

import httpx
import structlog

from codedrafts_auth.core.config.settings import settings
from codedrafts_auth.core.exceptions import IdentityProviderError
from codedrafts_auth.domain.value_objects.social_profile import SocialProfile
from codedrafts_auth.infrastructure.services.identity_providers.base import HttpIdentityProviderClient

logger = structlog.get_logger(__name__)


class GithubIdentityClient(HttpIdentityProviderClient):
    """Resolves a GitHub OAuth token to the user's profile.

    When the public profile hides the email, the primary verified address is
    read from ``/user/emails`` (requires the ``user:email`` scope).
    """

    provider = "github"

    def __init__(
        self,
        api_url: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        super().__init__(http_client=http_client, timeout=timeout)
        self._api_url = (api_url or settings.GITHUB_API_URL).rstrip("/")

    async def fetch_profile(self, access_token: str, social_user_id: Optional[str] = None) -> SocialProfile:
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/vnd.github+json",
        }
        payload = await self._get_json(f"{self._api_url}/user", headers=headers)

        email = payload.get("email")
        if not email:
            emails = await self._get_json(f"{self._api_url}/user/emails", headers=headers, expect=list)
            email = next(
                (
                    entry.get("email")
                    for entry in emails
                    if isinstance(entry, dict) and entry.get("primary") and entry.get("verified")
                ),
                None,
            )
        if not email:
            logger.warning("GitHub account has no verified primary email")
            raise IdentityProviderError()

        try:
            return SocialProfile(
                email=email,
                name=payload.get("name") or payload.get("login") or "",
                avatar_url=payload.get("avatar_url"),
            )
        except ValueError as e:
            raise IdentityProviderError() from e
