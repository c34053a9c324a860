"""Google ID token verification through the tokeninfo endpoint."""

from typing import Optional

import httpx
import structlog

from codedrafts_auth.core.config.settings import settings
from codedrafts_auth.core.exceptions import IdentityProviderError
from codedrafts_auth.domain.value_objects.social_profile import SocialProfile
from codedrafts_auth.infrastructure.services.identity_providers.base import HttpIdentityProviderClient

logger = structlog.get_logger(__name__)

GOOGLE_ISSUERS = frozenset({"accounts.google.com", "https://accounts.google.com"})


class GoogleIdentityClient(HttpIdentityProviderClient):
    """Verifies Google ID tokens.

    Google checks the signature and expiry of the token; this client checks
    that it was minted for our OAuth client id and by Google, and that the
    email is verified.
    """

    provider = "google"

    def __init__(
        self,
        client_id: Optional[str] = None,
        tokeninfo_url: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        super().__init__(http_client=http_client, timeout=timeout)
        self._client_id = client_id if client_id is not None else settings.GOOGLE_CLIENT_ID
        self._tokeninfo_url = tokeninfo_url or settings.GOOGLE_TOKENINFO_URL

    async def fetch_profile(self, access_token: str, social_user_id: Optional[str] = None) -> SocialProfile:
        payload = await self._get_json(self._tokeninfo_url, params={"id_token": access_token})

        if payload.get("aud") != self._client_id:
            logger.warning("Google token audience mismatch")
            raise IdentityProviderError()
        if payload.get("iss") not in GOOGLE_ISSUERS:
            logger.warning("Google token issuer mismatch", issuer=payload.get("iss"))
            raise IdentityProviderError()
        # tokeninfo returns booleans as strings
        if str(payload.get("email_verified", "false")).lower() != "true":
            logger.warning("Google email not verified")
            raise IdentityProviderError()

        try:
            return SocialProfile(
                email=payload.get("email", ""),
                name=payload.get("name") or "",
                avatar_url=payload.get("picture"),
            )
        except ValueError as e:
            raise IdentityProviderError() from e
