"""Shared HTTP plumbing of the identity provider clients."""

from typing import Any, Dict, Optional

import httpx
import structlog

from codedrafts_auth.core.config.settings import settings
from codedrafts_auth.core.exceptions import IdentityProviderError
from codedrafts_auth.domain.interfaces.services import IIdentityProviderClient

logger = structlog.get_logger(__name__)


class HttpIdentityProviderClient(IIdentityProviderClient):
    """Base class issuing GET requests to a provider API with httpx.

    A single call is made per request: there is no retry, and the configured
    timeout bounds every provider round trip. Pass ``http_client`` to share a
    connection pool or, in tests, a client built on ``httpx.MockTransport``.
    """

    provider: str = "unknown"

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None, timeout: Optional[float] = None):
        self._http_client = http_client
        self._timeout = timeout or settings.OAUTH_HTTP_TIMEOUT_SECONDS

    async def _get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        expect: type = dict,
    ) -> Any:
        """GET ``url`` and decode the JSON body.

        Args:
            expect: JSON type the body must decode to (``dict`` or ``list``).

        Raises:
            IdentityProviderError: On transport errors, non-2xx statuses, a
                body that is not JSON or a body of another JSON type.
        """
        try:
            if self._http_client is not None:
                response = await self._http_client.get(url, params=params, headers=headers, timeout=self._timeout)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(url, params=params, headers=headers)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Identity provider rejected request",
                provider=self.provider,
                status_code=e.response.status_code,
            )
            raise IdentityProviderError() from e
        except httpx.HTTPError as e:
            logger.error(
                "Identity provider unreachable",
                provider=self.provider,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise IdentityProviderError() from e
        except ValueError as e:
            logger.warning("Identity provider returned malformed body", provider=self.provider)
            raise IdentityProviderError() from e

        if not isinstance(body, expect):
            logger.warning(
                "Identity provider returned unexpected body",
                provider=self.provider,
                body_type=type(body).__name__,
            )
            raise IdentityProviderError()
        return body
