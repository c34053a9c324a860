"""Signing and verification of purpose-scoped JWTs."""

from datetime import datetime, timedelta, timezone

import structlog
from jwt import PyJWTError
from jwt import decode as jwt_decode
from jwt import encode as jwt_encode

from codedrafts_auth.core.exceptions import InvalidTokenError
from codedrafts_auth.domain.entities.token import TokenType
from codedrafts_auth.domain.interfaces.services import ISigningKeyProvider
from codedrafts_auth.domain.value_objects.token_claims import TokenClaims
from codedrafts_auth.utils.clock import utc_now
from codedrafts_auth.utils.security import generate_id

logger = structlog.get_logger(__name__)

_JTI_LENGTH = 22


class TokenCodec:
    """Produces and checks signed tokens carrying a subject and a purpose.

    The payload holds ``sub`` (the user id as a string), ``type`` (the purpose),
    ``exp``, ``iat`` and a random ``jti`` so that two issuances in the same
    second never produce the same string.

    `verify` deliberately ignores ``exp``: for persisted purposes the stored
    record decides expiry. Callers that rely on the claim (access tokens) check
    `TokenClaims.expires_at` themselves.
    """

    def __init__(self, key_provider: ISigningKeyProvider):
        self._key_provider = key_provider

    def issue(self, subject: int, purpose: TokenType, ttl: timedelta) -> str:
        """Sign a token for ``subject`` usable only for ``purpose``.

        Args:
            subject: The user id.
            purpose: What the token authorizes.
            ttl: Lifetime embedded in ``exp``.

        Returns:
            str: The encoded JWT.
        """
        now = utc_now()
        payload = {
            "sub": str(subject),
            "type": purpose.value,
            "exp": now + ttl,
            "iat": now,
            "jti": generate_id(_JTI_LENGTH),
        }
        token = jwt_encode(
            payload,
            self._key_provider.get_signing_key(),
            algorithm=self._key_provider.algorithm,
        )
        logger.debug("Token signed", user_id=subject, purpose=purpose.value)
        return token

    def verify(self, signed: str, expected_purpose: TokenType) -> TokenClaims:
        """Check the signature and purpose of ``signed``.

        Args:
            signed: The encoded JWT.
            expected_purpose: The purpose the caller is about to act on.

        Returns:
            TokenClaims: The verified subject, purpose and embedded expiry.

        Raises:
            InvalidTokenError: If the signature is invalid, the payload is
                malformed or the purpose differs.
        """
        try:
            payload = jwt_decode(
                signed,
                self._key_provider.get_verification_key(),
                algorithms=[self._key_provider.algorithm],
                options={"verify_exp": False, "require": ["sub", "type", "exp"]},
            )
        except PyJWTError as e:
            logger.warning("Token signature or format rejected", error=str(e))
            raise InvalidTokenError() from e

        if payload.get("type") != expected_purpose.value:
            logger.warning(
                "Token purpose mismatch",
                expected=expected_purpose.value,
                actual=payload.get("type"),
            )
            raise InvalidTokenError()

        try:
            subject = int(payload["sub"])
            expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
        except (TypeError, ValueError) as e:
            raise InvalidTokenError() from e

        return TokenClaims(subject=subject, purpose=expected_purpose, expires_at=expires_at)
