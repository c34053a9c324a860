"""Persistence-backed lifecycle of purpose-scoped tokens."""

from datetime import timedelta

import structlog

from codedrafts_auth.core.exceptions import (
    InvalidTokenError,
    TokenExpiredError,
    TokenNotFoundError,
)
from codedrafts_auth.domain.entities.token import Token, TokenType
from codedrafts_auth.domain.interfaces.repositories import ITokenRepository
from codedrafts_auth.domain.services.auth.token_codec import TokenCodec
from codedrafts_auth.utils.clock import ensure_utc, utc_now
from codedrafts_auth.utils.security import generate_id

logger = structlog.get_logger(__name__)


class TokenStore:
    """Keeps at most one live token per ``(user, purpose)`` and consumes it once.

    Re-issuing a token for the same user and purpose replaces the previous
    row, so only the most recently issued string can ever be redeemed.
    Consumption moves ``expires_at`` to the current instant instead of
    deleting the row.
    """

    def __init__(self, token_repository: ITokenRepository, codec: TokenCodec):
        self._token_repository = token_repository
        self._codec = codec

    async def upsert(self, user_id: int, purpose: TokenType, signed: str, ttl: timedelta) -> Token:
        """Store ``signed`` as the only token of ``user_id`` for ``purpose``.

        Args:
            user_id: Owner of the token.
            purpose: Token purpose.
            signed: The signed string handed to the user.
            ttl: Lifetime counted from now.

        Returns:
            Token: The stored row, with a fresh id.
        """
        token = Token(
            id=generate_id(),
            user_id=user_id,
            type=purpose,
            token=signed,
            expires_at=utc_now() + ttl,
        )
        stored = await self._token_repository.upsert(token)
        logger.info(
            "Token stored",
            user_id=user_id,
            purpose=purpose.value,
            token_id=stored.id,
            expires_at=stored.expires_at.isoformat(),
        )
        return stored

    async def issue(self, user_id: int, purpose: TokenType, ttl: timedelta) -> str:
        """Sign a new token and store it, replacing any earlier one.

        Returns:
            str: The signed string to deliver to the user.
        """
        signed = self._codec.issue(user_id, purpose, ttl)
        await self.upsert(user_id, purpose, signed, ttl)
        return signed

    async def consume(self, purpose: TokenType, signed: str) -> Token:
        """Redeem ``signed`` for ``purpose`` exactly once.

        Args:
            purpose: The purpose the caller is about to act on.
            signed: The string presented by the user.

        Returns:
            Token: The record as it was before consumption.

        Raises:
            TokenNotFoundError: If the string is not trusted, was superseded or
                never stored.
            TokenExpiredError: If the record is past its expiry, or was already
                consumed, including by a concurrent caller.
        """
        try:
            claims = self._codec.verify(signed, purpose)
        except InvalidTokenError as e:
            raise TokenNotFoundError() from e

        record = await self._token_repository.find(claims.subject, purpose, signed)
        if record is None:
            logger.warning("Token not found", user_id=claims.subject, purpose=purpose.value)
            raise TokenNotFoundError()

        snapshot = Token(
            id=record.id,
            user_id=record.user_id,
            type=record.type,
            token=record.token,
            expires_at=ensure_utc(record.expires_at),
        )
        now = utc_now()
        if now >= snapshot.expires_at:
            logger.warning("Token expired", user_id=snapshot.user_id, purpose=purpose.value)
            raise TokenExpiredError()

        if not await self._token_repository.invalidate(snapshot.id, now):
            logger.warning("Token consumed concurrently", user_id=snapshot.user_id, purpose=purpose.value)
            raise TokenExpiredError()

        logger.info("Token consumed", user_id=snapshot.user_id, purpose=purpose.value, token_id=snapshot.id)
        return snapshot
