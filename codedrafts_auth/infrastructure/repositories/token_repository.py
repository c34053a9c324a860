"""Token Repository implementation using SQLAlchemy.

The upsert relies on ``INSERT ... ON CONFLICT (user_id, type) DO UPDATE``,
available on both PostgreSQL and SQLite.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from codedrafts_auth.domain.entities.token import Token, TokenType
from codedrafts_auth.domain.interfaces.repositories import ITokenRepository

logger = get_logger(__name__)

_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class TokenRepository(ITokenRepository):
    """SQLAlchemy implementation of the token repository."""

    def __init__(self, db_session: AsyncSession):
        self.db_session = db_session

    def _insert(self):
        dialect = self.db_session.get_bind().dialect.name
        try:
            return _INSERTS[dialect]
        except KeyError:
            raise RuntimeError(f"Token upsert is not supported on {dialect}") from None

    async def upsert(self, token: Token) -> Token:
        statement = self._insert()(Token).values(
            id=token.id,
            user_id=token.user_id,
            type=token.type,
            token=token.token,
            expires_at=token.expires_at,
        )
        statement = statement.on_conflict_do_update(
            index_elements=["user_id", "type"],
            set_={
                "id": statement.excluded.id,
                "token": statement.excluded.token,
                "expires_at": statement.excluded.expires_at,
            },
        )
        await self.db_session.execute(statement)
        await self.db_session.commit()
        logger.debug("Token upserted", user_id=token.user_id, purpose=token.type.value)
        return token

    async def find(self, user_id: int, purpose: TokenType, token: str) -> Optional[Token]:
        statement = (
            select(Token)
            .where(Token.user_id == user_id, Token.type == purpose, Token.token == token)
            .execution_options(populate_existing=True)
        )
        result = await self.db_session.execute(statement)
        return result.scalars().first()

    async def get_for_user(self, user_id: int, purpose: TokenType) -> Optional[Token]:
        statement = (
            select(Token)
            .where(Token.user_id == user_id, Token.type == purpose)
            .execution_options(populate_existing=True)
        )
        result = await self.db_session.execute(statement)
        return result.scalars().first()

    async def invalidate(self, token_id: str, now: datetime) -> bool:
        statement = (
            update(Token)
            .where(Token.id == token_id, Token.expires_at > now)
            .values(expires_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self.db_session.execute(statement)
        await self.db_session.commit()
        invalidated = result.rowcount == 1
        logger.debug("Token invalidation attempted", token_id=token_id, invalidated=invalidated)
        return invalidated
