from datetime import datetime
from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy import Enum as SAEnum
from sqlmodel import Field, SQLModel


class TokenType(str, Enum):
    """The single use a token is issued for."""

    ACCESS = "access_token"
    VERIFY_EMAIL = "verify_email_token"
    RESET_PASSWORD = "reset_password_token"


class Token(SQLModel, table=True):
    """A persisted, in-flight authorization artifact.

    At most one row exists per ``(user_id, type)``; re-issuing replaces it
    through an upsert on that key. A token is consumed by moving `expires_at`
    to the consumption instant, so a used token and a timed-out one look the same.

    Attributes:
        id: Short random identifier, regenerated on every issuance.
        user_id: Owner of the token.
        type: Purpose of the token.
        token: The signed token string handed to the user.
        expires_at: Expiry instant (UTC).
    """

    __tablename__ = "tokens"
    __table_args__ = (UniqueConstraint("user_id", "type", name="uq_tokens_user_id_type"),)

    id: str = Field(sa_column=Column(String(32), primary_key=True))
    user_id: int = Field(
        sa_column=Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False),
    )
    type: TokenType = Field(
        sa_column=Column(
            SAEnum(TokenType, name="token_type", values_callable=lambda e: [m.value for m in e]),
            nullable=False,
        ),
    )
    token: str = Field(sa_column=Column(Text, nullable=False))
    expires_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
