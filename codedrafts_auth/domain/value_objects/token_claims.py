from dataclasses import dataclass
from datetime import datetime

from codedrafts_auth.domain.entities.token import TokenType


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """Verified claims of a signed token.

    Attributes:
        subject: Id of the user the token was issued to.
        purpose: What the token may be used for.
        expires_at: Expiry embedded at issuance (UTC). Informational for
            persisted tokens, whose stored record decides expiry.
    """

    subject: int
    purpose: TokenType
    expires_at: datetime


@dataclass(frozen=True, slots=True)
class AccessToken:
    """A bearer token handed to the client after login."""

    access_token: str
    expires_in: int
    token_type: str = "bearer"
