"""Password hashing with bcrypt through passlib."""

from typing import Optional

import structlog
from passlib.context import CryptContext

from codedrafts_auth.core.config.settings import settings

logger = structlog.get_logger(__name__)


class PasswordManager:
    """Hashes and verifies user passwords.

    Hashes are salted bcrypt strings (``$2b$<rounds>$...``); the work factor
    comes from ``settings.BCRYPT_WORK_FACTOR``. Verification is constant-time
    within bcrypt.

    Attributes:
        pwd_context (CryptContext): Passlib context for bcrypt password hashing.
    """

    def __init__(self, work_factor: Optional[int] = None):
        rounds = work_factor or settings.BCRYPT_WORK_FACTOR
        self.pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, plaintext: str) -> str:
        """Hash a password using bcrypt.

        Args:
            plaintext: Plain text password to hash.

        Returns:
            str: Bcrypt-hashed password. Two calls with the same input differ
            because of the random salt.
        """
        return self.pwd_context.hash(plaintext)

    def verify(self, plaintext: str, hashed: Optional[str]) -> bool:
        """Verify a password against its hash.

        Args:
            plaintext: Plain text password to verify.
            hashed: Stored hash. Social-only accounts have none.

        Returns:
            bool: True if the password matches. False on mismatch, and also when
            ``hashed`` is missing or is not a recognised hash.
        """
        if not hashed or plaintext is None:
            return False
        try:
            return self.pwd_context.verify(plaintext, hashed)
        except (ValueError, TypeError):
            logger.warning("Stored password hash could not be identified")
            return False
