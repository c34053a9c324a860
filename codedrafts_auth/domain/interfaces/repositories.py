"""Repository interfaces for abstracting data persistence in the domain layer.

These abstract base classes are the "ports" the domain services talk to. The
concrete SQLAlchemy adapters live in `codedrafts_auth.infrastructure.repositories`.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from codedrafts_auth.domain.entities.instructor_balance import InstructorBalance
from codedrafts_auth.domain.entities.token import Token, TokenType
from codedrafts_auth.domain.entities.user import User, UserSettings


class IUserRepository(ABC):
    """An interface defining the contract for user persistence operations.

    Covers the `User` aggregate root together with its one-to-one
    `UserSettings` and `InstructorBalance` rows.
    """

    @abstractmethod
    async def get_by_id(self, user_id: int) -> Optional[User]:
        """Retrieves a user by their unique identifier."""
        raise NotImplementedError

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        """Retrieves a user by email address, whatever its verification state.

        Args:
            email: The email address to search for (compared lower-cased).

        Returns:
            An optional `User` entity. Returns `None` if no user is found.
        """
        raise NotImplementedError

    @abstractmethod
    async def get_verified_by_email(self, email: str) -> Optional[User]:
        """Retrieves a user by email only if their email has been verified.

        Args:
            email: The email address to search for (compared lower-cased).

        Returns:
            An optional `User` entity whose settings have `is_email_verified`
            set. Returns `None` otherwise.
        """
        raise NotImplementedError

    @abstractmethod
    async def get_settings(self, user_id: int) -> Optional[UserSettings]:
        """Retrieves the settings row of a user."""
        raise NotImplementedError

    @abstractmethod
    async def create(self, user: User, settings: UserSettings) -> User:
        """Persists a new user together with its settings row.

        Raises:
            DuplicateUserError: If the email address is already registered.
        """
        raise NotImplementedError

    @abstractmethod
    async def update_password(self, user_id: int, hashed_password: str) -> None:
        """Overwrites the stored password hash of a user."""
        raise NotImplementedError

    @abstractmethod
    async def set_email_verified(self, user_id: int) -> None:
        """Flags the user's email as verified."""
        raise NotImplementedError

    @abstractmethod
    async def get_balance(self, user_id: int) -> Optional[InstructorBalance]:
        """Retrieves the instructor balance ledger row of a user, if any."""
        raise NotImplementedError

    @abstractmethod
    async def create_balance(self, user_id: int) -> InstructorBalance:
        """Creates a zero instructor balance row for a user."""
        raise NotImplementedError

    @abstractmethod
    async def delete(self, user_id: int) -> None:
        """Hard-deletes a user and every dependent row (settings, balance, tokens)."""
        raise NotImplementedError


class ITokenRepository(ABC):
    """An interface for the persistence of purpose-scoped tokens."""

    @abstractmethod
    async def upsert(self, token: Token) -> Token:
        """Inserts the token or atomically replaces the row sharing
        ``(user_id, type)``.

        Returns:
            The persisted token values.
        """
        raise NotImplementedError

    @abstractmethod
    async def find(self, user_id: int, purpose: TokenType, token: str) -> Optional[Token]:
        """Finds the row matching owner, purpose and signed string exactly."""
        raise NotImplementedError

    @abstractmethod
    async def get_for_user(self, user_id: int, purpose: TokenType) -> Optional[Token]:
        """Returns the single token row of a user for a purpose, if any."""
        raise NotImplementedError

    @abstractmethod
    async def invalidate(self, token_id: str, now: datetime) -> bool:
        """Sets ``expires_at = now`` on the row if, and only if, it is still live.

        This is a single conditional update, so two concurrent callers cannot
        both succeed.

        Returns:
            True if the row was live and is now invalidated, False otherwise.
        """
        raise NotImplementedError
