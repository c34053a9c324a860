"""User Repository implementation using SQLAlchemy.

Implements `IUserRepository` over an `AsyncSession`. Every write commits its
own transaction; the session factory keeps entities readable after commit.
"""

from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from codedrafts_auth.core.exceptions import DuplicateUserError
from codedrafts_auth.domain.entities.instructor_balance import InstructorBalance
from codedrafts_auth.domain.entities.token import Token
from codedrafts_auth.domain.entities.user import User, UserSettings
from codedrafts_auth.domain.interfaces.repositories import IUserRepository
from codedrafts_auth.utils.clock import utc_now
from codedrafts_auth.utils.security import mask_email

logger = get_logger(__name__)


class UserRepository(IUserRepository):
    """SQLAlchemy implementation of the user repository.

    Responsibilities:
    - User, settings and instructor balance persistence
    - Translation of the unique email constraint into `DuplicateUserError`
    - Secure logging with masked email addresses
    """

    def __init__(self, db_session: AsyncSession):
        self.db_session = db_session

    async def get_by_id(self, user_id: int) -> Optional[User]:
        statement = select(User).where(User.id == user_id)
        result = await self.db_session.execute(statement)
        return result.scalars().first()

    async def get_by_email(self, email: str) -> Optional[User]:
        statement = select(User).where(User.email == email.strip().lower())
        result = await self.db_session.execute(statement)
        user = result.scalars().first()
        logger.debug("User lookup by email completed", email=mask_email(email), found=user is not None)
        return user

    async def get_verified_by_email(self, email: str) -> Optional[User]:
        statement = (
            select(User)
            .join(UserSettings, UserSettings.user_id == User.id)
            .where(User.email == email.strip().lower(), UserSettings.is_email_verified.is_(True))
        )
        result = await self.db_session.execute(statement)
        return result.scalars().first()

    async def get_settings(self, user_id: int) -> Optional[UserSettings]:
        statement = (
            select(UserSettings)
            .where(UserSettings.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db_session.execute(statement)
        return result.scalars().first()

    async def create(self, user: User, settings: UserSettings) -> User:
        """Insert the user and its settings in one transaction.

        Raises:
            DuplicateUserError: If the email is already registered.
        """
        try:
            self.db_session.add(user)
            await self.db_session.flush()
            settings.user_id = user.id
            self.db_session.add(settings)
            await self.db_session.commit()
        except IntegrityError as e:
            await self.db_session.rollback()
            logger.warning("Duplicate email on user insert", email=mask_email(user.email))
            raise DuplicateUserError() from e
        except Exception as e:
            await self.db_session.rollback()
            logger.error(
                "Error saving user",
                email=mask_email(user.email),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

        await self.db_session.refresh(user)
        logger.info("User saved successfully", user_id=user.id, email=mask_email(user.email))
        return user

    async def update_password(self, user_id: int, hashed_password: str) -> None:
        statement = (
            update(User)
            .where(User.id == user_id)
            .values(password=hashed_password, updated_at=utc_now())
        )
        await self.db_session.execute(statement)
        await self.db_session.commit()
        logger.debug("User password updated", user_id=user_id)

    async def set_email_verified(self, user_id: int) -> None:
        statement = (
            update(UserSettings)
            .where(UserSettings.user_id == user_id)
            .values(is_email_verified=True)
        )
        await self.db_session.execute(statement)
        await self.db_session.commit()

    async def get_balance(self, user_id: int) -> Optional[InstructorBalance]:
        statement = select(InstructorBalance).where(InstructorBalance.instructor_id == user_id)
        result = await self.db_session.execute(statement)
        return result.scalars().first()

    async def create_balance(self, user_id: int) -> InstructorBalance:
        """Insert a zero balance row.

        If a concurrent flow inserted it first, the existing row is returned.
        """
        balance = InstructorBalance(instructor_id=user_id, current_balance=0)
        try:
            self.db_session.add(balance)
            await self.db_session.commit()
        except IntegrityError:
            await self.db_session.rollback()
            existing = await self.get_balance(user_id)
            if existing is None:
                raise
            return existing

        await self.db_session.refresh(balance)
        return balance

    async def delete(self, user_id: int) -> None:
        try:
            await self.db_session.execute(delete(Token).where(Token.user_id == user_id))
            await self.db_session.execute(
                delete(InstructorBalance).where(InstructorBalance.instructor_id == user_id)
            )
            await self.db_session.execute(delete(UserSettings).where(UserSettings.user_id == user_id))
            await self.db_session.execute(delete(User).where(User.id == user_id))
            await self.db_session.commit()
        except Exception as e:
            await self.db_session.rollback()
            logger.error(
                "Error deleting user",
                user_id=user_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

        logger.info("User deleted successfully", user_id=user_id)
