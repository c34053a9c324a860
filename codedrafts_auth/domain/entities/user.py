from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlmodel import Field, SQLModel

from codedrafts_auth.utils.clock import utc_now


class Role(str, Enum):
    """Represents the role of a user within the platform.

    Attributes:
        ADMIN: Confers administrative privileges for platform management.
        USER: A learner or instructor with regular access rights.
    """

    ADMIN = "admin"
    USER = "user"


class Social(str, Enum):
    """External identity providers a user account may originate from."""

    GOOGLE = "google"
    FACEBOOK = "facebook"
    GITHUB = "github"


class User(SQLModel, table=True):
    """Represents a User entity and acts as an Aggregate Root.

    The model supports both password-based accounts and accounts created from
    a federated login, which carry no password and record the originating
    provider in `social`.

    Attributes:
        id: The unique identifier for the user (primary key).
        email: A unique email address, stored lower-cased.
        username: Display name. Not unique; social providers supply full names.
        password: The bcrypt hash. Null for users who only authenticate via a
            social provider.
        avatar: URL of the profile picture, if any.
        role: The user's role.
        social: The provider the account was created from, if any.
        created_at: The timestamp of when the user account was created.
        updated_at: The timestamp of the last update to the user's record.
    """

    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(
        sa_column=Column(String(255), unique=True, index=True, nullable=False),
    )
    username: str = Field(sa_column=Column(String(255), nullable=False))
    password: Optional[str] = Field(default=None, max_length=255)
    avatar: Optional[str] = Field(default=None, max_length=1024)
    role: Role = Field(default=Role.USER)
    social: Optional[Social] = Field(default=None)
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), onupdate=utc_now, nullable=True),
    )


class UserSettings(SQLModel, table=True):
    """Per-user settings, one-to-one with `User`.

    `is_email_verified` gates password login. It starts false for self-registered
    accounts and true for accounts created from a trusted social provider.
    """

    __tablename__ = "user_settings"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("users.id", ondelete="CASCADE"),
            unique=True,
            index=True,
            nullable=False,
        ),
    )
    is_email_verified: bool = Field(default=False)
