from __future__ import annotations

"""Factory for generating fake user data for testing."""

from datetime import datetime, timezone
from typing import Optional

from faker import Faker

from codedrafts_auth.domain.entities.user import Role, Social, User, UserSettings

fake = Faker()


def create_fake_user(
    id: Optional[int] = None,
    email: Optional[str] = None,
    username: Optional[str] = None,
    password: Optional[str] = None,
    avatar: Optional[str] = None,
    role: Role = Role.USER,
    social: Optional[Social] = None,
    created_at: Optional[datetime] = None,
) -> User:
    """Create a fake User entity for testing.

    Args:
        id: User ID, defaults to a random integer.
        email: Email, defaults to a fake lower-cased email.
        username: Username, defaults to a fake name.
        password: Stored password hash, defaults to None (social-only account).
        avatar: Avatar URL.
        role: User role, defaults to USER.
        social: Originating provider.
        created_at: Creation timestamp, defaults to now.

    Returns:
        User: A fake, detached User entity.
    """
    return User(
        id=id if id is not None else fake.random_int(min=1, max=10000),
        email=email if email is not None else fake.unique.email().lower(),
        username=username if username is not None else fake.name(),
        password=password,
        avatar=avatar,
        role=role,
        social=social,
        created_at=created_at if created_at is not None else datetime.now(timezone.utc),
    )


def create_fake_user_settings(user_id: int, is_email_verified: bool = False) -> UserSettings:
    return UserSettings(
        id=fake.random_int(min=1, max=10000),
        user_id=user_id,
        is_email_verified=is_email_verified,
    )
