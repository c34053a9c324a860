from __future__ import annotations

"""Re-export factory functions for generating fake test data."""

# flake8: noqa: F401 – re-export

from .social import create_fake_social_profile
from .token import create_fake_token
from .user import create_fake_user, create_fake_user_settings

__all__ = [
    "create_fake_user",
    "create_fake_user_settings",
    "create_fake_token",
    "create_fake_social_profile",
]
