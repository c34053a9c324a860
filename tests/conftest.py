import os

# Must be set before anything imports codedrafts_auth.core.config.settings.
os.environ["APP_ENV"] = "test"
os.environ["BCRYPT_WORK_FACTOR"] = "4"
os.environ["JWT_ALGORITHM"] = "HS256"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-for-codedrafts-auth-suite-0123456789"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["FRONTEND_URL"] = "https://app.codedrafts.test"
os.environ["GOOGLE_CLIENT_ID"] = "test-google-client-id.apps.googleusercontent.com"

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from codedrafts_auth.domain.interfaces.services import IMailDispatcher
from codedrafts_auth.domain.services.auth.password_manager import PasswordManager
from codedrafts_auth.domain.services.auth.token_codec import TokenCodec
from codedrafts_auth.infrastructure.database.async_db import (
    build_session_factory,
    create_async_db_and_tables,
)
from codedrafts_auth.infrastructure.services.signing_key_provider import SettingsSigningKeyProvider
from codedrafts_auth.utils.background import BackgroundDispatcher


@pytest.fixture
def password_manager():
    return PasswordManager(work_factor=4)


@pytest.fixture
def key_provider():
    return SettingsSigningKeyProvider()


@pytest.fixture
def token_codec(key_provider):
    return TokenCodec(key_provider)


@pytest.fixture
def mock_mail_dispatcher():
    """Mail dispatcher double; calls are awaited by background tasks."""
    return AsyncMock(spec=IMailDispatcher)


@pytest.fixture
def background():
    return BackgroundDispatcher()


@pytest_asyncio.fixture
async def async_engine():
    """In-memory SQLite engine shared by every session of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await create_async_db_and_tables(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def async_session(async_engine):
    async with build_session_factory(async_engine)() as session:
        yield session
