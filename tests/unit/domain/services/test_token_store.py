"""Tests for TokenStore with a mocked token repository."""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from codedrafts_auth.core.exceptions import TokenExpiredError, TokenNotFoundError
from codedrafts_auth.domain.entities.token import Token, TokenType
from codedrafts_auth.domain.interfaces.repositories import ITokenRepository
from codedrafts_auth.domain.services.auth.token_store import TokenStore
from codedrafts_auth.utils.clock import utc_now
from tests.factories import create_fake_token


@pytest.fixture
def mock_token_repository():
    repository = AsyncMock(spec=ITokenRepository)
    repository.upsert.side_effect = lambda token: token
    repository.invalidate.return_value = True
    return repository


@pytest.fixture
def token_store(mock_token_repository, token_codec):
    return TokenStore(mock_token_repository, token_codec)


class TestTokenStoreUpsert:
    @pytest.mark.asyncio
    async def test_upsert_builds_row_with_fresh_id(self, token_store, mock_token_repository):
        before = utc_now()

        stored = await token_store.upsert(5, TokenType.RESET_PASSWORD, "signed", timedelta(hours=1))

        row = mock_token_repository.upsert.await_args.args[0]
        assert isinstance(row, Token)
        assert stored is row
        assert row.user_id == 5
        assert row.type is TokenType.RESET_PASSWORD
        assert row.token == "signed"
        assert len(row.id) == 9
        assert before + timedelta(hours=1) <= row.expires_at <= utc_now() + timedelta(hours=1)

    @pytest.mark.asyncio
    async def test_issue_signs_and_stores_the_same_string(self, token_store, mock_token_repository, token_codec):
        signed = await token_store.issue(9, TokenType.VERIFY_EMAIL, timedelta(hours=1))

        row = mock_token_repository.upsert.await_args.args[0]
        assert row.token == signed
        assert token_codec.verify(signed, TokenType.VERIFY_EMAIL).subject == 9


class TestTokenStoreConsume:
    @pytest.mark.asyncio
    async def test_consume_live_token(self, token_store, mock_token_repository, token_codec):
        signed = token_codec.issue(3, TokenType.RESET_PASSWORD, timedelta(hours=1))
        record = create_fake_token(user_id=3, purpose=TokenType.RESET_PASSWORD, token=signed)
        original_expiry = record.expires_at
        mock_token_repository.find.return_value = record

        consumed = await token_store.consume(TokenType.RESET_PASSWORD, signed)

        mock_token_repository.find.assert_awaited_once_with(3, TokenType.RESET_PASSWORD, signed)
        token_id, now = mock_token_repository.invalidate.await_args.args
        assert token_id == record.id
        assert now < original_expiry
        assert consumed.id == record.id
        assert consumed.expires_at == original_expiry

    @pytest.mark.asyncio
    async def test_untrusted_string_is_not_found(self, token_store, mock_token_repository):
        with pytest.raises(TokenNotFoundError):
            await token_store.consume(TokenType.RESET_PASSWORD, "forged.token.value")

        mock_token_repository.find.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_wrong_purpose_is_not_found(self, token_store, token_codec):
        signed = token_codec.issue(3, TokenType.VERIFY_EMAIL, timedelta(hours=1))

        with pytest.raises(TokenNotFoundError):
            await token_store.consume(TokenType.RESET_PASSWORD, signed)

    @pytest.mark.asyncio
    async def test_superseded_string_is_not_found(self, token_store, mock_token_repository, token_codec):
        signed = token_codec.issue(3, TokenType.RESET_PASSWORD, timedelta(hours=1))
        mock_token_repository.find.return_value = None

        with pytest.raises(TokenNotFoundError):
            await token_store.consume(TokenType.RESET_PASSWORD, signed)

        mock_token_repository.invalidate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_expired_record(self, token_store, mock_token_repository, token_codec):
        signed = token_codec.issue(3, TokenType.RESET_PASSWORD, timedelta(hours=1))
        mock_token_repository.find.return_value = create_fake_token(
            user_id=3,
            purpose=TokenType.RESET_PASSWORD,
            token=signed,
            expires_at=utc_now() - timedelta(seconds=1),
        )

        with pytest.raises(TokenExpiredError):
            await token_store.consume(TokenType.RESET_PASSWORD, signed)

        mock_token_repository.invalidate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_naive_expiry_is_read_as_utc(self, token_store, mock_token_repository, token_codec):
        signed = token_codec.issue(3, TokenType.RESET_PASSWORD, timedelta(hours=1))
        naive_future = (utc_now() + timedelta(minutes=30)).replace(tzinfo=None)
        mock_token_repository.find.return_value = create_fake_token(
            user_id=3, purpose=TokenType.RESET_PASSWORD, token=signed, expires_at=naive_future
        )

        consumed = await token_store.consume(TokenType.RESET_PASSWORD, signed)

        assert consumed.expires_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_lost_race_is_reported_as_expired(self, token_store, mock_token_repository, token_codec):
        signed = token_codec.issue(3, TokenType.RESET_PASSWORD, timedelta(hours=1))
        mock_token_repository.find.return_value = create_fake_token(
            user_id=3, purpose=TokenType.RESET_PASSWORD, token=signed
        )
        mock_token_repository.invalidate.return_value = False

        with pytest.raises(TokenExpiredError):
            await token_store.consume(TokenType.RESET_PASSWORD, signed)
