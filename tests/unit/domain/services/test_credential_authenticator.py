"""Tests for CredentialAuthenticator with mocked collaborators."""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from codedrafts_auth.core.exceptions import (
    InvalidCredentialsError,
    TokenExpiredError,
    TokenNotFoundError,
    UserNotFoundError,
)
from codedrafts_auth.domain.entities.token import TokenType
from codedrafts_auth.domain.interfaces.repositories import IUserRepository
from codedrafts_auth.domain.services.auth.account_provisioner import AccountProvisioner
from codedrafts_auth.domain.services.auth.credential_authenticator import CredentialAuthenticator
from codedrafts_auth.domain.services.auth.token_store import TokenStore
from tests.factories import create_fake_token, create_fake_user, create_fake_user_settings


@pytest.fixture
def mock_user_repository():
    return AsyncMock(spec=IUserRepository)


@pytest.fixture
def mock_token_store():
    store = AsyncMock(spec=TokenStore)
    store.issue.return_value = "signed-token"
    return store


@pytest.fixture
def account_provisioner(mock_user_repository, mock_token_store, mock_mail_dispatcher, password_manager, background):
    return AccountProvisioner(
        mock_user_repository,
        mock_token_store,
        mock_mail_dispatcher,
        password_manager,
        background=background,
    )


@pytest.fixture
def authenticator(
    mock_user_repository,
    password_manager,
    token_codec,
    mock_token_store,
    account_provisioner,
    mock_mail_dispatcher,
):
    return CredentialAuthenticator(
        mock_user_repository,
        password_manager,
        token_codec,
        mock_token_store,
        account_provisioner,
        mock_mail_dispatcher,
    )


@pytest.fixture
def verified_user(password_manager):
    return create_fake_user(id=21, email="user@example.com", password=password_manager.hash("right-password"))


class TestLogin:
    @pytest.mark.asyncio
    async def test_success(self, authenticator, mock_user_repository, verified_user):
        mock_user_repository.get_verified_by_email.return_value = verified_user

        user = await authenticator.login(" User@Example.com ", "right-password")

        assert user is verified_user
        mock_user_repository.get_verified_by_email.assert_awaited_once_with("user@example.com")

    @pytest.mark.asyncio
    async def test_unknown_email_and_wrong_password_are_indistinguishable(
        self, authenticator, mock_user_repository, verified_user
    ):
        mock_user_repository.get_verified_by_email.return_value = None
        with pytest.raises(InvalidCredentialsError) as missing:
            await authenticator.login("a@x.com", "wrong")

        mock_user_repository.get_verified_by_email.return_value = verified_user
        with pytest.raises(InvalidCredentialsError) as mismatch:
            await authenticator.login("user@example.com", "wrong")

        assert missing.value.code == mismatch.value.code == "invalid_credentials"
        assert missing.value.message == mismatch.value.message

    @pytest.mark.asyncio
    async def test_social_only_account_cannot_log_in_with_password(self, authenticator, mock_user_repository):
        mock_user_repository.get_verified_by_email.return_value = create_fake_user(password=None)

        with pytest.raises(InvalidCredentialsError):
            await authenticator.login("social@example.com", "anything")


@pytest.mark.asyncio
async def test_register_delegates_to_provisioner(authenticator, account_provisioner, mocker):
    created = create_fake_user()
    create_local = mocker.patch.object(account_provisioner, "create_local", AsyncMock(return_value=created))

    user = await authenticator.register("n@example.com", "N", "pw")

    assert user is created
    create_local.assert_awaited_once_with("n@example.com", "N", "pw")


class TestVerifyEmail:
    @pytest.mark.asyncio
    async def test_consumes_and_marks_verified(self, authenticator, mock_token_store, account_provisioner, mocker):
        mock_token_store.consume.return_value = create_fake_token(user_id=21, purpose=TokenType.VERIFY_EMAIL)
        mark = mocker.patch.object(account_provisioner, "mark_email_verified", AsyncMock())

        await authenticator.verify_email("signed")

        mock_token_store.consume.assert_awaited_once_with(TokenType.VERIFY_EMAIL, "signed")
        mark.assert_awaited_once_with(21)

    @pytest.mark.parametrize("error", [TokenNotFoundError, TokenExpiredError])
    @pytest.mark.asyncio
    async def test_token_failure_propagates(self, authenticator, mock_token_store, account_provisioner, mocker, error):
        mock_token_store.consume.side_effect = error()
        mark = mocker.patch.object(account_provisioner, "mark_email_verified", AsyncMock())

        with pytest.raises(error):
            await authenticator.verify_email("signed")

        mark.assert_not_awaited()


class TestForgotPassword:
    @pytest.mark.asyncio
    async def test_unknown_email(self, authenticator, mock_user_repository, mock_token_store):
        mock_user_repository.get_by_email.return_value = None

        with pytest.raises(UserNotFoundError):
            await authenticator.forgot_password("nobody@example.com")

        mock_token_store.issue.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_issues_reset_token_and_mails_it(
        self, authenticator, mock_user_repository, mock_token_store, mock_mail_dispatcher, background, verified_user
    ):
        mock_user_repository.get_by_email.return_value = verified_user

        await authenticator.forgot_password("user@example.com")
        await background.drain()

        mock_token_store.issue.assert_awaited_once_with(21, TokenType.RESET_PASSWORD, timedelta(minutes=60))
        mock_mail_dispatcher.send_password_reset_email.assert_awaited_once_with(
            verified_user.username, "user@example.com", 21, "signed-token"
        )

    @pytest.mark.asyncio
    async def test_mail_failure_is_absorbed(
        self, authenticator, mock_user_repository, mock_mail_dispatcher, background, verified_user
    ):
        mock_user_repository.get_by_email.return_value = verified_user
        mock_mail_dispatcher.send_password_reset_email.side_effect = ConnectionError("smtp down")

        await authenticator.forgot_password("user@example.com")
        await background.drain()


class TestResetPassword:
    @pytest.mark.asyncio
    async def test_overwrites_hash(self, authenticator, mock_token_store, mock_user_repository, password_manager):
        mock_token_store.consume.return_value = create_fake_token(user_id=21, purpose=TokenType.RESET_PASSWORD)

        await authenticator.reset_password("signed", "brand-new")

        mock_token_store.consume.assert_awaited_once_with(TokenType.RESET_PASSWORD, "signed")
        user_id, stored_hash = mock_user_repository.update_password.await_args.args
        assert user_id == 21
        assert password_manager.verify("brand-new", stored_hash)

    @pytest.mark.asyncio
    async def test_expired_token_leaves_password(self, authenticator, mock_token_store, mock_user_repository):
        mock_token_store.consume.side_effect = TokenExpiredError()

        with pytest.raises(TokenExpiredError):
            await authenticator.reset_password("signed", "brand-new")

        mock_user_repository.update_password.assert_not_awaited()


class TestChangePassword:
    @pytest.mark.asyncio
    async def test_wrong_old_password(self, authenticator, mock_user_repository, verified_user):
        original_hash = verified_user.password

        with pytest.raises(InvalidCredentialsError) as exc_info:
            await authenticator.change_password(verified_user, "oldWrong", "new")

        assert exc_info.value.code == "invalid_old_password"
        assert verified_user.password == original_hash
        mock_user_repository.update_password.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_stores_hash_of_new_password(self, authenticator, mock_user_repository, password_manager, verified_user):
        await authenticator.change_password(verified_user, "right-password", "new")

        user_id, stored_hash = mock_user_repository.update_password.await_args.args
        assert user_id == verified_user.id
        assert stored_hash != "new"
        assert password_manager.verify("new", stored_hash)
        assert verified_user.password == stored_hash


class TestResendVerification:
    @pytest.mark.asyncio
    async def test_reissues_for_unverified_user(
        self, authenticator, mock_user_repository, mock_token_store, mock_mail_dispatcher, background
    ):
        user = create_fake_user(id=30, email="pending@example.com", username="Pending")
        mock_user_repository.get_by_email.return_value = user
        mock_user_repository.get_settings.return_value = create_fake_user_settings(30, is_email_verified=False)

        await authenticator.resend_verification("pending@example.com")
        await background.drain()

        mock_token_store.issue.assert_awaited_once_with(30, TokenType.VERIFY_EMAIL, timedelta(minutes=60))
        mock_mail_dispatcher.send_verification_email.assert_awaited_once_with(
            "pending@example.com", "Pending", 30, "signed-token"
        )

    @pytest.mark.asyncio
    async def test_noop_when_already_verified(self, authenticator, mock_user_repository, mock_token_store):
        mock_user_repository.get_by_email.return_value = create_fake_user(id=31)
        mock_user_repository.get_settings.return_value = create_fake_user_settings(31, is_email_verified=True)

        await authenticator.resend_verification("done@example.com")

        mock_token_store.issue.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_email(self, authenticator, mock_user_repository):
        mock_user_repository.get_by_email.return_value = None

        with pytest.raises(UserNotFoundError):
            await authenticator.resend_verification("ghost@example.com")


class TestAccessTokens:
    @pytest.mark.asyncio
    async def test_issue_and_authenticate(self, authenticator, mock_user_repository, verified_user):
        access = authenticator.issue_access_token(verified_user)
        mock_user_repository.get_by_id.return_value = verified_user

        user = await authenticator.authenticate_access_token(access.access_token)

        assert user is verified_user
        assert access.token_type == "bearer"
        assert access.expires_in == 24 * 60 * 60
        mock_user_repository.get_by_id.assert_awaited_once_with(verified_user.id)

    @pytest.mark.asyncio
    async def test_expired_access_token(self, authenticator, token_codec, mock_user_repository):
        signed = token_codec.issue(21, TokenType.ACCESS, timedelta(seconds=-5))

        with pytest.raises(InvalidCredentialsError) as exc_info:
            await authenticator.authenticate_access_token(signed)

        assert exc_info.value.code == "invalid_access_token"
        mock_user_repository.get_by_id.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_other_purpose_is_rejected(self, authenticator, token_codec):
        signed = token_codec.issue(21, TokenType.RESET_PASSWORD, timedelta(hours=1))

        with pytest.raises(InvalidCredentialsError):
            await authenticator.authenticate_access_token(signed)

    @pytest.mark.asyncio
    async def test_deleted_user(self, authenticator, token_codec, mock_user_repository):
        signed = token_codec.issue(21, TokenType.ACCESS, timedelta(hours=1))
        mock_user_repository.get_by_id.return_value = None

        with pytest.raises(InvalidCredentialsError):
            await authenticator.authenticate_access_token(signed)
