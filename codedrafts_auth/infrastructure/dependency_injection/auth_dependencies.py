"""Dependency wiring for the authentication services.

Builds an `AuthContext` from a database session and settings, then the
services on top of it. Nothing here is cached at module level: each flow gets
its own repositories bound to its own session.
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncGenerator, Dict, Optional

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from codedrafts_auth.core.context import AuthContext
from codedrafts_auth.domain.entities.user import Social
from codedrafts_auth.domain.interfaces.services import (
    IIdentityProviderClient,
    IMailDispatcher,
    ISigningKeyProvider,
)
from codedrafts_auth.domain.services.auth.account_provisioner import AccountProvisioner
from codedrafts_auth.domain.services.auth.credential_authenticator import CredentialAuthenticator
from codedrafts_auth.domain.services.auth.password_manager import PasswordManager
from codedrafts_auth.domain.services.auth.token_codec import TokenCodec
from codedrafts_auth.domain.services.auth.token_store import TokenStore
from codedrafts_auth.domain.services.social.facebook import FacebookAuthService
from codedrafts_auth.domain.services.social.github import GithubAuthService
from codedrafts_auth.domain.services.social.google import GoogleAuthService
from codedrafts_auth.domain.services.social.social_authenticator import SocialAuthenticator
from codedrafts_auth.infrastructure.database.async_db import get_async_db
from codedrafts_auth.infrastructure.repositories.token_repository import TokenRepository
from codedrafts_auth.infrastructure.repositories.user_repository import UserRepository
from codedrafts_auth.infrastructure.services.email.mail_dispatcher import MailDispatcher
from codedrafts_auth.infrastructure.services.identity_providers import (
    FacebookIdentityClient,
    GithubIdentityClient,
    GoogleIdentityClient,
)
from codedrafts_auth.infrastructure.services.signing_key_provider import SettingsSigningKeyProvider
from codedrafts_auth.utils.background import BackgroundDispatcher


@dataclass
class AuthServices:
    """The public entry points, wired over one `AuthContext`."""

    context: AuthContext
    password_manager: PasswordManager
    token_codec: TokenCodec
    token_store: TokenStore
    account_provisioner: AccountProvisioner
    credential_authenticator: CredentialAuthenticator
    social_authenticator: SocialAuthenticator


def build_identity_clients(
    http_client: Optional[httpx.AsyncClient] = None,
) -> Dict[Social, IIdentityProviderClient]:
    return {
        Social.GOOGLE: GoogleIdentityClient(http_client=http_client),
        Social.FACEBOOK: FacebookIdentityClient(http_client=http_client),
        Social.GITHUB: GithubIdentityClient(http_client=http_client),
    }


def build_auth_context(
    session: AsyncSession,
    *,
    mail_dispatcher: Optional[IMailDispatcher] = None,
    key_provider: Optional[ISigningKeyProvider] = None,
    identity_clients: Optional[Dict[Social, IIdentityProviderClient]] = None,
    background: Optional[BackgroundDispatcher] = None,
) -> AuthContext:
    """Bind the repositories to ``session`` and fill in default adapters."""
    return AuthContext(
        user_repository=UserRepository(session),
        token_repository=TokenRepository(session),
        mail_dispatcher=mail_dispatcher or MailDispatcher(),
        key_provider=key_provider or SettingsSigningKeyProvider(),
        identity_clients=identity_clients if identity_clients is not None else build_identity_clients(),
        background=background or BackgroundDispatcher(),
    )


def build_auth_services(context: AuthContext, password_manager: Optional[PasswordManager] = None) -> AuthServices:
    password_manager = password_manager or PasswordManager()
    token_codec = TokenCodec(context.key_provider)
    token_store = TokenStore(context.token_repository, token_codec)
    account_provisioner = AccountProvisioner(
        context.user_repository,
        token_store,
        context.mail_dispatcher,
        password_manager,
        background=context.background,
    )
    credential_authenticator = CredentialAuthenticator(
        context.user_repository,
        password_manager,
        token_codec,
        token_store,
        account_provisioner,
        context.mail_dispatcher,
    )

    social_service_types = {
        Social.GOOGLE: GoogleAuthService,
        Social.FACEBOOK: FacebookAuthService,
        Social.GITHUB: GithubAuthService,
    }
    social_authenticator = SocialAuthenticator(
        {
            provider: service_type(
                context.identity_clients[provider],
                context.user_repository,
                account_provisioner,
            )
            for provider, service_type in social_service_types.items()
            if provider in context.identity_clients
        }
    )

    return AuthServices(
        context=context,
        password_manager=password_manager,
        token_codec=token_codec,
        token_store=token_store,
        account_provisioner=account_provisioner,
        credential_authenticator=credential_authenticator,
        social_authenticator=social_authenticator,
    )


@asynccontextmanager
async def open_auth_services(**overrides) -> AsyncGenerator[AuthServices, None]:
    """Open a database session and yield the services bound to it.

    Keyword arguments are forwarded to `build_auth_context`.
    """
    async with get_async_db() as session:
        yield build_auth_services(build_auth_context(session, **overrides))
