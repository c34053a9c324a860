"""Explicit wiring of the collaborators the authentication services need."""

from dataclasses import dataclass, field
from typing import Dict

from codedrafts_auth.domain.entities.user import Social
from codedrafts_auth.domain.interfaces.repositories import ITokenRepository, IUserRepository
from codedrafts_auth.domain.interfaces.services import (
    IIdentityProviderClient,
    IMailDispatcher,
    ISigningKeyProvider,
)
from codedrafts_auth.utils.background import BackgroundDispatcher


@dataclass
class AuthContext:
    """Everything one authentication flow talks to outside the domain.

    Built per database session by
    `codedrafts_auth.infrastructure.dependency_injection.auth_dependencies.build_auth_context`
    and passed to each service at construction.

    Attributes:
        user_repository: Users, settings and balances of the current session.
        token_repository: Token rows of the current session.
        mail_dispatcher: Delivers verification and reset emails.
        key_provider: Token signing keys.
        identity_clients: One identity provider client per social provider.
        background: Runs fire-and-forget side effects.
    """

    user_repository: IUserRepository
    token_repository: ITokenRepository
    mail_dispatcher: IMailDispatcher
    key_provider: ISigningKeyProvider
    identity_clients: Dict[Social, IIdentityProviderClient] = field(default_factory=dict)
    background: BackgroundDispatcher = field(default_factory=BackgroundDispatcher)
