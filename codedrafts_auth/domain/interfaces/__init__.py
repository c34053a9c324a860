from codedrafts_auth.domain.interfaces.repositories import ITokenRepository, IUserRepository
from codedrafts_auth.domain.interfaces.services import (
    IIdentityProviderClient,
    IMailDispatcher,
    ISigningKeyProvider,
    ISocialAuthService,
)

__all__ = [
    "IIdentityProviderClient",
    "IMailDispatcher",
    "ISigningKeyProvider",
    "ISocialAuthService",
    "ITokenRepository",
    "IUserRepository",
]
