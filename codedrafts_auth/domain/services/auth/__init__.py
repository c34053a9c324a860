from codedrafts_auth.domain.services.auth.account_provisioner import AccountProvisioner
from codedrafts_auth.domain.services.auth.credential_authenticator import CredentialAuthenticator
from codedrafts_auth.domain.services.auth.password_manager import PasswordManager
from codedrafts_auth.domain.services.auth.token_codec import TokenCodec
from codedrafts_auth.domain.services.auth.token_store import TokenStore

__all__ = [
    "AccountProvisioner",
    "CredentialAuthenticator",
    "PasswordManager",
    "TokenCodec",
    "TokenStore",
]
