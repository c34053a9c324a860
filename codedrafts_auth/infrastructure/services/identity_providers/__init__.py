from codedrafts_auth.infrastructure.services.identity_providers.facebook import FacebookIdentityClient
from codedrafts_auth.infrastructure.services.identity_providers.github import GithubIdentityClient
from codedrafts_auth.infrastructure.services.identity_providers.google import GoogleIdentityClient

__all__ = ["FacebookIdentityClient", "GithubIdentityClient", "GoogleIdentityClient"]
