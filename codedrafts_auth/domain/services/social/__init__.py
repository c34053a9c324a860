from codedrafts_auth.domain.services.social.facebook import FacebookAuthService
from codedrafts_auth.domain.services.social.github import GithubAuthService
from codedrafts_auth.domain.services.social.google import GoogleAuthService
from codedrafts_auth.domain.services.social.social_authenticator import SocialAuthenticator

__all__ = [
    "FacebookAuthService",
    "GithubAuthService",
    "GoogleAuthService",
    "SocialAuthenticator",
]
