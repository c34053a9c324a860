from codedrafts_auth.domain.value_objects.social_profile import SocialProfile
from codedrafts_auth.domain.value_objects.token_claims import AccessToken, TokenClaims

__all__ = ["AccessToken", "SocialProfile", "TokenClaims"]
