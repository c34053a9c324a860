from codedrafts_auth.infrastructure.repositories.token_repository import TokenRepository
from codedrafts_auth.infrastructure.repositories.user_repository import UserRepository

__all__ = ["TokenRepository", "UserRepository"]
