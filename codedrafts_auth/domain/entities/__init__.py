from codedrafts_auth.domain.entities.instructor_balance import InstructorBalance
from codedrafts_auth.domain.entities.token import Token, TokenType
from codedrafts_auth.domain.entities.user import Role, Social, User, UserSettings

__all__ = [
    "InstructorBalance",
    "Role",
    "Social",
    "Token",
    "TokenType",
    "User",
    "UserSettings",
]
