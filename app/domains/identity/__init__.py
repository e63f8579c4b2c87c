from app.domains.identity.entities import User, Profile, GUEST_LABEL
from app.domains.identity.schemas import (
    UserCreate, UserLogin, UserResponse, Token, PasswordChange,
    PasswordResetRequest, PasswordResetConfirm, ProfileUpdate, ProfileResponse
)
from app.domains.identity.services import IdentityService

__all__ = [
    "User", "Profile", "GUEST_LABEL",
    "UserCreate", "UserLogin", "UserResponse", "Token", "PasswordChange",
    "PasswordResetRequest", "PasswordResetConfirm", "ProfileUpdate", "ProfileResponse",
    "IdentityService"
]
