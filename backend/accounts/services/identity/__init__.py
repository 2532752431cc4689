from .dto import (
    ImageUpdateIn,
    UserPasswordChangeIn,
    UserPublicOut,
    UserUpdateIn,
)
from .service import IdentityService

__all__ = [
    "IdentityService",
    "ImageUpdateIn",
    "UserPasswordChangeIn",
    "UserPublicOut",
    "UserUpdateIn",
]
