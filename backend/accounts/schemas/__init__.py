"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import LoginResponseSchema, LoginSchema, RefreshTokenSchema, TokenPairSchema
from .user import ChangePasswordSchema, RegisterFormSchema, UpdateAccountSchema, UserSchema

__all__ = [
    "ChangePasswordSchema",
    "LoginResponseSchema",
    "LoginSchema",
    "RefreshTokenSchema",
    "RegisterFormSchema",
    "TokenPairSchema",
    "UpdateAccountSchema",
    "UserSchema",
]
