"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate

from .user import UserSchema


class LoginSchema(Schema):
    """Input payload for authenticating a user by username or email."""

    class Meta:
        unknown = EXCLUDE

    username = fields.String(load_default=None, allow_none=True, validate=validate.Length(max=50))
    email = fields.String(load_default=None, allow_none=True, validate=validate.Length(max=254))
    password = fields.String(load_default="", validate=validate.Length(max=128))


class RefreshTokenSchema(Schema):
    """Optional body for the refresh endpoint (the cookie is the fallback)."""

    class Meta:
        unknown = EXCLUDE

    refresh_token = fields.String(data_key="refreshToken", load_default=None, allow_none=True)


class TokenPairSchema(Schema):
    """Response payload containing both tokens."""

    access_token = fields.String(data_key="accessToken", required=True)
    refresh_token = fields.String(data_key="refreshToken", required=True)


class LoginResponseSchema(Schema):
    """Response payload for a successful login: the user plus both tokens."""

    user = fields.Nested(UserSchema, required=True)
    access_token = fields.String(data_key="accessToken", attribute="tokens.access_token")
    refresh_token = fields.String(data_key="refreshToken", attribute="tokens.refresh_token")
