"""User resource schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate


class RegisterFormSchema(Schema):
    """Text fields of the multipart registration form.

    Blank or missing values load as empty strings; the registration service
    rejects them with a 400 so every required-field failure looks the same.
    """

    class Meta:
        unknown = EXCLUDE

    full_name = fields.String(data_key="fullName", load_default="", validate=validate.Length(max=100))
    email = fields.String(load_default="", validate=validate.Length(max=254))
    username = fields.String(load_default="", validate=validate.Length(max=50))
    password = fields.String(load_default="", validate=validate.Length(max=128))


class ChangePasswordSchema(Schema):
    """Payload for changing the authenticated user's password."""

    class Meta:
        unknown = EXCLUDE

    old_password = fields.String(data_key="oldPassword", load_default="")
    new_password = fields.String(data_key="newPassword", load_default="", validate=validate.Length(max=128))


class UpdateAccountSchema(Schema):
    """Payload for updating profile fields."""

    class Meta:
        unknown = EXCLUDE

    full_name = fields.String(
        data_key="fullName", load_default=None, allow_none=True, validate=validate.Length(max=100)
    )
    email = fields.String(load_default=None, allow_none=True, validate=validate.Length(max=254))


class UserSchema(Schema):
    """Public representation of a user entity."""

    id = fields.Integer(required=True)
    username = fields.String(required=True)
    email = fields.String(required=True)
    full_name = fields.String(data_key="fullName", required=True)
    avatar_url = fields.String(data_key="avatar", required=True)
    cover_image_url = fields.String(data_key="coverImage", allow_none=True)
    created_at = fields.DateTime(data_key="createdAt", allow_none=True)
    updated_at = fields.DateTime(data_key="updatedAt", allow_none=True)
