"""Account endpoints: registration, session lifecycle and profile management."""

from __future__ import annotations

from flask import Blueprint, current_app, request
from flask_jwt_extended import set_access_cookies, set_refresh_cookies, unset_jwt_cookies

from accounts.api.deps import (
    auth_service,
    current_user,
    identity_service,
    json_response,
    registration_service,
    require_auth,
    staged_uploads,
    timing,
)
from accounts.schemas import (
    ChangePasswordSchema,
    LoginResponseSchema,
    LoginSchema,
    RefreshTokenSchema,
    RegisterFormSchema,
    TokenPairSchema,
    UpdateAccountSchema,
    UserSchema,
)
from accounts.services.auth import LoginIn, LogoutIn, RefreshIn, TokenPairOut
from accounts.services.identity import ImageUpdateIn, UserPasswordChangeIn, UserUpdateIn
from accounts.services.registration import UserRegistrationIn

bp = Blueprint("users", __name__)

register_schema = RegisterFormSchema()
login_schema = LoginSchema()
login_response_schema = LoginResponseSchema()
refresh_schema = RefreshTokenSchema()
token_schema = TokenPairSchema()
change_password_schema = ChangePasswordSchema()
update_account_schema = UpdateAccountSchema()
user_schema = UserSchema()


def _with_token_cookies(response, pair: TokenPairOut):
    set_access_cookies(response, pair.access_token)
    set_refresh_cookies(response, pair.refresh_token)
    return response


# ------------------------------ Public routes ------------------------------


@bp.post("/register")
@timing
def register():
    """Create an account from a multipart form with ``avatar``/``coverImage`` files."""

    with staged_uploads("avatar", "coverImage") as files:
        form = register_schema.load(request.form)
        dto = UserRegistrationIn(
            full_name=form["full_name"],
            email=form["email"],
            username=form["username"],
            password=form["password"],
            avatar=files["avatar"],
            cover_image=files["coverImage"],
        )
        user = registration_service().register(dto)
    return json_response({"data": user_schema.dump(user)}, status=201)


@bp.post("/login")
@timing
def login():
    """Verify credentials, issue a token pair and set both cookies."""

    data = login_schema.load(request.get_json(silent=True) or {})
    out = auth_service().login(
        LoginIn(password=data["password"], username=data["username"], email=data["email"])
    )
    response = json_response({"data": login_response_schema.dump(out)})
    return _with_token_cookies(response, out.tokens)


@bp.post("/refresh-token")
@timing
def refresh_token():
    """Rotate the refresh token (body ``refreshToken`` first, then the cookie)."""

    body = refresh_schema.load(request.get_json(silent=True) or {})
    cookie_name = current_app.config.get("JWT_REFRESH_COOKIE_NAME", "refreshToken")
    presented = body["refresh_token"] or request.cookies.get(cookie_name)
    pair = auth_service().refresh(RefreshIn(refresh_token=presented))
    response = json_response({"data": token_schema.dump(pair)})
    return _with_token_cookies(response, pair)


# ------------------------------ Authenticated routes ------------------------------


@bp.post("/logout")
@require_auth
@timing
def logout():
    """Clear the stored refresh token and both cookies."""

    auth_service().logout(LogoutIn(user_id=current_user().id))
    response = json_response({"data": {}})
    unset_jwt_cookies(response)
    return response


@bp.post("/change-password")
@require_auth
@timing
def change_password():
    """Replace the password after verifying the current one."""

    data = change_password_schema.load(request.get_json(silent=True) or {})
    identity_service().change_password(
        UserPasswordChangeIn(
            user_id=current_user().id,
            old_password=data["old_password"],
            new_password=data["new_password"],
        )
    )
    return json_response({"data": {}})


@bp.get("/current-user")
@require_auth
@timing
def get_current_user():
    """Return the authenticated user's public view."""

    return json_response({"data": user_schema.dump(current_user())})


@bp.patch("/update-account")
@require_auth
@timing
def update_account():
    """Update ``fullName`` and/or ``email``."""

    data = update_account_schema.load(request.get_json(silent=True) or {})
    user = identity_service().update_profile(
        current_user().id, UserUpdateIn(full_name=data["full_name"], email=data["email"])
    )
    return json_response({"data": user_schema.dump(user)})


@bp.patch("/avatar")
@require_auth
@timing
def update_avatar():
    with staged_uploads("avatar") as files:
        user = identity_service().update_avatar(
            ImageUpdateIn(user_id=current_user().id, image=files["avatar"])
        )
    return json_response({"data": user_schema.dump(user)})


@bp.patch("/cover-image")
@require_auth
@timing
def update_cover_image():
    with staged_uploads("coverImage") as files:
        user = identity_service().update_cover_image(
            ImageUpdateIn(user_id=current_user().id, image=files["coverImage"])
        )
    return json_response({"data": user_schema.dump(user)})
