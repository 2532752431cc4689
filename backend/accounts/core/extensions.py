"""Global Flask extension instances and initialization helpers."""

from __future__ import annotations

from typing import cast

from flask import Flask, current_app
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import MetaData

from accounts.services._shared.ports import ObjectStore, PasswordHasher, TokenProvider

# Global naming convention for all constraints
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)

# Global singletons (import-safe)
db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
migrate = Migrate(render_as_batch=True)
jwt = JWTManager()

TOKEN_PROVIDER_KEY = "accounts.token_provider"
PASSWORD_HASHER_KEY = "accounts.password_hasher"
OBJECT_STORE_KEY = "accounts.object_store"


def init_app(app: Flask) -> None:
    """Initialize SQLAlchemy, migrations, JWT cookie support and collaborators.

    Parameters
    ----------
    app: flask.Flask
        Application used to bind extension instances. This call imports the
        :mod:`accounts.models` package to ensure SQLAlchemy metadata is ready
        for migrations.

    Raises
    ------
    TokenConfigError
        When a token secret is missing; the process must not start.
    RuntimeError
        When the configured media backend is unknown or lacks credentials.
    """
    db.init_app(app)

    # Ensure models are imported so Alembic sees metadata
    from accounts import models as _models  # noqa: F401

    migrate.init_app(app, db)
    jwt.init_app(app)

    from accounts.infra.jwt.pyjwt_token_provider import JWTTokenProvider
    from accounts.infra.media.cloudinary_object_store import build_object_store
    from accounts.infra.security.werkzeug_password_hasher import WerkzeugPasswordHasher

    app.extensions[TOKEN_PROVIDER_KEY] = JWTTokenProvider.from_config(app.config)
    app.extensions[PASSWORD_HASHER_KEY] = WerkzeugPasswordHasher(
        method=app.config.get("PASSWORD_HASH_METHOD", "scrypt")
    )
    app.extensions[OBJECT_STORE_KEY] = build_object_store(app.config)


def get_token_provider() -> TokenProvider:
    """Return the token provider bound to the current application."""
    return cast(TokenProvider, current_app.extensions[TOKEN_PROVIDER_KEY])


def get_password_hasher() -> PasswordHasher:
    """Return the password hasher bound to the current application."""
    return cast(PasswordHasher, current_app.extensions[PASSWORD_HASHER_KEY])


def get_object_store() -> ObjectStore:
    """Return the media object store bound to the current application."""
    return cast(ObjectStore, current_app.extensions[OBJECT_STORE_KEY])
