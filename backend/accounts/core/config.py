"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from datetime import timedelta
from typing import Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

# Loads .env in development (no-op when the file is missing)
load_dotenv()

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhdw]?)\s*$", re.IGNORECASE)
_DURATION_UNITS: Final[dict[str, str]] = {
    "": "seconds",
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
    "w": "weeks",
}


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def parse_duration(value: str | int | timedelta) -> timedelta:
    """Parse an expiry setting such as ``"15m"``, ``"1d"`` or ``"3600"``.

    Parameters
    ----------
    value: str | int | timedelta
        Raw setting. Integers and bare digit strings are seconds; a trailing
        ``s``/``m``/``h``/``d``/``w`` selects the unit.

    Returns
    -------
    timedelta
        Positive duration.

    Raises
    ------
    ValueError
        When the value cannot be parsed or is not positive.
    """
    if isinstance(value, timedelta):
        delta = value
    elif isinstance(value, int):
        delta = timedelta(seconds=value)
    else:
        match = _DURATION_RE.match(str(value))
        if not match:
            raise ValueError(f"Invalid duration: {value!r}")
        amount, unit = match.groups()
        delta = timedelta(**{_DURATION_UNITS[unit.lower()]: int(amount)})
    if delta <= timedelta(0):
        raise ValueError(f"Duration must be positive: {value!r}")
    return delta


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret used for session signing.
    ACCESS_TOKEN_SECRET / REFRESH_TOKEN_SECRET: str | None
        Independent signing secrets for access and refresh JWTs. Both must be
        present at startup; the application refuses to boot otherwise.
    ACCESS_TOKEN_EXPIRY / REFRESH_TOKEN_EXPIRY: str
        Token lifetimes (``"1d"``, ``"10d"``, ``"15m"``...).
    JWT_ACCESS_COOKIE_NAME / JWT_REFRESH_COOKIE_NAME: str
        Cookie names used by ``flask-jwt-extended`` when setting/clearing
        token cookies.
    JWT_COOKIE_SAMESITE: str
        ``SameSite`` attribute of both token cookies (default ``"Lax"``), so
        cross-site POSTs to the cookie-authenticated logout and refresh
        routes carry no cookies.
    PASSWORD_HASH_METHOD: str
        ``werkzeug.security`` hashing method (cost factor included).
    REVOKE_SESSIONS_ON_PASSWORD_CHANGE: bool
        Clear the stored refresh token when the password changes.
    OBJECT_STORE_BACKEND: str
        ``"cloudinary"`` or ``"memory"``.
    UPLOAD_TEMP_DIR: str
        Directory where multipart uploads are staged before being sent to
        the media host.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    ACCESS_TOKEN_SECRET = os.getenv("ACCESS_TOKEN_SECRET")
    ACCESS_TOKEN_EXPIRY = os.getenv("ACCESS_TOKEN_EXPIRY", "1d")
    REFRESH_TOKEN_SECRET = os.getenv("REFRESH_TOKEN_SECRET")
    REFRESH_TOKEN_EXPIRY = os.getenv("REFRESH_TOKEN_EXPIRY", "10d")
    TOKEN_ALGORITHM = os.getenv("TOKEN_ALGORITHM", "HS256")
    PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "scrypt")
    REVOKE_SESSIONS_ON_PASSWORD_CHANGE = env_bool("REVOKE_SESSIONS_ON_PASSWORD_CHANGE", True)

    # Cookie transport (flask-jwt-extended helpers)
    JWT_SECRET_KEY = ACCESS_TOKEN_SECRET
    JWT_TOKEN_LOCATION = ["headers", "cookies"]
    JWT_ACCESS_COOKIE_NAME = "accessToken"
    JWT_REFRESH_COOKIE_NAME = "refreshToken"
    JWT_COOKIE_SECURE = True
    JWT_COOKIE_CSRF_PROTECT = False
    JWT_COOKIE_SAMESITE = os.getenv("JWT_COOKIE_SAMESITE", "Lax")

    # Media host
    OBJECT_STORE_BACKEND = os.getenv("OBJECT_STORE_BACKEND", "cloudinary")
    CLOUDINARY_CLOUD_NAME = os.getenv("CLOUDINARY_CLOUD_NAME")
    CLOUDINARY_API_KEY = os.getenv("CLOUDINARY_API_KEY")
    CLOUDINARY_API_SECRET = os.getenv("CLOUDINARY_API_SECRET")
    CLOUDINARY_FOLDER = os.getenv("CLOUDINARY_FOLDER")
    CLOUDINARY_UPLOAD_TIMEOUT = float(os.getenv("CLOUDINARY_UPLOAD_TIMEOUT", "30"))
    UPLOAD_TEMP_DIR = os.getenv("UPLOAD_TEMP_DIR", "./public/temp")
    MAX_CONTENT_LENGTH = 10 * 1024 * 1024

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")

    ENV_NAME = "base"

    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Ships placeholder token secrets and the in-memory media store so the app
    boots without any external account.
    """

    ENV_NAME = "development"
    DEBUG = env_bool("FLASK_DEBUG", True)
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    CORS_MAX_AGE = 600  # 10 minutes
    ACCESS_TOKEN_SECRET = os.getenv("ACCESS_TOKEN_SECRET", "dev-access-secret")
    REFRESH_TOKEN_SECRET = os.getenv("REFRESH_TOKEN_SECRET", "dev-refresh-secret")
    JWT_SECRET_KEY = ACCESS_TOKEN_SECRET
    JWT_COOKIE_SECURE = env_bool("JWT_COOKIE_SECURE", True)
    OBJECT_STORE_BACKEND = os.getenv("OBJECT_STORE_BACKEND", "memory")


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Uses a cheap password hash method and the in-memory media store.
    """

    ENV_NAME = "testing"
    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    PROPAGATE_EXCEPTIONS = True
    ACCESS_TOKEN_SECRET = "test-access-secret"
    REFRESH_TOKEN_SECRET = "test-refresh-secret"
    JWT_SECRET_KEY = ACCESS_TOKEN_SECRET
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"
    OBJECT_STORE_BACKEND = "memory"
    USE_PROXYFIX = False


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Token secrets and media credentials have no defaults here: they must come
    from the environment.
    """

    ENV_NAME = "production"
    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config(name: str | None = None) -> type[BaseConfig]:
    """Return the configuration class for ``name``, or inferred from ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        Class to pass to :meth:`flask.Config.from_object`.

    Notes
    -----
    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    key = (name or os.getenv(ENV_VAR, "development")).strip().lower()
    return CONFIG_MAP.get(key, DevelopmentConfig)
