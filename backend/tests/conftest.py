"""Pytest fixtures building an isolated application per test.

Each test gets a fresh Flask app bound to its own in-memory SQLite database
(schema created and dropped around the test), the in-memory media store and
a temporary upload staging directory.
"""

from __future__ import annotations

import os

import pytest
from accounts.core.config import TestingConfig
from accounts.core.extensions import db as _db
from accounts.core.extensions import get_object_store, get_password_hasher, get_token_provider
from accounts.factory import create_app


class TestConfig(TestingConfig):
    """Testing configuration for creating the Flask app.

    Notes
    -----
    - Uses an in-memory SQLite database for speed.
    - Uses the in-memory object store; nothing leaves the process.
    """

    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    OBJECT_STORE_BACKEND = "memory"
    CORS_ORIGINS = "http://localhost:5173"


@pytest.fixture()
def app(tmp_path):
    """Create a Flask application configured for testing.

    Yields
    ------
    flask.Flask
        Application with an active app context and an empty ``users`` table.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    app = create_app(TestConfig, instance_relative_config=False)
    app.config["UPLOAD_TEMP_DIR"] = str(tmp_path / "uploads")
    app.logger.setLevel("WARNING")
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture()
def db(app):
    """Database extension bound to the testing application."""
    return _db


@pytest.fixture()
def session(db):
    """The Flask-scoped session used by repositories and units of work."""
    return db.session


@pytest.fixture()
def client(app):
    """Test client without a cookie jar, so each request states its own cookies."""
    return app.test_client(use_cookies=False)


@pytest.fixture()
def token_provider(app):
    return get_token_provider()


@pytest.fixture()
def password_hasher(app):
    return get_password_hasher()


@pytest.fixture()
def object_store(app):
    """The application's :class:`InMemoryObjectStore`."""
    return get_object_store()


@pytest.fixture()
def upload_dir(app):
    """Path where multipart uploads are staged during a request."""
    from pathlib import Path

    return Path(app.config["UPLOAD_TEMP_DIR"])


@pytest.fixture()
def image_file(tmp_path):
    """Factory writing a small fake image to disk and returning a ``LocalFile``."""
    from accounts.services._shared.ports import LocalFile

    def _make(name: str = "avatar.png", content: bytes = b"\x89PNG fake") -> LocalFile:
        path = tmp_path / name
        path.write_bytes(content)
        return LocalFile(path=path, filename=name, content_type="image/png")

    return _make


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk
