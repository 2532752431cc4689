"""Flask application factory for the accounts API."""

from __future__ import annotations

import logging

from flask import Flask

from accounts.core import cors, errors, extensions, proxy
from accounts.core.config import BaseConfig, get_config
from accounts.core.logger import configure_logging
from accounts.core.logger import init_app as init_logging

log = logging.getLogger(__name__)


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build the accounts application.

    :param config: Config class, object or ``APP_ENV``-style name; ``None``
        selects from the environment.
    :param instance_relative_config: Also read ``instance/<filename>``.
    :param instance_config_filename: Instance config file name.
    :returns: Configured application.
    :rtype: flask.Flask
    :raises TokenConfigError: When a token secret or lifetime is unusable.
    :raises RuntimeError: When the media backend is unknown or lacks credentials.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    settings = get_config(config) if config is None or isinstance(config, str) else config
    app.config.from_object(settings)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    # Request wrapping order: proxy headers first so Secure cookies see https
    proxy.init_app(app)
    extensions.init_app(app)
    init_logging(app)
    cors.init_app(app)

    from accounts.api import init_app as init_api

    init_api(app)
    errors.init_app(app)

    log.info(
        "app.created env=%s media=%s",
        app.config.get("ENV_NAME", "unknown"),
        app.config.get("OBJECT_STORE_BACKEND", "memory"),
    )
    return app
