"""Version 1 of the accounts HTTP API."""

from __future__ import annotations

from flask import Blueprint

from .health import bp as health_bp
from .users import bp as users_bp

API_VERSION = "v1"

# (blueprint, prefix below /api/v1)
REGISTRY: list[tuple[Blueprint, str]] = [
    (health_bp, ""),
    (users_bp, "/users"),
]
