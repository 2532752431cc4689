"""Health check endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from accounts.api.deps import json_response, timing
from accounts.core.extensions import db

bp = Blueprint("health", __name__)


@bp.get("/health")
@timing
def healthcheck():
    """Report liveness plus database reachability."""

    db_ok = True
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        current_app.logger.exception("healthcheck.db_error")
        db_ok = False
    finally:
        db.session.rollback()
    payload = {
        "status": "ok" if db_ok else "degraded",
        "db": "ok" if db_ok else "fail",
        "version": current_app.config.get("APP_VERSION", "dev"),
    }
    return json_response({"data": payload}, status=200 if db_ok else 503)
