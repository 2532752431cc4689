"""Factory Boy helpers wired to the project's SQLAlchemy session."""

from __future__ import annotations

import factory
from accounts.core.extensions import db


def current_session():
    """Return the Flask-scoped session of the active app context."""
    return db.session


class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Base class persisting through the Flask-scoped session.

    Objects are committed so services running their own units of work see
    them, exactly as rows written by an earlier request.
    """

    class Meta:
        abstract = True
        sqlalchemy_session_factory = current_session
        sqlalchemy_session_persistence = "commit"
