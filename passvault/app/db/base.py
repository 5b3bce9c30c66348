# passvault/app/db/base.py
"""
SQLAlchemy declarative base.

All ORM models inherit from Base; the engine and session helpers are
re-exported from db/session.py so callers can import everything
database-related from one place.
"""
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass


from passvault.app.db.session import (  # noqa: E402
    create_engine_for,
    create_session_factory,
    get_db,
)

__all__ = [
    "Base",
    "create_engine_for",
    "create_session_factory",
    "get_db",
]
