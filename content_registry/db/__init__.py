"""Relational storage: SQLAlchemy models and session management."""

from .models import Base, BuiltinPromptRow, BuiltinResourceRow
from .session import (
    get_engine,
    get_session,
    get_session_factory,
    init_db,
    reset_engine,
)

__all__ = [
    "Base",
    "BuiltinPromptRow",
    "BuiltinResourceRow",
    "get_engine",
    "get_session",
    "get_session_factory",
    "init_db",
    "reset_engine",
]
