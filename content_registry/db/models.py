"""SQLAlchemy database models for the content registry."""

import uuid
from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


class BuiltinPromptRow(Base):
    """A built-in prompt. ``name`` is the external key."""

    __tablename__ = "builtin_prompts"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(255), nullable=False, unique=True)
    title = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    template = Column(Text, nullable=False)
    arguments = Column(JSON, nullable=True)  # [{"name", "title", "description", "required"}]
    enabled = Column(Boolean, nullable=False, default=True)

    # Engine-maintained, never exposed through the registry
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


class BuiltinResourceRow(Base):
    """A built-in resource. ``uri`` is the external key."""

    __tablename__ = "builtin_resources"

    id = Column(String(36), primary_key=True, default=_new_id)
    uri = Column(String(1024), nullable=False, unique=True)
    name = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    mime_type = Column(String(255), nullable=True)
    content = Column(Text, nullable=False)
    enabled = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
