"""
Shared test fixtures for the content registry test suite.

Provides:
- settings_store: SettingsStore on a temp JSON file
- session_factory: in-memory SQLite with both registry tables
- prompt_registry / resource_registry: parametrized over both backends,
  so contract tests run once per backend
"""

import os

import pytest

# Set test environment BEFORE any content_registry imports
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("REGISTRY_BACKEND", "file")

from sqlalchemy.orm import sessionmaker

import content_registry.db.session as session_module
from content_registry.db.models import Base
from content_registry.db.session import build_engine
from content_registry.registry import (
    BuiltinPromptDbRegistry,
    BuiltinPromptFileRegistry,
    BuiltinResourceDbRegistry,
    BuiltinResourceFileRegistry,
    reset_registry,
)
from content_registry.settings import SettingsStore, reset_settings_store

BACKENDS = ["file", "database"]


@pytest.fixture(autouse=True)
def reset_globals():
    """Make sure no test sees another test's singletons."""
    reset_registry()
    reset_settings_store()
    session_module.reset_engine()
    yield
    reset_registry()
    reset_settings_store()
    session_module.reset_engine()


@pytest.fixture
def settings_path(tmp_path):
    """Path to a settings file that does not exist yet."""
    return tmp_path / "settings.json"


@pytest.fixture
def settings_store(settings_path):
    """Fresh SettingsStore on a temp file."""
    return SettingsStore(settings_path)


@pytest.fixture
def engine():
    """In-memory SQLite engine with all registry tables."""
    engine = build_engine("sqlite:///:memory:")
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(params=BACKENDS)
def backend(request):
    return request.param


@pytest.fixture
def prompt_registry(backend, settings_store, session_factory):
    """Prompt registry for the current backend."""
    if backend == "file":
        return BuiltinPromptFileRegistry(settings_store)
    return BuiltinPromptDbRegistry(session_factory)


@pytest.fixture
def resource_registry(backend, settings_store, session_factory):
    """Resource registry for the current backend."""
    if backend == "file":
        return BuiltinResourceFileRegistry(settings_store)
    return BuiltinResourceDbRegistry(session_factory)


@pytest.fixture
def summarize_prompt():
    """Creation payload for a fully populated prompt."""
    return {
        "name": "summarize",
        "title": "Summarize",
        "description": "Summarize text",
        "template": "Please summarize: {{text}}",
        "arguments": [{"name": "text", "required": True}],
        "enabled": True,
    }


@pytest.fixture
def intro_resource():
    """Creation payload for a fully populated resource."""
    return {
        "uri": "resource://docs/intro",
        "name": "Intro",
        "description": "Introduction",
        "mimeType": "text/plain",
        "content": "hello",
        "enabled": True,
    }
