"""Tests for backend selection through the registry facade."""

import pytest

from content_registry.config import Config, RegistryBackend
from content_registry.registry import (
    BuiltinPromptDbRegistry,
    BuiltinPromptFileRegistry,
    BuiltinResourceDbRegistry,
    BuiltinResourceFileRegistry,
    get_backend,
    get_prompt_registry,
    get_resource_registry,
    init_registry,
)


class TestBackendSelection:
    def test_file_backend_from_config(self, monkeypatch, settings_path):
        monkeypatch.setattr(Config, "REGISTRY_BACKEND", "file")
        monkeypatch.setattr(Config, "SETTINGS_PATH", str(settings_path))

        assert get_backend() is RegistryBackend.FILE
        assert isinstance(get_prompt_registry(), BuiltinPromptFileRegistry)
        assert isinstance(get_resource_registry(), BuiltinResourceFileRegistry)

    def test_database_backend_from_config(self, monkeypatch):
        monkeypatch.setattr(Config, "REGISTRY_BACKEND", "database")
        monkeypatch.setattr(Config, "DATABASE_URL", "sqlite:///:memory:")

        assert init_registry() is RegistryBackend.DATABASE
        assert isinstance(get_prompt_registry(), BuiltinPromptDbRegistry)
        assert isinstance(get_resource_registry(), BuiltinResourceDbRegistry)

    def test_selection_is_cached(self, monkeypatch, settings_path):
        monkeypatch.setattr(Config, "REGISTRY_BACKEND", "file")
        monkeypatch.setattr(Config, "SETTINGS_PATH", str(settings_path))
        first = get_prompt_registry()

        monkeypatch.setattr(Config, "REGISTRY_BACKEND", "database")
        assert get_prompt_registry() is first
        assert get_backend() is RegistryBackend.FILE

    def test_unknown_backend_rejected(self, monkeypatch):
        monkeypatch.setattr(Config, "REGISTRY_BACKEND", "redis")

        assert Config.validate()
        with pytest.raises(ValueError):
            init_registry()


class TestFacadeEndToEnd:
    async def test_database_registries_share_one_database(self, monkeypatch):
        monkeypatch.setattr(Config, "DATABASE_URL", "sqlite:///:memory:")
        init_registry(RegistryBackend.DATABASE)

        created = await get_prompt_registry().create({"name": "p", "template": "t"})
        await get_resource_registry().create({"uri": "res://r", "content": "c"})

        assert (await get_prompt_registry().find_by_id(created.id)).name == "p"
        assert len(await get_resource_registry().find_all()) == 1

    async def test_file_registries_share_one_document(self, monkeypatch, settings_path):
        monkeypatch.setattr(Config, "SETTINGS_PATH", str(settings_path))
        init_registry(RegistryBackend.FILE)

        await get_prompt_registry().create({"name": "p", "template": "t"})
        await get_resource_registry().create({"uri": "res://r", "content": "c"})

        text = settings_path.read_text()
        assert '"prompts"' in text and '"resources"' in text
