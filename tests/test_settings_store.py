"""Tests for the settings document store."""

import asyncio
import json
import time

import pytest

from content_registry.config import Config
from content_registry.settings import (
    SettingsDocument,
    SettingsStore,
    get_settings_store,
    reset_settings_store,
)


class TestLoadSave:
    async def test_load_missing_file_returns_empty_document(self, settings_store):
        document = await settings_store.load()
        assert document.prompts == []
        assert document.resources == []

    async def test_save_and_reload(self, settings_store, settings_path):
        document = SettingsDocument(prompts=[{"id": "1", "name": "p", "template": "t"}])
        await settings_store.save(document)

        reloaded = await settings_store.load()
        assert reloaded.prompts == [{"id": "1", "name": "p", "template": "t"}]
        assert json.loads(settings_path.read_text())["prompts"][0]["name"] == "p"

    async def test_untouched_arrays_are_not_written(self, settings_store, settings_path):
        settings_path.write_text(json.dumps({"other": 1}))

        async with settings_store.edit() as document:
            document.prompts = [{"id": "1", "name": "p", "template": "t"}]

        data = json.loads(settings_path.read_text())
        assert data == {"other": 1, "prompts": [{"id": "1", "name": "p", "template": "t"}]}

    async def test_no_temp_file_left_behind(self, settings_store, settings_path):
        async with settings_store.edit() as document:
            document.resources = []

        assert [p.name for p in settings_path.parent.iterdir()] == ["settings.json"]


class TestEditCriticalSection:
    async def test_exception_skips_save(self, settings_store, settings_path):
        settings_path.write_text(json.dumps({"prompts": []}))

        with pytest.raises(RuntimeError):
            async with settings_store.edit() as document:
                document.prompts = [{"id": "x", "name": "x", "template": "x"}]
                raise RuntimeError("boom")

        assert json.loads(settings_path.read_text()) == {"prompts": []}

    async def test_edits_are_serialized(self, settings_store):
        order = []

        async def bump(tag):
            async with settings_store.edit() as document:
                order.append(f"{tag}:start")
                current = list(document.prompts)
                await asyncio.sleep(0.01)  # suspension point inside the section
                current.append({"id": tag, "name": tag, "template": "t"})
                document.prompts = current
                order.append(f"{tag}:end")

        await asyncio.gather(bump("a"), bump("b"), bump("c"))

        document = await settings_store.load()
        assert sorted(p["id"] for p in document.prompts) == ["a", "b", "c"]
        # No section started before the previous one ended
        for i in range(0, len(order), 2):
            assert order[i].endswith(":start")
            assert order[i + 1].endswith(":end")
            assert order[i].split(":")[0] == order[i + 1].split(":")[0]


class TestGlobalStore:
    def test_singleton_uses_configured_path(self, monkeypatch, tmp_path):
        monkeypatch.setattr(Config, "SETTINGS_PATH", str(tmp_path / "custom.json"))
        reset_settings_store()

        store = get_settings_store()
        assert store is get_settings_store()
        assert store.path == tmp_path / "custom.json"

    def test_explicit_path_wins(self, tmp_path):
        store = SettingsStore(tmp_path / "explicit.json")
        assert store.path == tmp_path / "explicit.json"


class TestAbandonedEdits:
    async def test_timed_out_save_lands_before_next_edit(self, settings_store, monkeypatch):
        write = settings_store._write
        calls = []

        def slow_first_write(document):
            calls.append(document)
            if len(calls) == 1:
                time.sleep(0.3)
            write(document)

        monkeypatch.setattr(settings_store, "_write", slow_first_write)

        async def add(tag):
            async with settings_store.edit() as document:
                document.prompts = [*document.prompts, {"id": tag, "name": tag, "template": "t"}]

        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(add("a"), 0.05)
        await add("b")

        document = await settings_store.load()
        assert [p["id"] for p in document.prompts] == ["a", "b"]
        assert len(calls) == 2

    async def test_unchanged_document_is_not_written(self, settings_store, settings_path):
        async with settings_store.edit() as document:
            assert document.prompts == []

        assert not settings_path.exists()

    async def test_temp_files_are_unique_per_write(self, settings_store, settings_path):
        await asyncio.gather(*(
            settings_store.save(SettingsDocument(prompts=[{"id": str(i)}])) for i in range(10)
        ))

        assert [p.name for p in settings_path.parent.iterdir()] == ["settings.json"]
        assert len((await settings_store.load()).prompts) == 1
