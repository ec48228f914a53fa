"""Tests specific to the JSON file backend.

Validates:
1. Persisted layout matches the record shapes verbatim
2. Unrelated settings survive registry writes
3. Interleaved coroutines never lose writes or both win a key
4. Records without an ``enabled`` field count as enabled
"""

import asyncio
import json
import time

import pytest

from content_registry.errors import DuplicateKeyError
from content_registry.registry import BuiltinPromptFileRegistry, BuiltinResourceFileRegistry


@pytest.fixture
def prompts(settings_store):
    return BuiltinPromptFileRegistry(settings_store)


@pytest.fixture
def resources(settings_store):
    return BuiltinResourceFileRegistry(settings_store)


def _read(path):
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


class TestPersistedLayout:
    async def test_records_written_under_top_level_arrays(self, prompts, resources, settings_path):
        prompt = await prompts.create({"name": "summarize", "template": "Summarize: {{text}}"})
        resource = await resources.create(
            {"uri": "res://a", "content": "hi", "mimeType": "text/markdown"}
        )

        data = _read(settings_path)
        assert data["prompts"] == [
            {"id": prompt.id, "enabled": True, "name": "summarize", "template": "Summarize: {{text}}"}
        ]
        assert data["resources"] == [
            {
                "id": resource.id,
                "enabled": True,
                "uri": "res://a",
                "content": "hi",
                "mimeType": "text/markdown",
            }
        ]

    async def test_absent_optional_fields_stay_absent_after_update(self, prompts, settings_path):
        created = await prompts.create({"name": "p", "template": "t"})
        await prompts.update(created.id, {"description": "d"})

        stored = _read(settings_path)["prompts"][0]
        assert stored["description"] == "d"
        assert "title" not in stored
        assert "arguments" not in stored

    async def test_unrelated_settings_preserved(self, prompts, resources, settings_path):
        settings_path.write_text(json.dumps({
            "mcpServers": {"fetch": {"command": "uvx", "args": ["mcp-server-fetch"]}},
            "systemConfig": {"routing": {"enableGlobalRoute": True}},
        }))

        created = await prompts.create({"name": "p", "template": "t"})
        await resources.create({"uri": "res://a", "content": "hi"})
        await prompts.delete(created.id)

        data = _read(settings_path)
        assert data["mcpServers"] == {"fetch": {"command": "uvx", "args": ["mcp-server-fetch"]}}
        assert data["systemConfig"] == {"routing": {"enableGlobalRoute": True}}
        assert data["prompts"] == []
        assert len(data["resources"]) == 1

    async def test_hand_written_record_without_enabled_is_enabled(self, prompts, settings_path):
        settings_path.write_text(json.dumps({
            "prompts": [{"id": "p1", "name": "manual", "template": "t"}],
        }))

        enabled = await prompts.find_enabled()
        assert [p.name for p in enabled] == ["manual"]
        assert enabled[0].enabled is True

    async def test_missing_file_reads_as_empty(self, prompts, settings_path):
        assert not settings_path.exists()
        assert await prompts.find_all() == []
        assert await prompts.find_by_name("anything") is None


class TestBackendFailures:
    async def test_malformed_document_propagates(self, prompts, settings_path):
        settings_path.write_text("{ not json")

        with pytest.raises(json.JSONDecodeError):
            await prompts.find_all()

        with pytest.raises(json.JSONDecodeError):
            await prompts.create({"name": "p", "template": "t"})

        # Never overwritten with an empty document
        assert settings_path.read_text() == "{ not json"


class TestSerializedWrites:
    async def test_concurrent_duplicate_creates_one_wins(self, prompts):
        results = await asyncio.gather(
            prompts.create({"name": "race", "template": "a"}),
            prompts.create({"name": "race", "template": "b"}),
            return_exceptions=True,
        )

        errors = [r for r in results if isinstance(r, Exception)]
        assert len(errors) == 1
        assert isinstance(errors[0], DuplicateKeyError)
        assert len([p for p in await prompts.find_all() if p.name == "race"]) == 1

    async def test_concurrent_creates_across_kinds_keep_every_write(self, prompts, resources):
        await asyncio.gather(
            *(prompts.create({"name": f"p{i}", "template": "t"}) for i in range(10)),
            *(resources.create({"uri": f"res://{i}", "content": "c"}) for i in range(10)),
        )

        assert len(await prompts.find_all()) == 10
        assert len(await resources.find_all()) == 10

    async def test_failed_write_releases_lock(self, prompts):
        await prompts.create({"name": "dup", "template": "t"})

        with pytest.raises(DuplicateKeyError):
            await prompts.create({"name": "dup", "template": "t"})

        # A later call is not blocked and sees a consistent store
        created = await asyncio.wait_for(prompts.create({"name": "next", "template": "t"}), 5)
        assert created.name == "next"
        assert {p.name for p in await prompts.find_all()} == {"dup", "next"}

    async def test_timed_out_create_does_not_lose_later_write(
        self, prompts, settings_store, monkeypatch
    ):
        write = settings_store._write
        calls = []

        def slow_first_write(document):
            calls.append(document)
            if len(calls) == 1:
                time.sleep(0.3)
            write(document)

        monkeypatch.setattr(settings_store, "_write", slow_first_write)

        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(prompts.create({"name": "a", "template": "t"}), 0.05)
        created = await prompts.create({"name": "b", "template": "t"})

        assert [p.name for p in await prompts.find_all()] == ["a", "b"]
        assert (await prompts.find_by_id(created.id)).name == "b"


class TestNoOpMutations:
    async def test_misses_do_not_create_the_file(self, prompts, resources, settings_path):
        assert await prompts.update("missing", {"title": "x"}) is None
        assert await prompts.delete("missing") is False
        assert await resources.delete("missing") is False

        assert not settings_path.exists()

    async def test_misses_do_not_rewrite_the_file(self, prompts, settings_path):
        settings_path.write_text('{"prompts": [], "other": true}')

        await prompts.update("missing", {"title": "x"})
        await prompts.delete("missing")

        assert settings_path.read_text() == '{"prompts": [], "other": true}'
