"""JSON file backend.

Prompts and resources are stored as the top-level ``prompts`` and
``resources`` arrays of the shared settings document. Every mutation runs
inside ``SettingsStore.edit()``, so creates, updates and deletes against the
same file (from either registry) are serialized within the process.
"""

import logging
import uuid
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel

from ..errors import DuplicateKeyError
from ..models import (
    BuiltinPrompt,
    BuiltinPromptCreate,
    BuiltinPromptUpdate,
    BuiltinResource,
    BuiltinResourceCreate,
    BuiltinResourceUpdate,
    apply_patch,
    coerce_payload,
    patch_fields,
    to_document,
)
from ..settings import SettingsDocument, SettingsStore, get_settings_store
from .base import PromptCreateData, PromptUpdateData, ResourceCreateData, ResourceUpdateData

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


class _DocumentCollection(Generic[RecordT]):
    """One top-level array of the settings document, viewed as records."""

    def __init__(
        self,
        store: SettingsStore,
        field: str,
        record_model: type[RecordT],
        create_model: type[BaseModel],
        update_model: type[BaseModel],
        kind: str,
        key_field: str,
    ):
        self.store = store
        self.field = field
        self.record_model = record_model
        self.create_model = create_model
        self.update_model = update_model
        self.kind = kind
        self.key_field = key_field

    def _records(self, document: SettingsDocument) -> list[RecordT]:
        return [self.record_model.model_validate(raw) for raw in getattr(document, self.field)]

    def _store_records(self, document: SettingsDocument, records: list[RecordT]) -> None:
        # Assign (never mutate in place) so the field is marked as set and saved
        setattr(document, self.field, [to_document(r) for r in records])

    def _key(self, record: RecordT) -> str:
        return getattr(record, self.key_field)

    async def find_all(self) -> list[RecordT]:
        return self._records(await self.store.load())

    async def find_enabled(self) -> list[RecordT]:
        return [r for r in await self.find_all() if r.enabled is not False]

    async def find_by_id(self, record_id: str) -> Optional[RecordT]:
        return next((r for r in await self.find_all() if r.id == record_id), None)

    async def find_by_key(self, key: str) -> Optional[RecordT]:
        return next((r for r in await self.find_all() if self._key(r) == key), None)

    async def create(self, data: Any) -> RecordT:
        payload = coerce_payload(self.create_model, data)
        fields = patch_fields(payload)
        key = fields[self.key_field]

        async with self.store.edit() as document:
            records = self._records(document)
            if any(self._key(r) == key for r in records):
                logger.warning(f"Rejected duplicate {self.kind} {self.key_field}: {key}")
                raise DuplicateKeyError(self.kind, self.key_field, key)

            record = self.record_model.model_validate(
                {"id": str(uuid.uuid4()), "enabled": True, **fields}
            )
            records.append(record)
            self._store_records(document, records)

        logger.info(f"Created builtin {self.kind} '{key}' ({record.id})")
        return record

    async def update(self, record_id: str, data: Any) -> Optional[RecordT]:
        changes = patch_fields(coerce_payload(self.update_model, data))

        async with self.store.edit() as document:
            records = self._records(document)
            index = next((i for i, r in enumerate(records) if r.id == record_id), None)
            if index is None:
                return None

            current = records[index]
            new_key = changes.get(self.key_field)
            if new_key and new_key != self._key(current):
                if any(self._key(r) == new_key for r in records):
                    logger.warning(f"Rejected duplicate {self.kind} {self.key_field}: {new_key}")
                    raise DuplicateKeyError(self.kind, self.key_field, new_key)

            records[index] = apply_patch(current, changes)
            self._store_records(document, records)

        logger.info(f"Updated builtin {self.kind} {record_id}: {sorted(changes)}")
        return records[index]

    async def delete(self, record_id: str) -> bool:
        async with self.store.edit() as document:
            records = self._records(document)
            remaining = [r for r in records if r.id != record_id]
            if len(remaining) == len(records):
                return False
            self._store_records(document, remaining)

        logger.info(f"Deleted builtin {self.kind} {record_id}")
        return True


class BuiltinPromptFileRegistry:
    """Prompt registry stored under ``prompts`` in the settings document."""

    def __init__(self, store: Optional[SettingsStore] = None):
        self._collection = _DocumentCollection(
            store or get_settings_store(),
            field="prompts",
            record_model=BuiltinPrompt,
            create_model=BuiltinPromptCreate,
            update_model=BuiltinPromptUpdate,
            kind="prompt",
            key_field="name",
        )

    async def find_all(self) -> list[BuiltinPrompt]:
        return await self._collection.find_all()

    async def find_enabled(self) -> list[BuiltinPrompt]:
        return await self._collection.find_enabled()

    async def find_by_id(self, prompt_id: str) -> Optional[BuiltinPrompt]:
        return await self._collection.find_by_id(prompt_id)

    async def find_by_name(self, name: str) -> Optional[BuiltinPrompt]:
        return await self._collection.find_by_key(name)

    async def find_by_key(self, key: str) -> Optional[BuiltinPrompt]:
        return await self.find_by_name(key)

    async def create(self, data: PromptCreateData) -> BuiltinPrompt:
        return await self._collection.create(data)

    async def update(self, prompt_id: str, data: PromptUpdateData) -> Optional[BuiltinPrompt]:
        return await self._collection.update(prompt_id, data)

    async def delete(self, prompt_id: str) -> bool:
        return await self._collection.delete(prompt_id)


class BuiltinResourceFileRegistry:
    """Resource registry stored under ``resources`` in the settings document."""

    def __init__(self, store: Optional[SettingsStore] = None):
        self._collection = _DocumentCollection(
            store or get_settings_store(),
            field="resources",
            record_model=BuiltinResource,
            create_model=BuiltinResourceCreate,
            update_model=BuiltinResourceUpdate,
            kind="resource",
            key_field="uri",
        )

    async def find_all(self) -> list[BuiltinResource]:
        return await self._collection.find_all()

    async def find_enabled(self) -> list[BuiltinResource]:
        return await self._collection.find_enabled()

    async def find_by_id(self, resource_id: str) -> Optional[BuiltinResource]:
        return await self._collection.find_by_id(resource_id)

    async def find_by_uri(self, uri: str) -> Optional[BuiltinResource]:
        return await self._collection.find_by_key(uri)

    async def find_by_key(self, key: str) -> Optional[BuiltinResource]:
        return await self.find_by_uri(key)

    async def create(self, data: ResourceCreateData) -> BuiltinResource:
        return await self._collection.create(data)

    async def update(
        self, resource_id: str, data: ResourceUpdateData
    ) -> Optional[BuiltinResource]:
        return await self._collection.update(resource_id, data)

    async def delete(self, resource_id: str) -> bool:
        return await self._collection.delete(resource_id)
