"""Relational (SQLAlchemy) backend.

Each kind lives in its own table with a unique index on the key column.
Duplicates are caught by a pre-check; the unique constraint is the backstop
when two writers race past the pre-check, and its ``IntegrityError`` is
translated into the same ``DuplicateKeyError``.

Session work is synchronous SQLAlchemy and runs in the default executor.
"""

import asyncio
import logging
from functools import partial
from typing import Any, Callable, Generic, Optional, TypeVar

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session as SQLAlchemySession
from sqlalchemy.orm import sessionmaker

from ..db import BuiltinPromptRow, BuiltinResourceRow, get_session
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
)
from .base import PromptCreateData, PromptUpdateData, ResourceCreateData, ResourceUpdateData

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


def _prompt_columns(record: BuiltinPrompt) -> dict[str, Any]:
    return {
        "name": record.name,
        "title": record.title,
        "description": record.description,
        "template": record.template,
        "arguments": (
            [arg.model_dump(exclude_unset=True) for arg in record.arguments]
            if record.arguments is not None
            else None
        ),
        "enabled": record.enabled,
    }


def _prompt_from_row(row: BuiltinPromptRow) -> BuiltinPrompt:
    return BuiltinPrompt.model_validate({
        "id": row.id,
        "name": row.name,
        "title": row.title,
        "description": row.description,
        "template": row.template,
        "arguments": row.arguments,
        "enabled": row.enabled,
    })


def _resource_columns(record: BuiltinResource) -> dict[str, Any]:
    return {
        "uri": record.uri,
        "name": record.name,
        "description": record.description,
        "mime_type": record.mime_type,
        "content": record.content,
        "enabled": record.enabled,
    }


def _resource_from_row(row: BuiltinResourceRow) -> BuiltinResource:
    return BuiltinResource.model_validate({
        "id": row.id,
        "uri": row.uri,
        "name": row.name,
        "description": row.description,
        "mime_type": row.mime_type,
        "content": row.content,
        "enabled": row.enabled,
    })


class _TableCollection(Generic[RecordT]):
    """CRUD over one registry table, returning pydantic records."""

    def __init__(
        self,
        session_factory: Optional[sessionmaker],
        row_model: type,
        record_model: type[RecordT],
        create_model: type[BaseModel],
        update_model: type[BaseModel],
        to_columns: Callable[[RecordT], dict[str, Any]],
        from_row: Callable[[Any], RecordT],
        kind: str,
        key_field: str,
    ):
        self.session_factory = session_factory
        self.row_model = row_model
        self.record_model = record_model
        self.create_model = create_model
        self.update_model = update_model
        self.to_columns = to_columns
        self.from_row = from_row
        self.kind = kind
        self.key_field = key_field

    async def _run(self, fn, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(fn, *args))

    @property
    def _key_column(self):
        return getattr(self.row_model, self.key_field)

    def _find_row_by_key(self, session: SQLAlchemySession, key: str):
        return session.execute(
            select(self.row_model).where(self._key_column == key)
        ).scalar_one_or_none()

    def _key_exists(self, key: str) -> bool:
        with get_session(self.session_factory) as session:
            found = session.execute(
                select(self.row_model.id).where(self._key_column == key)
            ).first()
            return found is not None

    def _translate_integrity_error(self, error: IntegrityError, key: str) -> None:
        """Raise DuplicateKeyError if the failed write collided on the key."""
        if key and self._key_exists(key):
            logger.warning(f"Unique constraint rejected {self.kind} {self.key_field}: {key}")
            raise DuplicateKeyError(self.kind, self.key_field, key) from error

    # --- Reads ---

    def _find_all_sync(self, enabled_only: bool) -> list[RecordT]:
        with get_session(self.session_factory) as session:
            query = select(self.row_model)
            if enabled_only:
                query = query.where(self.row_model.enabled.is_(True))
            query = query.order_by(self.row_model.created_at.asc())
            return [self.from_row(row) for row in session.execute(query).scalars()]

    def _find_by_id_sync(self, record_id: str) -> Optional[RecordT]:
        with get_session(self.session_factory) as session:
            row = session.get(self.row_model, record_id)
            return self.from_row(row) if row else None

    def _find_by_key_sync(self, key: str) -> Optional[RecordT]:
        with get_session(self.session_factory) as session:
            row = self._find_row_by_key(session, key)
            return self.from_row(row) if row else None

    async def find_all(self) -> list[RecordT]:
        return await self._run(self._find_all_sync, False)

    async def find_enabled(self) -> list[RecordT]:
        return await self._run(self._find_all_sync, True)

    async def find_by_id(self, record_id: str) -> Optional[RecordT]:
        return await self._run(self._find_by_id_sync, record_id)

    async def find_by_key(self, key: str) -> Optional[RecordT]:
        return await self._run(self._find_by_key_sync, key)

    # --- Writes ---

    def _create_sync(self, fields: dict[str, Any]) -> RecordT:
        key = fields[self.key_field]
        # Validate the full record before touching the database
        candidate = self.record_model.model_validate({"id": "", "enabled": True, **fields})

        try:
            with get_session(self.session_factory) as session:
                if self._find_row_by_key(session, key) is not None:
                    logger.warning(f"Rejected duplicate {self.kind} {self.key_field}: {key}")
                    raise DuplicateKeyError(self.kind, self.key_field, key)

                row = self.row_model(**self.to_columns(candidate))
                session.add(row)
                session.flush()
                record = self.from_row(row)
        except IntegrityError as e:
            self._translate_integrity_error(e, key)
            raise

        logger.info(f"Created builtin {self.kind} '{key}' ({record.id})")
        return record

    def _update_sync(self, record_id: str, changes: dict[str, Any]) -> Optional[RecordT]:
        new_key = changes.get(self.key_field)

        try:
            with get_session(self.session_factory) as session:
                row = session.get(self.row_model, record_id)
                if row is None:
                    return None

                if new_key and new_key != getattr(row, self.key_field):
                    other = self._find_row_by_key(session, new_key)
                    if other is not None and other.id != record_id:
                        logger.warning(
                            f"Rejected duplicate {self.kind} {self.key_field}: {new_key}"
                        )
                        raise DuplicateKeyError(self.kind, self.key_field, new_key)

                merged = apply_patch(self.from_row(row), changes)
                columns = self.to_columns(merged)
                for field in changes:
                    setattr(row, field, columns[field])
                session.flush()
                record = self.from_row(row)
        except IntegrityError as e:
            self._translate_integrity_error(e, new_key)
            raise

        logger.info(f"Updated builtin {self.kind} {record_id}: {sorted(changes)}")
        return record

    def _delete_sync(self, record_id: str) -> bool:
        with get_session(self.session_factory) as session:
            affected = (
                session.query(self.row_model)
                .filter(self.row_model.id == record_id)
                .delete(synchronize_session=False)
            )

        if affected:
            logger.info(f"Deleted builtin {self.kind} {record_id}")
        return affected > 0

    async def create(self, data: Any) -> RecordT:
        fields = patch_fields(coerce_payload(self.create_model, data))
        return await self._run(self._create_sync, fields)

    async def update(self, record_id: str, data: Any) -> Optional[RecordT]:
        changes = patch_fields(coerce_payload(self.update_model, data))
        return await self._run(self._update_sync, record_id, changes)

    async def delete(self, record_id: str) -> bool:
        return await self._run(self._delete_sync, record_id)


class BuiltinPromptDbRegistry:
    """Prompt registry stored in the ``builtin_prompts`` table."""

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self._collection = _TableCollection(
            session_factory,
            row_model=BuiltinPromptRow,
            record_model=BuiltinPrompt,
            create_model=BuiltinPromptCreate,
            update_model=BuiltinPromptUpdate,
            to_columns=_prompt_columns,
            from_row=_prompt_from_row,
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


class BuiltinResourceDbRegistry:
    """Resource registry stored in the ``builtin_resources`` table."""

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self._collection = _TableCollection(
            session_factory,
            row_model=BuiltinResourceRow,
            record_model=BuiltinResource,
            create_model=BuiltinResourceCreate,
            update_model=BuiltinResourceUpdate,
            to_columns=_resource_columns,
            from_row=_resource_from_row,
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
