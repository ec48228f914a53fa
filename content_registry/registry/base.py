"""Registry contract shared by every storage backend.

Backends satisfy these protocols structurally; they do not inherit from a
common base class. All methods are coroutines.

Semantics every backend must honour:
    - ``create`` raises ``DuplicateKeyError`` when the key is taken.
    - ``update`` returns ``None`` for an unknown id and raises
      ``DuplicateKeyError`` when the patch moves the key onto another
      record. The record's own current key never collides with itself.
    - ``delete`` returns whether a record was removed.
    - ``find_*`` return ``None`` on a miss and never raise for "not found".
    - Storage failures propagate unchanged.
"""

from typing import Any, Mapping, Optional, Protocol, Union, runtime_checkable

from ..models import (
    BuiltinPrompt,
    BuiltinPromptCreate,
    BuiltinPromptUpdate,
    BuiltinResource,
    BuiltinResourceCreate,
    BuiltinResourceUpdate,
)

PromptCreateData = Union[BuiltinPromptCreate, Mapping[str, Any]]
PromptUpdateData = Union[BuiltinPromptUpdate, Mapping[str, Any]]
ResourceCreateData = Union[BuiltinResourceCreate, Mapping[str, Any]]
ResourceUpdateData = Union[BuiltinResourceUpdate, Mapping[str, Any]]


@runtime_checkable
class PromptRegistry(Protocol):
    """Storage for built-in prompts, keyed by ``name``."""

    async def find_all(self) -> list[BuiltinPrompt]: ...

    async def find_enabled(self) -> list[BuiltinPrompt]: ...

    async def find_by_id(self, prompt_id: str) -> Optional[BuiltinPrompt]: ...

    async def find_by_name(self, name: str) -> Optional[BuiltinPrompt]: ...

    async def find_by_key(self, key: str) -> Optional[BuiltinPrompt]: ...

    async def create(self, data: PromptCreateData) -> BuiltinPrompt: ...

    async def update(
        self, prompt_id: str, data: PromptUpdateData
    ) -> Optional[BuiltinPrompt]: ...

    async def delete(self, prompt_id: str) -> bool: ...


@runtime_checkable
class ResourceRegistry(Protocol):
    """Storage for built-in resources, keyed by ``uri``."""

    async def find_all(self) -> list[BuiltinResource]: ...

    async def find_enabled(self) -> list[BuiltinResource]: ...

    async def find_by_id(self, resource_id: str) -> Optional[BuiltinResource]: ...

    async def find_by_uri(self, uri: str) -> Optional[BuiltinResource]: ...

    async def find_by_key(self, key: str) -> Optional[BuiltinResource]: ...

    async def create(self, data: ResourceCreateData) -> BuiltinResource: ...

    async def update(
        self, resource_id: str, data: ResourceUpdateData
    ) -> Optional[BuiltinResource]: ...

    async def delete(self, resource_id: str) -> bool: ...
