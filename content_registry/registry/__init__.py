"""Registry access facade.

The active backend is resolved once (at ``init_registry()`` or on first
access) from ``Config.REGISTRY_BACKEND`` and cached for the life of the
process. Callers only ever see the two contract types.

Usage:
    from content_registry.registry import get_prompt_registry

    prompts = get_prompt_registry()
    created = await prompts.create({"name": "summarize", "template": "..."})
"""

import logging
from typing import Optional

from ..config import Config, RegistryBackend
from .base import PromptRegistry, ResourceRegistry
from .db_store import BuiltinPromptDbRegistry, BuiltinResourceDbRegistry
from .file_store import BuiltinPromptFileRegistry, BuiltinResourceFileRegistry

logger = logging.getLogger(__name__)

# Global registry instances
_backend: Optional[RegistryBackend] = None
_prompt_registry: Optional[PromptRegistry] = None
_resource_registry: Optional[ResourceRegistry] = None


def init_registry(backend: Optional[RegistryBackend] = None) -> RegistryBackend:
    """Select the backend and build both registries.

    Args:
        backend: Explicit backend. Defaults to Config.REGISTRY_BACKEND.

    Returns:
        The backend now in use.
    """
    global _backend, _prompt_registry, _resource_registry

    selected = RegistryBackend(backend) if backend else Config.get_backend()

    if selected is RegistryBackend.DATABASE:
        from ..db import init_db

        init_db()
        _prompt_registry = BuiltinPromptDbRegistry()
        _resource_registry = BuiltinResourceDbRegistry()
    else:
        # Both registries share the global settings store, and with it the write lock
        _prompt_registry = BuiltinPromptFileRegistry()
        _resource_registry = BuiltinResourceFileRegistry()

    _backend = selected
    logger.info(f"Content registry using '{selected}' backend")
    return selected


def get_backend() -> RegistryBackend:
    if _backend is None:
        init_registry()
    return _backend


def get_prompt_registry() -> PromptRegistry:
    """Get the prompt registry for the active backend."""
    if _prompt_registry is None:
        init_registry()
    return _prompt_registry


def get_resource_registry() -> ResourceRegistry:
    """Get the resource registry for the active backend."""
    if _resource_registry is None:
        init_registry()
    return _resource_registry


def reset_registry():
    """Forget the selected backend (useful for testing)."""
    global _backend, _prompt_registry, _resource_registry
    _backend = None
    _prompt_registry = None
    _resource_registry = None


__all__ = [
    "PromptRegistry",
    "ResourceRegistry",
    "BuiltinPromptFileRegistry",
    "BuiltinResourceFileRegistry",
    "BuiltinPromptDbRegistry",
    "BuiltinResourceDbRegistry",
    "init_registry",
    "get_backend",
    "get_prompt_registry",
    "get_resource_registry",
    "reset_registry",
]
