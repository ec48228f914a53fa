"""Errors raised by the registry layer.

Only ``DuplicateKeyError`` (and ``PromptArgumentError`` for prompt rendering)
are raised by registry code itself. "Not found" is never an exception:
lookups return ``None``, deletes return ``False``.

Storage failures (disk, connection, malformed document) propagate as the
underlying library exception. ``BACKEND_FAILURES`` lists those types so the
HTTP layer can map them to a generic failure response.
"""

import json

from sqlalchemy.exc import SQLAlchemyError


class RegistryError(Exception):
    """Base class for errors raised by the registry."""


class DuplicateKeyError(RegistryError):
    """A create or key-changing update collided with an existing record."""

    _LABELS = {
        ("prompt", "name"): "name",
        ("resource", "uri"): "URI",
    }

    def __init__(self, kind: str, field: str, key: str):
        self.kind = kind
        self.field = field
        self.key = key
        label = self._LABELS.get((kind, field), field)
        super().__init__(f"Builtin {kind} with {label} '{key}' already exists")


class PromptArgumentError(RegistryError):
    """A required prompt argument was not supplied when rendering."""

    def __init__(self, prompt_name: str, missing: list[str]):
        self.prompt_name = prompt_name
        self.missing = missing
        super().__init__(
            f"Missing required argument(s) for prompt '{prompt_name}': {', '.join(missing)}"
        )


BACKEND_FAILURES = (OSError, json.JSONDecodeError, SQLAlchemyError)
