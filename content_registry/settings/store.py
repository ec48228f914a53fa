"""Settings persistence store backing the file registry."""

import asyncio
import json
import logging
import os
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

from ..config import Config
from .models import SettingsDocument

logger = logging.getLogger(__name__)


class SettingsStore:
    """Persists the shared settings document to a JSON file.

    The store is a handle to one file owned by this process. Reads always go
    to disk; nothing is cached between calls. All writers must go through
    ``edit()``, which holds an in-process lock for the whole
    load-modify-save cycle so interleaved coroutines never work from a
    stale snapshot. Multiple processes writing the same file are not
    supported.
    """

    def __init__(self, settings_path: Optional[Path] = None):
        """Initialize the settings store.

        Args:
            settings_path: Path to settings file. Defaults to Config.SETTINGS_PATH.
        """
        self._path = Path(settings_path) if settings_path else Config.get_settings_path()
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    async def load(self) -> SettingsDocument:
        """Read the document from disk.

        Returns:
            SettingsDocument instance (empty if the file does not exist)
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._read)

    async def save(self, document: SettingsDocument) -> None:
        """Write the whole document back to disk.

        Prefer ``edit()``; calling this directly bypasses the write lock.

        Cancelling the caller does not abandon the write: the executor
        thread cannot be stopped, so this waits for the file to be in place
        before letting the cancellation through.
        """
        loop = asyncio.get_running_loop()
        write = loop.run_in_executor(None, self._write, document)
        try:
            await asyncio.shield(write)
        except asyncio.CancelledError:
            await write
            raise

    @asynccontextmanager
    async def edit(self) -> AsyncIterator[SettingsDocument]:
        """Critical section for a load-modify-save cycle.

        Usage:
            async with store.edit() as document:
                document.prompts = [...]

        The document is saved only if the block exits cleanly and assigned
        something. The lock is released on every exit path, and never while
        a save is still running.
        """
        async with self._lock:
            document = await self.load()
            before = document.model_dump(exclude_unset=True)
            yield document
            if document.model_dump(exclude_unset=True) != before:
                await self.save(document)

    def _read(self) -> SettingsDocument:
        if not self._path.exists():
            logger.debug(f"Settings file {self._path} not found, starting empty")
            return SettingsDocument()

        # A malformed file propagates; never substitute an empty document
        with open(self._path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return SettingsDocument.model_validate(data)

    def _write(self, document: SettingsDocument) -> None:
        data = document.model_dump(exclude_unset=True)
        self._path.parent.mkdir(parents=True, exist_ok=True)

        # Write beside the target, then swap in
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self._path)
        except Exception:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise


# Global store instance
_store: Optional[SettingsStore] = None


def get_settings_store() -> SettingsStore:
    """Get the global settings store instance."""
    global _store
    if _store is None:
        _store = SettingsStore()
    return _store


def reset_settings_store():
    """Reset the global settings store (useful for testing)."""
    global _store
    _store = None
