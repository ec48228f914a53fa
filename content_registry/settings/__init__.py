"""Settings document package: the shared JSON file behind the file backend."""

from .models import SettingsDocument
from .store import SettingsStore, get_settings_store, reset_settings_store

__all__ = [
    "SettingsDocument",
    "SettingsStore",
    "get_settings_store",
    "reset_settings_store",
]
