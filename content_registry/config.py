"""Configuration management for the content registry."""

import os
from enum import StrEnum
from pathlib import Path

from dotenv import load_dotenv


# Load environment variables from .env file
def _find_env_file() -> Path | None:
    """Find the .env file, searching up the directory tree."""
    current = Path(__file__).parent
    for _ in range(5):  # Search up to 5 levels
        env_path = current / ".env"
        if env_path.exists():
            return env_path
        current = current.parent
    return None


_env_file = _find_env_file()
if _env_file:
    load_dotenv(_env_file)


class RegistryBackend(StrEnum):
    """Storage backends that can serve the registry."""
    FILE = "file"
    DATABASE = "database"


class Config:
    """Application configuration from environment variables."""

    # Backend selection (resolved once at process start by the registry facade)
    REGISTRY_BACKEND: str = os.getenv("REGISTRY_BACKEND", RegistryBackend.FILE).lower()

    # File backend: shared settings document
    SETTINGS_PATH: str = os.getenv("SETTINGS_PATH", "./settings.json")

    # Relational backend
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./content_registry.db")

    # Debug
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def validate(cls) -> list[str]:
        """Validate configuration, return list of issues."""
        issues = []

        known = [backend.value for backend in RegistryBackend]
        if cls.REGISTRY_BACKEND not in known:
            issues.append(
                f"Unknown REGISTRY_BACKEND '{cls.REGISTRY_BACKEND}'. "
                f"Expected one of: {', '.join(known)}"
            )

        return issues

    @classmethod
    def get_backend(cls) -> RegistryBackend:
        """Get the configured backend, raising on an unknown value."""
        return RegistryBackend(cls.REGISTRY_BACKEND)

    @classmethod
    def get_settings_path(cls) -> Path:
        return Path(cls.SETTINGS_PATH)
