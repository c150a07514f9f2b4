"""Application settings and environment configuration loading."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Self

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_ENV_FILE = PROJECT_ROOT / ".env"


class StorageBackend(str, Enum):
    """Supported backing stores for locally persisted state."""

    MEMORY = "memory"
    FILE = "file"
    REDIS = "redis"


class Settings(BaseSettings):
    """Typed runtime configuration sourced from environment variables."""

    model_config = SettingsConfigDict(
        env_file=[DEFAULT_ENV_FILE, ".env"],
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: str = "dev"

    # Local persistence
    storage_backend: StorageBackend = StorageBackend.FILE
    storage_dir: Path = Path(".tracker")
    storage_namespace: str = "tracker"
    redis_url: str = "redis://localhost:6379/0"

    # Remote collaborator (REST table endpoint)
    remote_base_url: str = ""
    remote_entity_set: str = "cr19f_tasks"
    remote_access_token: str = ""
    remote_timeout_seconds: float = Field(default=10.0, gt=0)

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"
    log_use_utc: bool = False

    @model_validator(mode="after")
    def _defaults(self) -> Self:
        self.remote_base_url = self.remote_base_url.strip().rstrip("/")
        self.storage_namespace = self.storage_namespace.strip() or "tracker"
        if self.storage_backend == StorageBackend.REDIS and not self.redis_url.strip():
            raise ValueError("REDIS_URL must be set when STORAGE_BACKEND=redis.")
        if self.log_format not in {"text", "json"}:
            raise ValueError("LOG_FORMAT must be one of: text, json.")
        return self


settings = Settings()
