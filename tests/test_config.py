# ruff: noqa: INP001
"""Settings validation tests for storage, remote, and logging configuration."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from tracker.core.config import Settings, StorageBackend


def test_redis_backend_requires_url() -> None:
    with pytest.raises(ValidationError, match="REDIS_URL must be set when STORAGE_BACKEND=redis"):
        Settings(
            _env_file=None,
            storage_backend=StorageBackend.REDIS,
            redis_url="  ",
        )


def test_remote_base_url_drops_trailing_slash() -> None:
    settings = Settings(
        _env_file=None,
        remote_base_url=" https://example.crm.dynamics.com/api/data/v9.2/ ",
    )

    assert settings.remote_base_url == "https://example.crm.dynamics.com/api/data/v9.2"


def test_log_format_must_be_known() -> None:
    with pytest.raises(ValidationError, match="LOG_FORMAT must be one of: text, json"):
        Settings(_env_file=None, log_format="xml")


def test_remote_timeout_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, remote_timeout_seconds=0)


def test_backend_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STORAGE_BACKEND", "redis")
    monkeypatch.setenv("STORAGE_NAMESPACE", " ")

    settings = Settings(_env_file=None)

    assert settings.storage_backend == StorageBackend.REDIS
    assert settings.storage_namespace == "tracker"


def test_storage_dir_defaults_to_working_directory() -> None:
    settings = Settings(_env_file=None)

    assert settings.storage_dir == Path(".tracker")
    assert not settings.storage_dir.is_absolute()
