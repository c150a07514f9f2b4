"""Composition root wiring storage, stores, and the settings registry."""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from tracker.core.config import Settings
from tracker.core.config import settings as default_settings
from tracker.core.logging import configure_logging, get_logger
from tracker.services.persistence import StateStorage, build_state_storage
from tracker.services.remote.client import RemoteTaskStore, build_remote_task_store
from tracker.services.settings_registry import SettingsRegistry, build_settings_registry
from tracker.services.stores import (
    ProjectStore,
    TaskStore,
    build_project_store,
    build_task_store,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class Tracker:
    """Store instances handed to consumers by reference."""

    tasks: TaskStore
    projects: ProjectStore
    settings: SettingsRegistry
    storage: StateStorage


def create_tracker(
    settings: Settings | None = None,
    *,
    storage: StateStorage | None = None,
) -> Tracker:
    """Build the stores over one shared storage backend."""
    resolved = settings or default_settings
    configure_logging(
        level=resolved.log_level,
        log_format=resolved.log_format,
        use_utc=resolved.log_use_utc,
    )
    backend = storage if storage is not None else build_state_storage(resolved)
    tracker = Tracker(
        tasks=build_task_store(backend),
        projects=build_project_store(backend),
        settings=build_settings_registry(backend),
        storage=backend,
    )
    logger.info(
        "tracker.started",
        extra={
            "storage_backend": type(backend).__name__,
            "tasks": len(tracker.tasks),
            "projects": len(tracker.projects),
        },
    )
    return tracker


def create_remote_task_store(
    settings: Settings | None = None,
    *,
    client: httpx.AsyncClient | None = None,
) -> RemoteTaskStore:
    return build_remote_task_store(settings or default_settings, client=client)
