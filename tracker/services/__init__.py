"""Store, registry, view, and persistence services.

Prefer importing from this package when used by other modules.
"""

from tracker.services.entity_store import EntityStore, StoreState
from tracker.services.persistence import (
    FileStateStorage,
    MemoryStateStorage,
    PersistedSlot,
    RedisStateStorage,
    StateStorage,
)
from tracker.services.settings_registry import SettingsRegistry, build_settings_registry
from tracker.services.state import StateContainer
from tracker.services.stores import (
    ProjectStore,
    TaskStore,
    build_project_store,
    build_task_store,
)

__all__ = [
    "EntityStore",
    "FileStateStorage",
    "MemoryStateStorage",
    "PersistedSlot",
    "ProjectStore",
    "RedisStateStorage",
    "SettingsRegistry",
    "StateContainer",
    "StateStorage",
    "StoreState",
    "TaskStore",
    "build_project_store",
    "build_settings_registry",
    "build_task_store",
]
