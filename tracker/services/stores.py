"""Task and project store instantiations and their persistence bindings."""

from __future__ import annotations

from tracker.models.projects import Project
from tracker.models.tasks import Task
from tracker.schemas.projects import ProjectCreate
from tracker.schemas.tasks import TaskCreate
from tracker.services.entity_store import EntityStore
from tracker.services.migrations import collection_v1_to_v2
from tracker.services.persistence import PersistedSlot, StateStorage

TASK_STORAGE_KEY = "task-storage"
PROJECT_STORAGE_KEY = "project-storage"
ENTITY_SCHEMA_VERSION = 2


class TaskStore(EntityStore[Task, TaskCreate]):
    """Ordered task collection."""

    model = Task
    create_schema = TaskCreate
    entity_name = "task"
    collection_key = "tasks"


class ProjectStore(EntityStore[Project, ProjectCreate]):
    """Ordered project collection."""

    model = Project
    create_schema = ProjectCreate
    entity_name = "project"
    collection_key = "projects"


def task_slot(storage: StateStorage) -> PersistedSlot:
    return PersistedSlot(
        storage,
        TASK_STORAGE_KEY,
        version=ENTITY_SCHEMA_VERSION,
        migrations={1: collection_v1_to_v2(TaskStore.collection_key)},
    )


def project_slot(storage: StateStorage) -> PersistedSlot:
    return PersistedSlot(
        storage,
        PROJECT_STORAGE_KEY,
        version=ENTITY_SCHEMA_VERSION,
        migrations={1: collection_v1_to_v2(ProjectStore.collection_key)},
    )


def build_task_store(storage: StateStorage | None = None) -> TaskStore:
    """Create a task store, persisted when `storage` is given."""
    return TaskStore(slot=task_slot(storage) if storage is not None else None)


def build_project_store(storage: StateStorage | None = None) -> ProjectStore:
    """Create a project store, persisted when `storage` is given."""
    return ProjectStore(slot=project_slot(storage) if storage is not None else None)
