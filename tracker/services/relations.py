"""Render-time resolution of task/project ID references.

Relations are plain ID lists without referential integrity: deleting an
entity leaves references to it in place, and resolution simply skips them.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, TypeVar
from uuid import UUID

from sqlmodel import SQLModel

if TYPE_CHECKING:
    from tracker.models.projects import Project
    from tracker.models.tasks import Task
    from tracker.services.entity_store import EntityStore

E = TypeVar("E", bound=SQLModel)


def resolve_ids(ids: Iterable[UUID | str], store: EntityStore[E, SQLModel]) -> list[E]:
    """Look up each id in reference order, dropping ids with no match."""
    resolved: list[E] = []
    for entity_id in ids:
        entity = store.get_by_id(entity_id)
        if entity is not None:
            resolved.append(entity)
    return resolved


def dangling_references(
    ids: Iterable[UUID | str],
    store: EntityStore[E, SQLModel],
) -> list[UUID | str]:
    """Return the referenced ids that no longer resolve."""
    return [entity_id for entity_id in ids if store.get_by_id(entity_id) is None]


def resolve_related_tasks(task: Task, store: EntityStore[Task, SQLModel]) -> list[Task]:
    return resolve_ids(task.related_tasks, store)


def resolve_related_projects(
    task: Task,
    store: EntityStore[Project, SQLModel],
) -> list[Project]:
    return resolve_ids(task.related_projects, store)


def tasks_for_project(project: Project, store: EntityStore[Task, SQLModel]) -> list[Task]:
    return resolve_ids(project.related_tasks, store)


def relation_candidates(
    store: EntityStore[E, SQLModel],
    exclude_id: UUID | str | None = None,
) -> list[E]:
    """Entities a task may be linked to, excluding the task being edited."""
    excluded = store.get_by_id(exclude_id) if exclude_id is not None else None
    return [
        entity
        for entity in store.list()
        if excluded is None or entity.id != excluded.id  # type: ignore[attr-defined]
    ]
