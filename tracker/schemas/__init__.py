"""Public schema exports shared by stores and callers."""

from tracker.schemas.projects import ProjectCreate, ProjectFilter, ProjectUpdate
from tracker.schemas.tasks import FILTER_ALL, TaskCreate, TaskFilter, TaskUpdate

__all__ = [
    "FILTER_ALL",
    "ProjectCreate",
    "ProjectFilter",
    "ProjectUpdate",
    "TaskCreate",
    "TaskFilter",
    "TaskUpdate",
]
