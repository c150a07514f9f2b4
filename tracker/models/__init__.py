"""Entity model exports."""

from tracker.models.projects import Project
from tracker.models.settings import DEFAULT_CATEGORIES, DEFAULT_PRODUCTS, Language, SettingsState
from tracker.models.tasks import Task, TaskStatus

__all__ = [
    "DEFAULT_CATEGORIES",
    "DEFAULT_PRODUCTS",
    "Language",
    "Project",
    "SettingsState",
    "Task",
    "TaskStatus",
]
