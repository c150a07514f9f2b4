"""Task entity representing a tracked unit of customer work."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from tracker.core.time import utcnow

RUNTIME_ANNOTATION_TYPES = (date, datetime, UUID)


class TaskStatus(str, Enum):
    """Lifecycle states a task moves through."""

    NOT_STARTED = "NotStarted"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    ON_HOLD = "OnHold"


class Task(SQLModel):
    """Ordered task entity with free-text vocabulary fields and ID relations."""

    id: UUID = Field(default_factory=uuid4)
    name: str
    customer: str
    # Free text: categories/products removed from settings must stay representable.
    category: str
    product: str = ""
    start_date: date | None = None
    due_date: date | None = None
    status: TaskStatus = TaskStatus.NOT_STARTED
    workload: float = Field(default=0, ge=0)
    related_tasks: list[UUID] = Field(default_factory=list)
    related_projects: list[UUID] = Field(default_factory=list)
    memo: str = ""
    priority: int = 0

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
