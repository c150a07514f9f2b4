"""Schemas for task create/update payloads and list filters."""

from __future__ import annotations

from datetime import date
from typing import Self
from uuid import UUID

from pydantic import model_validator
from sqlmodel import Field, SQLModel

from tracker.core.time import utcnow
from tracker.models.tasks import Task, TaskStatus

FILTER_ALL = "all"
_REQUIRED_TEXT_FIELDS = ("name", "customer", "category")
RUNTIME_ANNOTATION_TYPES = (date, UUID)


def _required_error(field_name: str) -> str:
    return f"{field_name} is required"


class TaskBase(SQLModel):
    """Shared task fields used by create payloads."""

    name: str
    customer: str
    category: str
    product: str = ""
    start_date: date | None = None
    due_date: date | None = None
    status: TaskStatus = TaskStatus.NOT_STARTED
    workload: float = Field(default=0, ge=0)
    related_tasks: list[UUID] = Field(default_factory=list)
    related_projects: list[UUID] = Field(default_factory=list)
    memo: str = ""


class TaskCreate(TaskBase):
    """Payload for creating a task from the entry form."""

    @model_validator(mode="after")
    def validate_required_text(self) -> Self:
        """Reject blank required text and store it stripped."""
        for field_name in _REQUIRED_TEXT_FIELDS:
            value = getattr(self, field_name).strip()
            if not value:
                raise ValueError(_required_error(field_name))
            setattr(self, field_name, value)
        return self

    def build(self, *, priority: int) -> Task:
        """Materialize a new task with a fresh id appended at `priority`."""
        now = utcnow()
        return Task(
            **self.model_dump(),
            priority=priority,
            created_at=now,
            updated_at=now,
        )


class TaskUpdate(SQLModel):
    """Payload for partial task updates."""

    name: str | None = None
    customer: str | None = None
    category: str | None = None
    product: str | None = None
    start_date: date | None = None
    due_date: date | None = None
    status: TaskStatus | None = None
    workload: float | None = Field(default=None, ge=0)
    related_tasks: list[UUID] | None = None
    related_projects: list[UUID] | None = None
    memo: str | None = None
    priority: int | None = None

    @model_validator(mode="after")
    def validate_required_text(self) -> Self:
        """Reject explicit null or blank values for required text fields."""
        for field_name in _REQUIRED_TEXT_FIELDS:
            if field_name not in self.model_fields_set:
                continue
            value = getattr(self, field_name)
            if value is None or not value.strip():
                raise ValueError(_required_error(field_name))
            setattr(self, field_name, value.strip())
        return self


class TaskFilter(SQLModel):
    """List filter selection; each field defaults to the "all" wildcard."""

    status: TaskStatus | str = FILTER_ALL
    category: str = FILTER_ALL
    product: str = FILTER_ALL
