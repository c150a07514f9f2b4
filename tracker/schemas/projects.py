"""Schemas for project create/update payloads and list filters."""

from __future__ import annotations

from datetime import date
from typing import Self
from uuid import UUID

from pydantic import model_validator
from sqlmodel import Field, SQLModel

from tracker.core.time import utcnow
from tracker.models.projects import Project
from tracker.schemas.tasks import FILTER_ALL

_REQUIRED_TEXT_FIELDS = ("account_name", "category")
RUNTIME_ANNOTATION_TYPES = (date, UUID)


class ProjectCreate(SQLModel):
    """Payload for creating a project from the entry form."""

    account_name: str
    description: str = ""
    ssp: str = ""
    category: str
    product: str = ""
    start_date: date | None = None
    end_date: date | None = None
    related_tasks: list[UUID] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_required_text(self) -> Self:
        for field_name in _REQUIRED_TEXT_FIELDS:
            value = getattr(self, field_name).strip()
            if not value:
                raise ValueError(f"{field_name} is required")
            setattr(self, field_name, value)
        return self

    def build(self, *, priority: int) -> Project:
        now = utcnow()
        return Project(
            **self.model_dump(),
            priority=priority,
            created_at=now,
            updated_at=now,
        )


class ProjectUpdate(SQLModel):
    """Payload for partial project updates."""

    account_name: str | None = None
    description: str | None = None
    ssp: str | None = None
    category: str | None = None
    product: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    related_tasks: list[UUID] | None = None
    priority: int | None = None

    @model_validator(mode="after")
    def validate_required_text(self) -> Self:
        for field_name in _REQUIRED_TEXT_FIELDS:
            if field_name not in self.model_fields_set:
                continue
            value = getattr(self, field_name)
            if value is None or not value.strip():
                raise ValueError(f"{field_name} is required")
            setattr(self, field_name, value.strip())
        return self


class ProjectFilter(SQLModel):
    category: str = FILTER_ALL
    product: str = FILTER_ALL
