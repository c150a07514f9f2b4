"""Project entity grouping customer engagements and their tasks."""

from __future__ import annotations

from datetime import date, datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from tracker.core.time import utcnow

RUNTIME_ANNOTATION_TYPES = (date, datetime, UUID)


class Project(SQLModel):
    """Ordered project entity; relates to tasks only."""

    id: UUID = Field(default_factory=uuid4)
    account_name: str
    description: str = ""
    ssp: str = ""
    category: str
    product: str = ""
    start_date: date | None = None
    end_date: date | None = None
    related_tasks: list[UUID] = Field(default_factory=list)
    priority: int = 0

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
