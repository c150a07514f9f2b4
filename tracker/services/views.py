"""Pure list and calendar projections computed from store snapshots."""

from __future__ import annotations

import calendar
from collections.abc import Iterable, Sequence
from datetime import date, datetime, timedelta
from typing import TypeVar
from uuid import UUID

from sqlmodel import SQLModel

from tracker.models.projects import Project
from tracker.models.tasks import Task, TaskStatus
from tracker.schemas.projects import ProjectFilter
from tracker.schemas.tasks import FILTER_ALL, TaskFilter

E = TypeVar("E", bound=SQLModel)
ID = TypeVar("ID", UUID, str)


def _matches(selected: object, value: object) -> bool:
    return selected is None or selected == FILTER_ALL or selected == value


def filter_tasks(
    tasks: Iterable[Task],
    spec: TaskFilter | None = None,
    *,
    status: TaskStatus | str | None = None,
    category: str | None = None,
    product: str | None = None,
) -> list[Task]:
    """Keep tasks whose fields equal every non-wildcard filter value.

    Keyword arguments override the corresponding field of `spec`.
    """
    spec = spec or TaskFilter()
    status = spec.status if status is None else status
    category = spec.category if category is None else category
    product = spec.product if product is None else product
    return [
        task
        for task in tasks
        if _matches(status, task.status)
        and _matches(category, task.category)
        and _matches(product, task.product)
    ]


def filter_projects(
    projects: Iterable[Project],
    spec: ProjectFilter | None = None,
    *,
    category: str | None = None,
    product: str | None = None,
) -> list[Project]:
    spec = spec or ProjectFilter()
    category = spec.category if category is None else category
    product = spec.product if product is None else product
    return [
        project
        for project in projects
        if _matches(category, project.category) and _matches(product, project.product)
    ]


def sort_by_priority(entities: Iterable[E]) -> list[E]:
    return sorted(entities, key=lambda e: e.priority)  # type: ignore[attr-defined]


def sort_for_display(tasks: Iterable[Task]) -> list[Task]:
    """Completed tasks sink to the bottom; each group ascends by priority."""
    return sorted(tasks, key=lambda t: (t.status == TaskStatus.COMPLETED, t.priority))


def moved_order(ids: Sequence[ID], active_id: ID, over_id: ID) -> list[ID]:
    """Return `ids` with `active_id` moved into the slot held by `over_id`."""
    order = list(ids)
    if active_id == over_id or active_id not in order or over_id not in order:
        return order
    old_index = order.index(active_id)
    new_index = order.index(over_id)
    moved = order.pop(old_index)
    order.insert(new_index, moved)
    return order


# -------------------- calendar --------------------
def _as_date(value: date | datetime | None) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    return value


def _span(entity: Task | Project) -> tuple[date | None, date | None]:
    end = entity.due_date if isinstance(entity, Task) else entity.end_date
    return _as_date(entity.start_date), _as_date(end)


def is_active_on(entity: Task | Project, day: date | datetime) -> bool:
    """True when `start <= day <= end`; entities missing either bound never match."""
    start, end = _span(entity)
    if start is None or end is None:
        return False
    target = day.date() if isinstance(day, datetime) else day
    return start <= target <= end


def tasks_active_on(tasks: Iterable[Task], day: date | datetime) -> list[Task]:
    """Tasks active on `day`, ascending by priority."""
    return sort_by_priority(task for task in tasks if is_active_on(task, day))


def calendar_days(year: int, month: int, *, week_start: int = calendar.SUNDAY) -> list[date]:
    """All days shown in a month grid, padded to whole weeks.

    `week_start` uses the `calendar` module weekday numbers (MONDAY=0 .. SUNDAY=6).
    """
    first = date(year, month, 1)
    last = date(year, month, calendar.monthrange(year, month)[1])
    lead = (first.weekday() - week_start) % 7
    week_end = (week_start + 6) % 7
    trail = (week_end - last.weekday()) % 7
    start = first - timedelta(days=lead)
    total = (last - start).days + 1 + trail
    return [start + timedelta(days=offset) for offset in range(total)]


def build_calendar_index(
    tasks: Iterable[Task],
    year: int,
    month: int,
    *,
    week_start: int = calendar.SUNDAY,
) -> dict[date, list[Task]]:
    """Map every grid day to the tasks active on it, in grid order."""
    snapshot = list(tasks)
    return {
        day: tasks_active_on(snapshot, day)
        for day in calendar_days(year, month, week_start=week_start)
    }
