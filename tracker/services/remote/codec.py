"""Translation between remote table records and in-memory tasks.

The remote table stores category and status as integer choice codes and uses
`cr19f_`-prefixed column names. Relations are not stored remotely.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

from sqlmodel import SQLModel

from tracker.core.time import utcnow
from tracker.models.tasks import Task, TaskStatus

FALLBACK_CATEGORY = "その他"
DEFAULT_PRIORITY = 999
ID_FIELD = "cr19f_taskid"

CATEGORY_TO_CHOICE: dict[str, int] = {
    "公共": 100000000,
    "製薬": 100000001,
    "GCIT": 100000002,
    "Downstream": 100000003,
    "Activity": 100000004,
    "その他": 100000005,
}
CHOICE_TO_CATEGORY: dict[int, str] = {code: label for label, code in CATEGORY_TO_CHOICE.items()}

STATUS_TO_CHOICE: dict[TaskStatus, int] = {
    TaskStatus.NOT_STARTED: 100000000,
    TaskStatus.IN_PROGRESS: 100000001,
    TaskStatus.COMPLETED: 100000002,
    TaskStatus.ON_HOLD: 100000003,
}
CHOICE_TO_STATUS: dict[int, TaskStatus] = {code: status for status, code in STATUS_TO_CHOICE.items()}

# In-memory field -> remote column, for fields written verbatim.
_PLAIN_FIELDS: dict[str, str] = {
    "name": "cr19f_name",
    "customer": "cr19f_customer",
    "workload": "cr19f_workload",
    "priority": "cr19f_priority",
    "memo": "cr19f_memo",
}
_DATE_FIELDS: dict[str, str] = {
    "start_date": "cr19f_startdate",
    "due_date": "cr19f_duedate",
}


def _wire_date(value: object) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(str(value).split("T", 1)[0])
    except ValueError:
        return None


def _wire_datetime(value: object) -> datetime:
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            pass
    return utcnow()


def _status_choice(value: object) -> int:
    try:
        status = TaskStatus(value)
    except ValueError:
        status = TaskStatus.NOT_STARTED
    return STATUS_TO_CHOICE[status]


def task_from_wire(record: Mapping[str, Any]) -> Task:
    """Build a task from a remote record, applying the table's defaults."""
    priority = record.get("cr19f_priority")
    return Task(
        id=record[ID_FIELD],
        name=record.get("cr19f_name") or "",
        customer=record.get("cr19f_customer") or "",
        category=CHOICE_TO_CATEGORY.get(record.get("cr19f_category"), FALLBACK_CATEGORY),
        start_date=_wire_date(record.get("cr19f_startdate")),
        due_date=_wire_date(record.get("cr19f_duedate")),
        status=CHOICE_TO_STATUS.get(record.get("cr19f_status"), TaskStatus.NOT_STARTED),
        workload=record.get("cr19f_workload") or 0,
        priority=DEFAULT_PRIORITY if priority is None else int(priority),
        memo=record.get("cr19f_memo") or "",
        created_at=_wire_datetime(record.get("createdon")),
        updated_at=_wire_datetime(record.get("modifiedon")),
    )


def task_to_wire(updates: Task | SQLModel | Mapping[str, Any]) -> dict[str, Any]:
    """Encode the given task fields as a remote record body.

    Full tasks are encoded completely; update payloads only contribute the
    fields that were explicitly set. Unknown categories map to the fallback
    choice code.
    """
    if isinstance(updates, Task):
        values = updates.model_dump()
    elif isinstance(updates, SQLModel):
        values = updates.model_dump(exclude_unset=True)
    else:
        values = dict(updates)

    record: dict[str, Any] = {}
    for field_name, column in _PLAIN_FIELDS.items():
        if values.get(field_name) is not None:
            record[column] = values[field_name]
    for field_name, column in _DATE_FIELDS.items():
        value = values.get(field_name)
        if value is not None:
            record[column] = value.isoformat() if isinstance(value, date) else str(value)
    if values.get("category") is not None:
        record["cr19f_category"] = CATEGORY_TO_CHOICE.get(
            values["category"], CATEGORY_TO_CHOICE[FALLBACK_CATEGORY]
        )
    if values.get("status") is not None:
        record["cr19f_status"] = _status_choice(values["status"])
    return record
