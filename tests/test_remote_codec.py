# ruff: noqa: INP001
"""Remote record encoding and decoding defaults."""

from __future__ import annotations

from datetime import date
from uuid import uuid4

import pytest

from tracker.models.tasks import Task, TaskStatus
from tracker.schemas.tasks import TaskUpdate
from tracker.services.remote.codec import (
    CATEGORY_TO_CHOICE,
    DEFAULT_PRIORITY,
    FALLBACK_CATEGORY,
    task_from_wire,
    task_to_wire,
)


def test_missing_fields_get_table_defaults() -> None:
    task = task_from_wire({"cr19f_taskid": str(uuid4())})

    assert task.priority == DEFAULT_PRIORITY
    assert task.category == FALLBACK_CATEGORY
    assert task.status == TaskStatus.NOT_STARTED
    assert task.name == ""
    assert task.workload == 0
    assert task.start_date is None


def test_zero_priority_is_kept() -> None:
    task = task_from_wire({"cr19f_taskid": str(uuid4()), "cr19f_priority": 0})

    assert task.priority == 0


def test_dates_are_truncated_to_calendar_days() -> None:
    task = task_from_wire(
        {
            "cr19f_taskid": str(uuid4()),
            "cr19f_startdate": "2024-06-10T00:00:00Z",
            "cr19f_duedate": "2024-06-12",
            "createdon": "2024-06-01T09:00:00Z",
        }
    )

    assert task.start_date == date(2024, 6, 10)
    assert task.due_date == date(2024, 6, 12)
    assert task.created_at.year == 2024


@pytest.mark.parametrize(("code", "label"), [(100000000, "公共"), (100000004, "Activity"), (7, "その他")])
def test_category_codes_decode(code: int, label: str) -> None:
    task = task_from_wire({"cr19f_taskid": str(uuid4()), "cr19f_category": code})

    assert task.category == label


def test_full_task_encodes_every_column() -> None:
    task = Task(
        name="Demo",
        customer="Contoso",
        category="製薬",
        status=TaskStatus.COMPLETED,
        due_date=date(2024, 6, 12),
        workload=2.5,
        priority=3,
    )

    record = task_to_wire(task)

    assert record["cr19f_name"] == "Demo"
    assert record["cr19f_category"] == 100000001
    assert record["cr19f_status"] == 100000002
    assert record["cr19f_duedate"] == "2024-06-12"
    assert record["cr19f_workload"] == 2.5
    assert record["cr19f_priority"] == 3
    assert "cr19f_startdate" not in record


def test_update_payload_encodes_only_set_fields() -> None:
    record = task_to_wire(TaskUpdate(memo="follow up"))

    assert record == {"cr19f_memo": "follow up"}


def test_unknown_category_maps_to_fallback_choice() -> None:
    record = task_to_wire({"category": "Retail"})

    assert record == {"cr19f_category": CATEGORY_TO_CHOICE[FALLBACK_CATEGORY]}


def test_status_strings_and_unknown_statuses_encode() -> None:
    assert task_to_wire({"status": "OnHold"}) == {"cr19f_status": 100000003}
    assert task_to_wire({"status": "Archived"}) == {"cr19f_status": 100000000}
