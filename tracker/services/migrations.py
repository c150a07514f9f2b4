"""Upgrade steps for persisted entity collections.

Version 1 documents come from the browser build: records use camelCase keys,
task statuses are stored as their Japanese labels, empty dates are "" and the
selection pointer is persisted alongside the collection. Version 2 stores
snake_case records with `TaskStatus` values and no selection.
"""

from __future__ import annotations

from typing import Any

from pydantic.alias_generators import to_snake

from tracker.models.tasks import TaskStatus

LEGACY_STATUS_LABELS: dict[str, TaskStatus] = {
    "未着手": TaskStatus.NOT_STARTED,
    "進行中": TaskStatus.IN_PROGRESS,
    "完了": TaskStatus.COMPLETED,
    "保留": TaskStatus.ON_HOLD,
}
_DATE_FIELDS = ("start_date", "due_date", "end_date")


def _upgrade_record(record: dict[str, Any]) -> dict[str, Any]:
    upgraded = {to_snake(key): value for key, value in record.items()}
    for field_name in _DATE_FIELDS:
        if upgraded.get(field_name) == "":
            upgraded[field_name] = None
    status = upgraded.get("status")
    if isinstance(status, str) and status in LEGACY_STATUS_LABELS:
        upgraded["status"] = LEGACY_STATUS_LABELS[status].value
    return upgraded


def collection_v1_to_v2(collection_key: str):
    """Build the v1 -> v2 step for the collection stored under `collection_key`."""

    def _step(state: dict[str, Any]) -> dict[str, Any]:
        records = state.get(collection_key) or []
        if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
            raise ValueError(f"{collection_key} must be a list of objects")
        return {collection_key: [_upgrade_record(dict(record)) for record in records]}

    return _step
