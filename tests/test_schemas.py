# ruff: noqa: INP001
"""Schema validation tests for task and project payloads."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from tracker.models.tasks import TaskStatus
from tracker.schemas.projects import ProjectCreate, ProjectUpdate
from tracker.schemas.tasks import TaskCreate, TaskFilter, TaskUpdate


def test_task_create_strips_required_text() -> None:
    payload = TaskCreate(name="  Demo ", customer=" Contoso", category="GCIT ")

    assert (payload.name, payload.customer, payload.category) == ("Demo", "Contoso", "GCIT")
    assert payload.status == TaskStatus.NOT_STARTED


@pytest.mark.parametrize("field_name", ["name", "customer", "category"])
def test_task_create_rejects_blank_required_text(field_name: str) -> None:
    values = {"name": "Demo", "customer": "Contoso", "category": "GCIT", field_name: " "}

    with pytest.raises(ValidationError, match=f"{field_name} is required"):
        TaskCreate(**values)


def test_task_create_rejects_negative_workload() -> None:
    with pytest.raises(ValidationError):
        TaskCreate(name="Demo", customer="Contoso", category="GCIT", workload=-1)


def test_task_build_stamps_matching_timestamps() -> None:
    task = TaskCreate(name="Demo", customer="Contoso", category="GCIT").build(priority=4)

    assert task.priority == 4
    assert task.created_at == task.updated_at


def test_task_update_allows_omitting_required_fields() -> None:
    payload = TaskUpdate(memo="x")

    assert payload.model_fields_set == {"memo"}


def test_task_update_rejects_explicit_blank_name() -> None:
    with pytest.raises(ValidationError, match="name is required"):
        TaskUpdate(name="")


def test_task_filter_defaults_to_wildcards() -> None:
    spec = TaskFilter()

    assert (spec.status, spec.category, spec.product) == ("all", "all", "all")


def test_project_create_requires_account_and_category() -> None:
    with pytest.raises(ValidationError, match="account_name is required"):
        ProjectCreate(account_name=" ", category="GCIT")

    project = ProjectCreate(account_name="Fabrikam", category="GCIT").build(priority=0)
    assert project.account_name == "Fabrikam"
    assert project.end_date is None


def test_project_update_rejects_explicit_null_category() -> None:
    with pytest.raises(ValidationError, match="category is required"):
        ProjectUpdate(category=None)
