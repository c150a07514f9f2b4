# ruff: noqa: INP001
"""Remote task store request sequencing and failure handling."""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import date
from uuid import UUID, uuid4

import httpx
import pytest

from tracker.core.config import Settings
from tracker.core.errors import TransportError
from tracker.models.tasks import Task, TaskStatus
from tracker.schemas.tasks import TaskUpdate
from tracker.services.remote.client import ORDER_BY, RemoteTaskStore, build_remote_task_store

BASE_URL = "https://example.crm.dynamics.com/api/data/v9.2"


def _record(task_id: UUID, priority: int, name: str = "task") -> dict[str, object]:
    return {
        "cr19f_taskid": str(task_id),
        "cr19f_name": name,
        "cr19f_customer": "Contoso",
        "cr19f_category": 100000002,
        "cr19f_status": 100000001,
        "cr19f_priority": priority,
        "createdon": "2024-06-01T09:00:00Z",
        "modifiedon": "2024-06-02T09:00:00Z",
    }


class _FakeServer:
    """In-memory table answering the REST calls the store makes."""

    def __init__(self, records: list[dict[str, object]]) -> None:
        self.records = records
        self.requests: list[httpx.Request] = []
        self.fail_when: Callable[[httpx.Request], int | None] = lambda request: None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        failure = self.fail_when(request)
        if failure is not None:
            return httpx.Response(failure, json={"error": "boom"})
        if request.method == "GET":
            ordered = sorted(self.records, key=lambda r: r["cr19f_priority"])
            return httpx.Response(200, json={"value": ordered})
        if request.method == "POST":
            body = json.loads(request.content)
            body.setdefault("cr19f_taskid", str(uuid4()))
            self.records.append(body)
            return httpx.Response(204)
        record_id = request.url.path.rsplit("(", 1)[1].rstrip(")")
        if request.method == "PATCH":
            body = json.loads(request.content)
            for record in self.records:
                if record["cr19f_taskid"] == record_id:
                    record.update(body)
            return httpx.Response(204)
        if request.method == "DELETE":
            self.records = [r for r in self.records if r["cr19f_taskid"] != record_id]
            return httpx.Response(204)
        return httpx.Response(405)

    def store(self) -> RemoteTaskStore:
        client = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(self.handler))
        return RemoteTaskStore(BASE_URL, client=client, access_token="secret")


@pytest.mark.asyncio
async def test_load_orders_by_priority_and_decodes_records() -> None:
    ids = [uuid4(), uuid4()]
    server = _FakeServer([_record(ids[0], 1, "second"), _record(ids[1], 0, "first")])
    store = server.store()

    tasks = await store.load()

    assert [task.name for task in tasks] == ["first", "second"]
    assert tasks[0].category == "GCIT"
    assert tasks[0].status == TaskStatus.IN_PROGRESS
    request = server.requests[0]
    assert request.url.path == "/api/data/v9.2/cr19f_tasks"
    assert request.url.params["$orderby"] == ORDER_BY
    assert request.headers["Authorization"] == "Bearer secret"
    assert store.get_by_id(ids[1]).name == "first"


@pytest.mark.asyncio
async def test_add_posts_then_refetches() -> None:
    server = _FakeServer([])
    store = server.store()
    task = Task(
        name="Kickoff",
        customer="Fabrikam",
        category="Retail",
        status=TaskStatus.ON_HOLD,
        start_date=date(2024, 6, 10),
    )

    tasks = await store.add(task)

    post = server.requests[0]
    body = json.loads(post.content)
    assert post.method == "POST"
    assert body["cr19f_category"] == 100000005
    assert body["cr19f_status"] == 100000003
    assert body["cr19f_startdate"] == "2024-06-10"
    assert server.requests[-1].method == "GET"
    assert [t.name for t in tasks] == ["Kickoff"]


@pytest.mark.asyncio
async def test_update_sends_only_set_fields() -> None:
    task_id = uuid4()
    server = _FakeServer([_record(task_id, 0)])
    store = server.store()

    await store.update(task_id, TaskUpdate(status=TaskStatus.COMPLETED))

    patch = server.requests[0]
    assert patch.method == "PATCH"
    assert patch.url.path.endswith(f"/cr19f_tasks({task_id})")
    assert json.loads(patch.content) == {"cr19f_status": 100000002}
    assert store.list()[0].status == TaskStatus.COMPLETED


@pytest.mark.asyncio
async def test_delete_removes_and_refetches() -> None:
    keep, drop = uuid4(), uuid4()
    server = _FakeServer([_record(keep, 0), _record(drop, 1)])
    store = server.store()

    tasks = await store.delete(drop)

    assert [task.id for task in tasks] == [keep]


@pytest.mark.asyncio
async def test_reorder_patches_each_id_in_order() -> None:
    ids = [uuid4(), uuid4(), uuid4()]
    server = _FakeServer([_record(task_id, index) for index, task_id in enumerate(ids)])
    store = server.store()

    tasks = await store.reorder([ids[2], ids[0], ids[1]])

    patches = [r for r in server.requests if r.method == "PATCH"]
    assert [json.loads(r.content) for r in patches] == [
        {"cr19f_priority": 0},
        {"cr19f_priority": 1},
        {"cr19f_priority": 2},
    ]
    assert [task.id for task in tasks] == [ids[2], ids[0], ids[1]]


@pytest.mark.asyncio
async def test_reorder_failure_keeps_earlier_writes_and_snapshot() -> None:
    ids = [uuid4(), uuid4(), uuid4()]
    server = _FakeServer([_record(task_id, index) for index, task_id in enumerate(ids)])
    store = server.store()
    before = await store.load()
    server.fail_when = lambda request: (
        503 if request.method == "PATCH" and str(ids[0]) in request.url.path else None
    )

    with pytest.raises(TransportError) as exc_info:
        await store.reorder([ids[2], ids[0], ids[1]])

    assert exc_info.value.status_code == 503
    assert exc_info.value.retryable is True
    assert store.list() == before
    assert store.error == "Remote reorder failed with HTTP 503"
    assert len([r for r in server.requests if r.method == "PATCH"]) == 2
    priorities = {r["cr19f_taskid"]: r["cr19f_priority"] for r in server.records}
    assert priorities == {str(ids[0]): 0, str(ids[1]): 1, str(ids[2]): 0}


@pytest.mark.asyncio
async def test_load_failure_leaves_previous_snapshot() -> None:
    server = _FakeServer([_record(uuid4(), 0)])
    store = server.store()
    before = await store.load()
    server.fail_when = lambda request: 404

    with pytest.raises(TransportError) as exc_info:
        await store.load()

    assert exc_info.value.retryable is False
    assert store.list() == before
    assert store.state.loading is False


@pytest.mark.asyncio
async def test_network_errors_become_transport_errors() -> None:
    def _refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(_refuse))
    store = RemoteTaskStore(BASE_URL, client=client)

    with pytest.raises(TransportError) as exc_info:
        await store.delete(uuid4())

    assert exc_info.value.status_code is None
    assert exc_info.value.retryable is True
    assert store.error == "Remote delete failed: ConnectError"


@pytest.mark.asyncio
async def test_malformed_body_is_reported() -> None:
    client = httpx.AsyncClient(
        base_url=BASE_URL,
        transport=httpx.MockTransport(lambda request: httpx.Response(200, text="<html>")),
    )
    store = RemoteTaskStore(BASE_URL, client=client)

    with pytest.raises(TransportError, match="malformed"):
        await store.load()


def test_build_remote_store_requires_base_url() -> None:
    with pytest.raises(ValueError, match="REMOTE_BASE_URL"):
        build_remote_task_store(Settings(_env_file=None, remote_base_url=""))


@pytest.mark.asyncio
async def test_build_remote_store_uses_settings() -> None:
    settings = Settings(
        _env_file=None,
        remote_base_url=f"{BASE_URL}/",
        remote_entity_set="cr19f_items",
    )

    async with build_remote_task_store(settings) as store:
        assert store.entity_set == "cr19f_items"
        assert str(store._client.base_url) == f"{BASE_URL}/"


@pytest.mark.asyncio
async def test_snapshot_index_tracks_each_load() -> None:
    first, second = uuid4(), uuid4()
    server = _FakeServer([_record(first, 0, "first")])
    store = server.store()
    await store.load()

    server.records.append(_record(second, 1, "second"))
    await store.load()

    assert set(store.state.index) == {first, second}
    assert store.get_by_id(str(second)).name == "second"
    assert store.get_by_id("not-a-uuid") is None
