"""Remote-backed task store speaking to a REST table endpoint.

Consistency is read-after-write: each mutation is sent to the server and the
full collection is then re-read, so the local snapshot only changes after a
successful refetch. Failures leave the snapshot untouched, record `error`,
and raise `TransportError`; nothing is retried here.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any
from uuid import UUID

import httpx
from sqlmodel import SQLModel

from tracker.core.config import Settings
from tracker.core.errors import TransportError
from tracker.core.logging import get_logger
from tracker.models.tasks import Task
from tracker.services.entity_store import as_entity_id
from tracker.services.remote.codec import task_from_wire, task_to_wire
from tracker.services.state import StateContainer

logger = get_logger(__name__)

ORDER_BY = "cr19f_priority asc,createdon desc"
_RETRYABLE_STATUS = frozenset({408, 429})


@dataclass(frozen=True)
class RemoteState:
    """Last successfully fetched collection plus request status."""

    tasks: tuple[Task, ...] = ()
    loading: bool = False
    error: str | None = None
    index: Mapping[UUID, Task] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        index: dict[UUID, Task] = {}
        for task in self.tasks:
            index.setdefault(task.id, task)
        object.__setattr__(self, "index", index)


class RemoteTaskStore:
    """Async task store whose authoritative copy lives on the server."""

    def __init__(
        self,
        base_url: str,
        *,
        entity_set: str = "cr19f_tasks",
        access_token: str = "",
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.entity_set = entity_set
        self._headers = {"Accept": "application/json"}
        if access_token:
            self._headers["Authorization"] = f"Bearer {access_token}"
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._container: StateContainer[RemoteState] = StateContainer(RemoteState())

    async def __aenter__(self) -> RemoteTaskStore:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # -------------------- snapshot access --------------------
    @property
    def state(self) -> RemoteState:
        return self._container.get()

    @property
    def error(self) -> str | None:
        return self._container.get().error

    def list(self) -> tuple[Task, ...]:
        return self._container.get().tasks

    def get_by_id(self, task_id: UUID | str) -> Task | None:
        key = as_entity_id(task_id)
        if key is None:
            return None
        return self._container.get().index.get(key)

    def subscribe(self, listener: Callable[[RemoteState, RemoteState], None]) -> Callable[[], None]:
        return self._container.subscribe(listener)

    # -------------------- transport --------------------
    def _record_path(self, task_id: UUID | str) -> str:
        return f"/{self.entity_set}({task_id})"

    def _patch_state(self, **changes: Any) -> None:
        self._container.update(lambda s: replace(s, **changes))

    async def _request(
        self,
        method: str,
        path: str,
        *,
        action: str,
        json: Mapping[str, Any] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        try:
            response = await self._client.request(
                method,
                path,
                json=json,
                params=params,
                headers=self._headers,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            raise TransportError(
                f"Remote {action} failed with HTTP {status_code}",
                status_code=status_code,
                retryable=status_code >= 500 or status_code in _RETRYABLE_STATUS,
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(
                f"Remote {action} failed: {exc.__class__.__name__}",
                retryable=True,
            ) from exc
        return response

    def _record_failure(self, action: str, exc: TransportError, **extra: Any) -> None:
        logger.warning(
            f"remote.task.{action}_failed",
            extra={"status_code": exc.status_code, "error": str(exc), **extra},
        )
        self._patch_state(error=str(exc), loading=False)

    # -------------------- operations --------------------
    async def load(self) -> tuple[Task, ...]:
        """Fetch the full collection ordered by priority, newest first on ties."""
        self._patch_state(loading=True, error=None)
        try:
            response = await self._request(
                "GET",
                f"/{self.entity_set}",
                action="load",
                params={"$orderby": ORDER_BY},
            )
            try:
                tasks = tuple(task_from_wire(record) for record in response.json()["value"])
            except (ValueError, KeyError, TypeError) as exc:
                raise TransportError("Remote load returned a malformed body") from exc
        except TransportError as exc:
            self._record_failure("load", exc)
            raise
        self._patch_state(tasks=tasks, loading=False)
        logger.debug("remote.task.loaded", extra={"count": len(tasks)})
        return tasks

    async def add(self, task: Task) -> tuple[Task, ...]:
        try:
            await self._request(
                "POST",
                f"/{self.entity_set}",
                action="create",
                json=task_to_wire(task),
            )
        except TransportError as exc:
            self._record_failure("create", exc, entity_id=str(task.id))
            raise
        logger.info("remote.task.created", extra={"entity_id": str(task.id)})
        return await self.load()

    async def update(
        self,
        task_id: UUID | str,
        updates: SQLModel | Mapping[str, Any],
    ) -> tuple[Task, ...]:
        try:
            await self._request(
                "PATCH",
                self._record_path(task_id),
                action="update",
                json=task_to_wire(updates),
            )
        except TransportError as exc:
            self._record_failure("update", exc, entity_id=str(task_id))
            raise
        logger.info("remote.task.updated", extra={"entity_id": str(task_id)})
        return await self.load()

    async def delete(self, task_id: UUID | str) -> tuple[Task, ...]:
        try:
            await self._request("DELETE", self._record_path(task_id), action="delete")
        except TransportError as exc:
            self._record_failure("delete", exc, entity_id=str(task_id))
            raise
        logger.info("remote.task.deleted", extra={"entity_id": str(task_id)})
        return await self.load()

    async def reorder(self, ordered_ids: Iterable[UUID | str]) -> tuple[Task, ...]:
        """Write `priority = index` one record at a time, then refetch.

        Not atomic: when a write fails, earlier writes stay applied remotely.
        """
        written = 0
        try:
            for index, task_id in enumerate(ordered_ids):
                await self._request(
                    "PATCH",
                    self._record_path(task_id),
                    action="reorder",
                    json={"cr19f_priority": index},
                )
                written += 1
        except TransportError as exc:
            self._record_failure("reorder", exc, written=written)
            raise
        logger.info("remote.task.reordered", extra={"count": written})
        return await self.load()


def build_remote_task_store(
    settings: Settings,
    *,
    client: httpx.AsyncClient | None = None,
) -> RemoteTaskStore:
    """Create a remote task store from configuration."""
    if not settings.remote_base_url:
        raise ValueError("REMOTE_BASE_URL must be set to use the remote task store.")
    return RemoteTaskStore(
        settings.remote_base_url,
        entity_set=settings.remote_entity_set,
        access_token=settings.remote_access_token,
        timeout=settings.remote_timeout_seconds,
        client=client,
    )
