"""Remote REST collaborator for the task collection.

Prefer importing from this package when used by other modules.
"""

from tracker.services.remote.client import RemoteState, RemoteTaskStore, build_remote_task_store
from tracker.services.remote.codec import task_from_wire, task_to_wire

__all__ = [
    "RemoteState",
    "RemoteTaskStore",
    "build_remote_task_store",
    "task_from_wire",
    "task_to_wire",
]
