"""Data-store contract consumed by the validation engine, plus an in-memory store."""

from typing import Optional, Protocol, runtime_checkable

import structlog

from progress_guard.models.progress import ActivityRecord, ChildRecord, ProgressRecord

logger = structlog.get_logger()


@runtime_checkable
class ProgressDataStore(Protocol):
    """Read side of the system of record.

    Implementations raise DataStoreError when a read cannot be completed;
    a missing entity is ``None``, never an exception.
    """

    async def get_child(self, child_id: str) -> Optional[ChildRecord]: ...

    async def get_activity(self, activity_id: str) -> Optional[ActivityRecord]: ...

    async def get_progress_record(self, child_id: str, activity_id: str) -> Optional[ProgressRecord]: ...

    async def list_progress_records(self, child_id: str) -> list[ProgressRecord]: ...

    async def ping(self) -> bool: ...


class InMemoryProgressStore:
    """Dict-backed store for tests and single-process use."""

    def __init__(self):
        self._children: dict[str, ChildRecord] = {}
        self._activities: dict[str, ActivityRecord] = {}
        self._progress: dict[tuple[str, str], ProgressRecord] = {}

    async def get_child(self, child_id: str) -> Optional[ChildRecord]:
        return self._children.get(child_id)

    async def get_activity(self, activity_id: str) -> Optional[ActivityRecord]:
        return self._activities.get(activity_id)

    async def get_progress_record(self, child_id: str, activity_id: str) -> Optional[ProgressRecord]:
        return self._progress.get((child_id, activity_id))

    async def list_progress_records(self, child_id: str) -> list[ProgressRecord]:
        return [r for (owner, _), r in self._progress.items() if owner == child_id]

    async def ping(self) -> bool:
        return True

    # ── Writes (the caller's side of the contract) ──

    async def put_child(self, child: ChildRecord) -> None:
        self._children[child.id] = child

    async def put_activity(self, activity: ActivityRecord) -> None:
        self._activities[activity.id] = activity

    async def put_progress_record(self, record: ProgressRecord) -> None:
        self._progress[(record.child_id, record.activity_id)] = record
        logger.debug(
            "progress_record_stored",
            child_id=record.child_id,
            activity_id=record.activity_id,
            status=record.status.value,
        )
