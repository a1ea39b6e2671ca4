"""Redis-backed progress data store.

Entities are stored as JSON documents (camelCase, as on the wire):

    {prefix}child:{child_id}
    {prefix}activity:{activity_id}
    {prefix}progress:{child_id}:{activity_id}
    {prefix}child:{child_id}:activities   (set of activity ids with progress)
"""

from typing import Optional, Type, TypeVar

import structlog
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from redis.exceptions import RedisError

from progress_guard.errors import DataStoreError
from progress_guard.models.progress import ActivityRecord, ChildRecord, ProgressRecord

logger = structlog.get_logger()

RecordT = TypeVar("RecordT", bound=BaseModel)


class RedisProgressStore:
    """Reads and writes child, activity and progress documents in Redis."""

    def __init__(self, redis_client, prefix: str = "progress_guard:"):
        self.redis = redis_client
        self._prefix = prefix

    def _child_key(self, child_id: str) -> str:
        return f"{self._prefix}child:{child_id}"

    def _activity_key(self, activity_id: str) -> str:
        return f"{self._prefix}activity:{activity_id}"

    def _progress_key(self, child_id: str, activity_id: str) -> str:
        return f"{self._prefix}progress:{child_id}:{activity_id}"

    def _child_index_key(self, child_id: str) -> str:
        return f"{self._prefix}child:{child_id}:activities"

    async def _load(self, operation: str, key: str, model: Type[RecordT]) -> Optional[RecordT]:
        try:
            data = await self.redis.get(key)
        except RedisError as e:
            logger.error("progress_store_read_failed", operation=operation, key=key, error=str(e))
            raise DataStoreError(operation, str(e), cause=e) from e

        if data is None:
            return None

        try:
            return model.model_validate_json(data)
        except PydanticValidationError as e:
            logger.error("progress_store_corrupt_document", operation=operation, key=key, error=str(e))
            raise DataStoreError(operation, f"corrupt document at {key}", cause=e) from e

    async def get_child(self, child_id: str) -> Optional[ChildRecord]:
        return await self._load("get_child", self._child_key(child_id), ChildRecord)

    async def get_activity(self, activity_id: str) -> Optional[ActivityRecord]:
        return await self._load("get_activity", self._activity_key(activity_id), ActivityRecord)

    async def get_progress_record(self, child_id: str, activity_id: str) -> Optional[ProgressRecord]:
        return await self._load(
            "get_progress_record", self._progress_key(child_id, activity_id), ProgressRecord
        )

    async def list_progress_records(self, child_id: str) -> list[ProgressRecord]:
        try:
            activity_ids = await self.redis.smembers(self._child_index_key(child_id))
        except RedisError as e:
            logger.error("progress_store_read_failed", operation="list_progress_records", error=str(e))
            raise DataStoreError("list_progress_records", str(e), cause=e) from e

        records = []
        for activity_id in sorted(activity_ids):
            record = await self.get_progress_record(child_id, activity_id)
            if record is not None:
                records.append(record)
        return records

    async def ping(self) -> bool:
        try:
            return bool(await self.redis.ping())
        except RedisError as e:
            raise DataStoreError("ping", str(e), cause=e) from e

    # ── Writes (the caller's side of the contract) ──

    async def _store(self, operation: str, key: str, record: BaseModel) -> None:
        try:
            await self.redis.set(key, record.model_dump_json(by_alias=True))
        except RedisError as e:
            logger.error("progress_store_write_failed", operation=operation, key=key, error=str(e))
            raise DataStoreError(operation, str(e), cause=e) from e

    async def put_child(self, child: ChildRecord) -> None:
        await self._store("put_child", self._child_key(child.id), child)

    async def put_activity(self, activity: ActivityRecord) -> None:
        await self._store("put_activity", self._activity_key(activity.id), activity)

    async def put_progress_record(self, record: ProgressRecord) -> None:
        key = self._progress_key(record.child_id, record.activity_id)
        await self._store("put_progress_record", key, record)
        try:
            await self.redis.sadd(self._child_index_key(record.child_id), record.activity_id)
        except RedisError as e:
            raise DataStoreError("put_progress_record", str(e), cause=e) from e
        logger.info("progress_record_stored", child_id=record.child_id, activity_id=record.activity_id)
