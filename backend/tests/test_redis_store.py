"""
Tests for the Redis-backed progress store, against an in-process fake client.
"""
import json

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from progress_guard.errors import DataStoreError
from progress_guard.models.progress import ActivityRecord, ChildRecord, ProgressRecord, ProgressStatus
from progress_guard.services.redis_store import RedisProgressStore
from progress_guard.validators import ValidationEngine, ValidationPolicy

from conftest import ACTIVITY_ID, CHILD_ID, fixed_clock


class FakeRedis:
    """The subset of the redis.asyncio client the store uses."""

    def __init__(self):
        self.values: dict[str, str] = {}
        self.sets: dict[str, set] = {}

    async def get(self, key):
        return self.values.get(key)

    async def set(self, key, value):
        self.values[key] = value
        return True

    async def sadd(self, key, *members):
        self.sets.setdefault(key, set()).update(members)
        return len(members)

    async def smembers(self, key):
        return set(self.sets.get(key, set()))

    async def ping(self):
        return True


class DownRedis(FakeRedis):

    async def get(self, key):
        raise RedisConnectionError("Connection refused")

    async def smembers(self, key):
        raise RedisConnectionError("Connection refused")

    async def ping(self):
        raise RedisConnectionError("Connection refused")


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def redis_store(fake_redis):
    return RedisProgressStore(fake_redis, prefix="test:")


@pytest.mark.asyncio
async def test_round_trip_entities(redis_store, fake_redis):
    await redis_store.put_child(ChildRecord(id=CHILD_ID))
    await redis_store.put_activity(ActivityRecord(
        id=ACTIVITY_ID, estimated_duration_seconds=300, plan_id="plan-1", child_id=CHILD_ID,
    ))

    child = await redis_store.get_child(CHILD_ID)
    activity = await redis_store.get_activity(ACTIVITY_ID)

    assert child == ChildRecord(id=CHILD_ID, is_active=True)
    assert activity.estimated_duration_seconds == 300
    assert activity.child_id == CHILD_ID


@pytest.mark.asyncio
async def test_documents_are_camel_case_json(redis_store, fake_redis):
    await redis_store.put_activity(ActivityRecord(
        id=ACTIVITY_ID, estimated_duration_seconds=300, plan_id="plan-1", child_id=CHILD_ID,
    ))

    document = json.loads(fake_redis.values[f"test:activity:{ACTIVITY_ID}"])
    assert document == {
        "id": ACTIVITY_ID,
        "estimatedDurationSeconds": 300,
        "planId": "plan-1",
        "childId": CHILD_ID,
    }


@pytest.mark.asyncio
async def test_missing_entities_are_none(redis_store):
    assert await redis_store.get_child("nobody") is None
    assert await redis_store.get_activity("nothing") is None
    assert await redis_store.get_progress_record("nobody", "nothing") is None


@pytest.mark.asyncio
async def test_progress_records_are_indexed_per_child(redis_store):
    await redis_store.put_progress_record(ProgressRecord(
        child_id=CHILD_ID, activity_id="b", status=ProgressStatus.IN_PROGRESS, score=40, time_spent=60,
    ))
    await redis_store.put_progress_record(ProgressRecord(
        child_id=CHILD_ID, activity_id="a", status=ProgressStatus.PAUSED, score=20, time_spent=30,
    ))
    await redis_store.put_progress_record(ProgressRecord(
        child_id="someone-else", activity_id="a", time_spent=5,
    ))

    records = await redis_store.list_progress_records(CHILD_ID)

    assert [r.activity_id for r in records] == ["a", "b"]
    assert records[0].status == ProgressStatus.PAUSED


@pytest.mark.asyncio
async def test_read_failure_raises_data_store_error():
    store = RedisProgressStore(DownRedis())

    with pytest.raises(DataStoreError) as exc_info:
        await store.get_child(CHILD_ID)

    assert exc_info.value.operation == "get_child"
    assert isinstance(exc_info.value.cause, RedisConnectionError)


@pytest.mark.asyncio
async def test_corrupt_document_raises_data_store_error(redis_store, fake_redis):
    fake_redis.values[f"test:child:{CHILD_ID}"] = "{not json"

    with pytest.raises(DataStoreError, match="corrupt document"):
        await redis_store.get_child(CHILD_ID)


@pytest.mark.asyncio
async def test_ping(redis_store):
    assert await redis_store.ping() is True

    with pytest.raises(DataStoreError):
        await RedisProgressStore(DownRedis()).ping()


@pytest.mark.asyncio
async def test_engine_reports_redis_outage_as_system_error():
    engine = ValidationEngine(RedisProgressStore(DownRedis()), policy=ValidationPolicy(), clock=fixed_clock)

    result = await engine.validate(CHILD_ID, {"activityId": ACTIVITY_ID, "timeSpent": 300})

    assert result.system_error is True
    assert result.is_valid is False


@pytest.mark.asyncio
async def test_engine_over_redis_store(redis_store):
    await redis_store.put_child(ChildRecord(id=CHILD_ID))
    await redis_store.put_activity(ActivityRecord(
        id=ACTIVITY_ID, estimated_duration_seconds=300, plan_id="plan-1", child_id=CHILD_ID,
    ))
    await redis_store.put_progress_record(ProgressRecord(
        child_id=CHILD_ID, activity_id=ACTIVITY_ID, status=ProgressStatus.COMPLETED, score=90, time_spent=300,
    ))
    engine = ValidationEngine(redis_store, policy=ValidationPolicy(), clock=fixed_clock)

    result = await engine.validate(
        CHILD_ID, {"activityId": ACTIVITY_ID, "timeSpent": 300, "status": "NOT_STARTED"},
    )

    assert result.get_check("valid_status_transition").passed is False
    assert result.get_check("activity_belongs_to_child").passed is True
