"""
ProgressGuard - Test Configuration
Pytest fixtures shared by the engine, store and API tests
"""
from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from progress_guard.main import create_app
from progress_guard.models.progress import ActivityRecord, ChildRecord
from progress_guard.services.store import InMemoryProgressStore
from progress_guard.validators import ValidationEngine, ValidationPolicy


NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)

CHILD_ID = "child-123"
OTHER_CHILD_ID = "child-456"
INACTIVE_CHILD_ID = "child-inactive"

ACTIVITY_ID = "123e4567-e89b-12d3-a456-426614174000"  # 5 minute estimate
LONG_ACTIVITY_ID = "activity-long"                     # 10 minute estimate
QUICK_ACTIVITY_ID = "activity-quick"                   # 1 minute estimate
FOREIGN_ACTIVITY_ID = "activity-foreign"               # belongs to OTHER_CHILD_ID


def iso(moment: datetime) -> str:
    return moment.isoformat().replace("+00:00", "Z")


def ago(seconds: float) -> datetime:
    return NOW - timedelta(seconds=seconds)


def fixed_clock() -> datetime:
    return NOW


@pytest_asyncio.fixture(scope="function")
async def store() -> InMemoryProgressStore:
    """In-memory store seeded with children and activities."""
    store = InMemoryProgressStore()
    await store.put_child(ChildRecord(id=CHILD_ID, is_active=True))
    await store.put_child(ChildRecord(id=OTHER_CHILD_ID, is_active=True))
    await store.put_child(ChildRecord(id=INACTIVE_CHILD_ID, is_active=False))

    await store.put_activity(ActivityRecord(
        id=ACTIVITY_ID, estimated_duration_seconds=300, plan_id="plan-1", child_id=CHILD_ID,
    ))
    await store.put_activity(ActivityRecord(
        id=LONG_ACTIVITY_ID, estimated_duration_seconds=600, plan_id="plan-1", child_id=CHILD_ID,
    ))
    await store.put_activity(ActivityRecord(
        id=QUICK_ACTIVITY_ID, estimated_duration_seconds=60, plan_id="plan-1", child_id=CHILD_ID,
    ))
    await store.put_activity(ActivityRecord(
        id=FOREIGN_ACTIVITY_ID, estimated_duration_seconds=300, plan_id="plan-2", child_id=OTHER_CHILD_ID,
    ))
    return store


@pytest.fixture
def engine(store: InMemoryProgressStore) -> ValidationEngine:
    """Engine with default thresholds and a frozen clock."""
    return ValidationEngine(store, policy=ValidationPolicy(), clock=fixed_clock)


@pytest.fixture
def valid_payload() -> dict[str, Any]:
    """A progress update that passes every check for CHILD_ID."""
    return {
        "activityId": ACTIVITY_ID,
        "timeSpent": 300,
        "score": 85,
        "status": "IN_PROGRESS",
    }


@pytest.fixture
def session_payload() -> dict[str, Any]:
    """A payload with a full session trace: 2 minute session, 30 seconds paused."""
    start = ago(600)
    return {
        "activityId": ACTIVITY_ID,
        "timeSpent": 95,
        "sessionData": {
            "startTime": iso(start),
            "endTime": iso(start + timedelta(seconds=120)),
            "pausedDuration": 30,
            "focusEvents": [
                {"type": "focus", "timestamp": iso(start + timedelta(seconds=10))},
                {"type": "blur", "timestamp": iso(start + timedelta(seconds=60))},
                {"type": "focus", "timestamp": iso(start + timedelta(seconds=90))},
            ],
            "difficultyAdjustments": [
                {
                    "fromDifficulty": 3,
                    "toDifficulty": 4,
                    "reason": "Answered three in a row",
                    "timestamp": iso(start + timedelta(seconds=70)),
                },
            ],
            "helpRequests": [
                {
                    "question": "How do I solve this?",
                    "timestamp": iso(start + timedelta(seconds=40)),
                    "resolved": True,
                    "responseTime": 30,
                },
            ],
            "interactionEvents": [
                {
                    "type": "click",
                    "element": "submit-button",
                    "timestamp": iso(start + timedelta(seconds=110)),
                },
            ],
        },
        "helpRequestsCount": 1,
    }


@pytest_asyncio.fixture(scope="function")
async def client(store: InMemoryProgressStore) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against an app wired to the seeded store and frozen clock."""
    app = create_app(store=store, policy=ValidationPolicy())
    app.state.engine = ValidationEngine(store, policy=ValidationPolicy(), clock=fixed_clock)

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        ac.app = app
        yield ac
