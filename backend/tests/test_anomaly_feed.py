"""
Tests for the in-process anomaly review feed.
"""
import pytest

from progress_guard.services.anomaly_feed import WILDCARD, AnomalyFeed
from progress_guard.validators import ValidationResult
from progress_guard.validators.models import ConsistencyCheckResult, Severity


def flagged_result() -> ValidationResult:
    checks = [
        ConsistencyCheckResult(
            check="quick_perfect_score",
            passed=False,
            message="Perfect score in very short time may indicate cheating",
            severity=Severity.WARNING,
            suggestion="Compare against the learner's typical pace on similar activities",
            data={"score": 100, "timeSpent": 20},
        ),
        ConsistencyCheckResult(check="child_exists", passed=True, message="Child profile found"),
    ]
    return ValidationResult.build([], checks, {"activityId": "activity-1", "timeSpent": 20})


@pytest.mark.asyncio
async def test_publish_result_emits_one_event_per_warning():
    feed = AnomalyFeed()
    received = []

    async def listener(event):
        received.append(event)

    feed.subscribe("child-1", listener)
    published = await feed.publish_result("child-1", "activity-1", flagged_result())

    assert published == 1
    assert received[0]["type"] == "anomaly_flagged"
    assert received[0]["check"] == "quick_perfect_score"
    assert received[0]["data"] == {"score": 100, "timeSpent": 20}
    assert isinstance(received[0]["timestamp"], str)
    assert feed.get_history("child-1") == received


@pytest.mark.asyncio
async def test_wildcard_listener_sees_every_child():
    feed = AnomalyFeed()
    received = []

    async def reviewer(event):
        received.append(event["child_id"])

    feed.subscribe(WILDCARD, reviewer)
    await feed.publish_result("child-1", "activity-1", flagged_result())
    await feed.publish_result("child-2", "activity-1", flagged_result())

    assert received == ["child-1", "child-2"]


@pytest.mark.asyncio
async def test_failing_listener_is_dropped():
    feed = AnomalyFeed()
    calls = []

    async def broken(event):
        calls.append(event)
        raise RuntimeError("listener down")

    feed.subscribe("child-1", broken)
    await feed.publish("child-1", {"type": "anomaly_flagged"})
    await feed.publish("child-1", {"type": "anomaly_flagged"})

    assert len(calls) == 1


@pytest.mark.asyncio
async def test_history_is_bounded():
    feed = AnomalyFeed(max_history=3)

    for i in range(5):
        await feed.publish("child-1", {"seq": i})

    assert [e["seq"] for e in feed.get_history("child-1")] == [2, 3, 4]


@pytest.mark.asyncio
async def test_unsubscribe_and_cleanup():
    feed = AnomalyFeed()
    received = []

    async def listener(event):
        received.append(event)

    feed.subscribe("child-1", listener)
    feed.unsubscribe("child-1", listener)
    await feed.publish("child-1", {"seq": 1})

    assert received == []
    feed.cleanup("child-1")
    assert feed.get_history("child-1") == []
