"""
Tests for stored progress record auditing.
"""
from datetime import datetime, timezone

import pytest

from progress_guard.models.progress import ProgressRecord, ProgressStatus
from progress_guard.validators.audit import ProgressRecordAuditor


@pytest.fixture
def auditor():
    return ProgressRecordAuditor()


def record(**overrides):
    fields = {
        "child_id": "child-1",
        "activity_id": "activity-1",
        "status": ProgressStatus.IN_PROGRESS,
        "score": 50,
        "time_spent": 120,
    }
    fields.update(overrides)
    return ProgressRecord(**fields)


def test_clean_records(auditor):
    records = [
        record(),
        record(
            activity_id="activity-2",
            status=ProgressStatus.COMPLETED,
            completed_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
        ),
    ]
    assert auditor.audit(records) == []


def test_negative_time_spent(auditor):
    findings = auditor.audit([record(time_spent=-10)])

    assert len(findings) == 1
    assert findings[0].rule == "negative_time_spent"
    assert findings[0].severity == "high"
    assert findings[0].actual == -10


@pytest.mark.parametrize("score", [-1, 100.5, 250])
def test_score_out_of_range(auditor, score):
    findings = auditor.audit([record(score=score)])

    assert [f.rule for f in findings] == ["score_out_of_range"]
    assert findings[0].severity == "medium"


def test_completed_without_timestamp(auditor):
    findings = auditor.audit([record(status=ProgressStatus.COMPLETED)])

    assert [f.rule for f in findings] == ["completed_without_timestamp"]
    assert findings[0].actual is None


def test_findings_identify_the_record(auditor):
    findings = auditor.audit([record(activity_id="activity-9", time_spent=-1, score=-5)])

    assert {f.rule for f in findings} == {"negative_time_spent", "score_out_of_range"}
    assert all(f.child_id == "child-1" and f.activity_id == "activity-9" for f in findings)


def test_empty_input(auditor):
    assert auditor.audit([]) == []
