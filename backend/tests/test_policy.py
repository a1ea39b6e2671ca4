"""
Tests for threshold configuration.
"""
import pytest
from pydantic import ValidationError

from progress_guard.config import Settings
from progress_guard.validators import ValidationPolicy


def test_defaults():
    policy = ValidationPolicy()
    assert policy.score_regression_threshold == 20
    assert policy.min_time_ratio == 0.1
    assert policy.max_time_ratio == 5.0
    assert policy.quick_score_max_seconds == 30
    assert policy.quick_score_min_score == 95


def test_from_settings_reads_environment(monkeypatch):
    monkeypatch.setenv("SCORE_REGRESSION_THRESHOLD", "35")
    monkeypatch.setenv("QUICK_SCORE_MAX_SECONDS", "45")

    policy = ValidationPolicy.from_settings(Settings())

    assert policy.score_regression_threshold == 35
    assert policy.quick_score_max_seconds == 45
    assert policy.help_penalty_cap == 20


def test_policy_is_frozen():
    policy = ValidationPolicy()
    with pytest.raises(ValidationError):
        policy.score_regression_threshold = 10


def test_rejects_negative_thresholds():
    with pytest.raises(ValidationError):
        ValidationPolicy(score_regression_threshold=-1)
