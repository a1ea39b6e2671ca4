"""Validation policy thresholds.

These are policy constants observed in production behavior, not values
derived from a model. Defaults come from Settings; pass a ValidationPolicy
to the engine to override any of them.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from progress_guard.config import Settings, get_settings


class ValidationPolicy(BaseModel):
    """Thresholds used by the consistency checks and heuristics."""

    model_config = ConfigDict(frozen=True)

    # Database consistency
    score_regression_threshold: float = Field(default=20.0, ge=0)

    # Business logic
    min_time_ratio: float = Field(default=0.1, ge=0)
    max_time_ratio: float = Field(default=5.0, gt=0)
    help_count_tolerance: int = Field(default=1, ge=0)

    # Session timing
    time_tolerance_ratio: float = Field(default=0.1, ge=0)
    time_tolerance_min_seconds: float = Field(default=5.0, ge=0)

    # Heuristics
    help_penalty_per_request: float = Field(default=2.0, ge=0)
    help_penalty_cap: float = Field(default=20.0, ge=0)
    score_help_tolerance: float = Field(default=5.0, ge=0)
    quick_score_max_seconds: int = Field(default=30, ge=0)
    quick_score_min_score: float = Field(default=95.0, ge=0, le=100)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ValidationPolicy":
        settings = settings or get_settings()
        return cls(
            score_regression_threshold=settings.SCORE_REGRESSION_THRESHOLD,
            min_time_ratio=settings.MIN_TIME_RATIO,
            max_time_ratio=settings.MAX_TIME_RATIO,
            help_count_tolerance=settings.HELP_COUNT_TOLERANCE,
            time_tolerance_ratio=settings.TIME_TOLERANCE_RATIO,
            time_tolerance_min_seconds=settings.TIME_TOLERANCE_MIN_SECONDS,
            help_penalty_per_request=settings.HELP_PENALTY_PER_REQUEST,
            help_penalty_cap=settings.HELP_PENALTY_CAP,
            score_help_tolerance=settings.SCORE_HELP_TOLERANCE,
            quick_score_max_seconds=settings.QUICK_SCORE_MAX_SECONDS,
            quick_score_min_score=settings.QUICK_SCORE_MIN_SCORE,
        )
