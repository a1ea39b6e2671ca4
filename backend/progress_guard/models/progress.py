"""Progress telemetry payload and stored-entity models.

The payload models describe exactly what a client may report for one
progress update. They are closed: unknown fields are stripped, and every
nested session record has a fixed shape. Wire names are camelCase.

Timestamps are normalized to UTC (naive values are read as UTC) and must not
lie in the future relative to the ``now`` passed in the validation context.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Literal, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError


class ProgressStatus(str, Enum):
    """Lifecycle status of one child's attempt at one activity."""

    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    PAUSED = "PAUSED"


# Payload bounds
MAX_TIME_SPENT_SECONDS = 14400  # 4 hours
MAX_PAUSED_DURATION_SECONDS = 7200  # 2 hours
MAX_FOCUS_EVENTS = 1000
MAX_DIFFICULTY_ADJUSTMENTS = 50
MAX_HELP_REQUESTS = 100
MAX_INTERACTION_EVENTS = 5000
MAX_HELP_REQUESTS_COUNT = 100
MAX_PAUSE_RESUME_COUNT = 1000
MAX_HELP_RESPONSE_SECONDS = 3600


def _utc_not_in_future(value: datetime, info: ValidationInfo) -> datetime:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)

    now = (info.context or {}).get("now") or datetime.now(timezone.utc)
    if value > now:
        raise PydanticCustomError("future_timestamp", "Timestamp cannot be in the future")
    return value


Timestamp = Annotated[datetime, AfterValidator(_utc_not_in_future)]


def _reject_bool(value: Any) -> Any:
    # JSON true/false would otherwise pass lax int and float validation as 1/0
    if isinstance(value, bool):
        raise PydanticCustomError("bool_not_number", "Input should be a number, not a boolean")
    return value


class WireModel(BaseModel):
    """Base for camelCase wire models that strip unknown fields."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class FocusEvent(WireModel):
    type: Literal["focus", "blur"]
    timestamp: Timestamp


class DifficultyAdjustment(WireModel):
    from_difficulty: int = Field(ge=1, le=10)
    to_difficulty: int = Field(ge=1, le=10)
    reason: str = Field(max_length=500)
    timestamp: Timestamp

    @field_validator("from_difficulty", "to_difficulty", mode="before")
    @classmethod
    def reject_booleans(cls, value: Any) -> Any:
        return _reject_bool(value)


class HelpRequest(WireModel):
    question: str = Field(min_length=1, max_length=1000)
    timestamp: Timestamp
    resolved: bool = False
    response_time: Optional[int] = Field(default=None, ge=0, le=MAX_HELP_RESPONSE_SECONDS)

    @field_validator("response_time", mode="before")
    @classmethod
    def reject_booleans(cls, value: Any) -> Any:
        return _reject_bool(value)


class InteractionEvent(WireModel):
    type: Literal["click", "scroll", "input", "navigation"]
    element: Optional[str] = Field(default=None, max_length=200)
    timestamp: Timestamp
    data: Optional[dict[str, Any]] = None


class ActivitySessionData(WireModel):
    """Client-side trace of a single activity session."""

    start_time: Timestamp
    end_time: Optional[Timestamp] = None
    paused_duration: int = Field(default=0, ge=0, le=MAX_PAUSED_DURATION_SECONDS)
    focus_events: list[FocusEvent] = Field(default_factory=list, max_length=MAX_FOCUS_EVENTS)
    difficulty_adjustments: list[DifficultyAdjustment] = Field(
        default_factory=list, max_length=MAX_DIFFICULTY_ADJUSTMENTS
    )
    help_requests: list[HelpRequest] = Field(default_factory=list, max_length=MAX_HELP_REQUESTS)
    interaction_events: list[InteractionEvent] = Field(
        default_factory=list, max_length=MAX_INTERACTION_EVENTS
    )

    @field_validator("paused_duration", mode="before")
    @classmethod
    def reject_booleans(cls, value: Any) -> Any:
        return _reject_bool(value)

    @model_validator(mode="after")
    def check_end_after_start(self) -> "ActivitySessionData":
        if self.end_time is not None and self.end_time <= self.start_time:
            raise PydanticCustomError("end_before_start", "End time must be after start time")
        return self


class ProgressUpdateFields(WireModel):
    """Every progress update field, each one optional.

    Field rules are the same as on ProgressUpdatePayload. Used to keep the
    fields that did validate when the payload as a whole did not, so checks
    whose own inputs are valid still run.
    """

    activity_id: Optional[str] = Field(default=None, min_length=1, max_length=128)
    time_spent: Optional[int] = Field(default=None, ge=1, le=MAX_TIME_SPENT_SECONDS)
    score: Optional[float] = Field(default=None, ge=0, le=100, allow_inf_nan=False)
    status: Optional[ProgressStatus] = None
    session_data: Optional[ActivitySessionData] = None
    help_requests_count: Optional[int] = Field(default=None, ge=0, le=MAX_HELP_REQUESTS_COUNT)
    pause_count: Optional[int] = Field(default=None, ge=0, le=MAX_PAUSE_RESUME_COUNT)
    resume_count: Optional[int] = Field(default=None, ge=0, le=MAX_PAUSE_RESUME_COUNT)

    @field_validator(
        "time_spent", "score", "help_requests_count", "pause_count", "resume_count", mode="before",
    )
    @classmethod
    def reject_booleans(cls, value: Any) -> Any:
        return _reject_bool(value)

    @field_validator("score")
    @classmethod
    def check_score_precision(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and Decimal(str(value)).as_tuple().exponent < -2:
            raise PydanticCustomError("score_precision", "Score can have at most 2 decimal places")
        return value


class ProgressUpdatePayload(ProgressUpdateFields):
    """One self-reported progress update for a (child, activity) pair."""

    activity_id: str = Field(min_length=1, max_length=128)
    time_spent: int = Field(ge=1, le=MAX_TIME_SPENT_SECONDS)


# ── Stored entities (read-only to the engine) ──


class ChildRecord(WireModel):
    id: str
    is_active: bool = True


class ActivityRecord(WireModel):
    id: str
    estimated_duration_seconds: int
    plan_id: str
    child_id: str  # owner of the activity's study plan


class ProgressRecord(WireModel):
    child_id: str
    activity_id: str
    status: ProgressStatus = ProgressStatus.NOT_STARTED
    score: float = 0
    time_spent: int = 0
    completed_at: Optional[datetime] = None
