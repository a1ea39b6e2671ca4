"""Event models published to the anomaly review feed."""

from pydantic import BaseModel
from typing import Any, Literal, Optional
from datetime import datetime, timezone


class BaseEvent(BaseModel):
    """Base event model for all review feed events."""

    type: str
    timestamp: datetime = None

    def model_post_init(self, __context):
        if self.timestamp is None:
            self.timestamp = datetime.now(timezone.utc)

    def model_dump(self, **kwargs):
        """Override to always serialize datetimes as ISO strings for JSON safety."""
        kwargs.setdefault("mode", "json")
        return super().model_dump(**kwargs)


class AnomalyFlaggedEvent(BaseEvent):
    """Emitted when a heuristic flags a progress update for review."""

    type: Literal["anomaly_flagged"] = "anomaly_flagged"
    child_id: str
    activity_id: Optional[str] = None
    check: str
    message: str
    suggestion: Optional[str] = None
    data: Optional[dict[str, Any]] = None
