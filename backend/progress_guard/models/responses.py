"""API response models."""

from pydantic import BaseModel
from typing import Optional, Literal

from progress_guard.validators.audit import Inconsistency
from progress_guard.validators.models import CamelModel


class AuditResponse(CamelModel):
    """Stored-record anomalies for one child."""

    child_id: str
    records_consistent: bool
    inconsistencies: list[Inconsistency] = []


class HealthDependency(BaseModel):
    """Health status of a single dependency."""

    status: Literal["healthy", "unhealthy", "degraded"]
    latency_ms: Optional[float] = None
    message: Optional[str] = None


class HealthResponse(BaseModel):
    """System health check response."""

    status: Literal["healthy", "unhealthy", "degraded"]
    version: str = "1.0.0"
    uptime_seconds: float
    dependencies: dict[str, HealthDependency]
