"""Health check endpoint."""

import time
from fastapi import APIRouter, Request

from progress_guard.models.responses import HealthResponse, HealthDependency

router = APIRouter()

_start_time = time.time()


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """System health check with data store status."""
    dependencies = {}

    try:
        store = request.app.state.store
        start = time.time()
        await store.ping()
        latency = (time.time() - start) * 1000
        dependencies["store"] = HealthDependency(
            status="healthy",
            latency_ms=round(latency, 2),
            message=type(store).__name__,
        )
    except Exception as e:
        dependencies["store"] = HealthDependency(status="unhealthy", message=str(e))

    if all(d.status == "healthy" for d in dependencies.values()):
        status = "healthy"
    else:
        status = "unhealthy"

    return HealthResponse(
        status=status,
        uptime_seconds=round(time.time() - _start_time, 2),
        dependencies=dependencies,
    )
