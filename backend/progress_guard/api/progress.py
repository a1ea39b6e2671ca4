"""Progress API: validate a progress update, audit stored progress."""

from typing import Any

from fastapi import APIRouter, Body, HTTPException, Request
from fastapi.responses import JSONResponse

import structlog

from progress_guard.errors import DataStoreError
from progress_guard.models.responses import AuditResponse
from progress_guard.validators import ErrorCategory, ValidationResult

logger = structlog.get_logger()

router = APIRouter()

# Blocking category → HTTP status. The engine only classifies; this is the transport's choice.
STATUS_CODES = {
    ErrorCategory.SYSTEM: 503,
    ErrorCategory.STRUCTURAL: 422,
    ErrorCategory.NOT_FOUND: 404,
    ErrorCategory.INCONSISTENT: 400,
}


def status_code_for(result: ValidationResult) -> int:
    category = result.blocking_category()
    if category is None:
        return 200
    return STATUS_CODES[category]


@router.post("/children/{child_id}/progress/validate")
async def validate_progress_update(
    child_id: str,
    request: Request,
    payload: dict[str, Any] = Body(...),
):
    """Validate a self-reported progress update without persisting it.

    The response body is always the full ValidationResult, so clients see
    every problem at once. Heuristic warnings are forwarded to the anomaly feed.
    """
    engine = request.app.state.engine
    result = await engine.validate(child_id, payload)

    if not result.system_error and result.warnings:
        activity_id = (result.sanitized_data or {}).get("activityId")
        await request.app.state.anomaly_feed.publish_result(child_id, activity_id, result)

    status_code = status_code_for(result)
    if status_code != 200:
        logger.info(
            "progress_update_rejected",
            child_id=child_id,
            status_code=status_code,
            errors=[e.code for e in result.errors],
        )

    return JSONResponse(
        status_code=status_code,
        content=result.model_dump(mode="json", by_alias=True),
    )


@router.get("/children/{child_id}/progress/audit", response_model=AuditResponse)
async def audit_progress(child_id: str, request: Request):
    """Report anomalies in a child's stored progress records."""
    engine = request.app.state.engine
    try:
        findings = await engine.audit_child(child_id)
    except DataStoreError as e:
        logger.error("progress_audit_failed", child_id=child_id, error=str(e))
        raise HTTPException(
            status_code=503,
            detail={"error": "store_unavailable", "message": "Stored progress could not be read"},
        )

    return AuditResponse(
        child_id=child_id,
        records_consistent=not findings,
        inconsistencies=findings,
    )
