"""Schema Validator: structural checks on the incoming progress payload.

Field-level shape, type and range rules live on the pydantic payload models.
This module runs them, translates every failure into a ValidationError
(all failures are collected, never fail-fast), applies the composite rules
that span several fields, and produces the sanitized projection.

When the payload is invalid, the top-level fields that did validate are kept
as a typed ProgressUpdateFields, so later checks still run on their own inputs.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from progress_guard.models.progress import (
    ProgressStatus,
    ProgressUpdateFields,
    ProgressUpdatePayload,
)
from progress_guard.validators.models import ErrorCategory, ErrorCode, Severity, ValidationError

# pydantic error type → our code
_ERROR_CODES = {
    "missing": ErrorCode.SCHEMA_MISSING_FIELD,
    "future_timestamp": ErrorCode.SCHEMA_FUTURE_TIMESTAMP,
    "end_before_start": ErrorCode.SCHEMA_INVALID_TIME_RANGE,
    "score_precision": ErrorCode.SCHEMA_INVALID_PRECISION,
    "bool_not_number": ErrorCode.SCHEMA_INVALID_TYPE,
    "too_long": ErrorCode.SCHEMA_TOO_MANY_ITEMS,
    "greater_than": ErrorCode.SCHEMA_OUT_OF_RANGE,
    "greater_than_equal": ErrorCode.SCHEMA_OUT_OF_RANGE,
    "less_than": ErrorCode.SCHEMA_OUT_OF_RANGE,
    "less_than_equal": ErrorCode.SCHEMA_OUT_OF_RANGE,
    "finite_number": ErrorCode.SCHEMA_OUT_OF_RANGE,
    "int_from_float": ErrorCode.SCHEMA_INVALID_TYPE,
    "enum": ErrorCode.SCHEMA_INVALID_VALUE,
    "literal_error": ErrorCode.SCHEMA_INVALID_VALUE,
}

# python name → wire name, for payloads built with python names
_WIRE_NAMES = {name: info.alias for name, info in ProgressUpdatePayload.model_fields.items() if info.alias}


@dataclass
class SchemaOutcome:
    """Output of structural validation."""

    errors: list[ValidationError] = field(default_factory=list)
    payload: Optional[ProgressUpdatePayload] = None  # Set only when the payload is valid
    fields: ProgressUpdateFields = field(default_factory=ProgressUpdateFields)
    sanitized_data: dict[str, Any] = field(default_factory=dict)

    @property
    def passed(self) -> bool:
        return not self.errors

    @property
    def activity_id(self) -> Optional[str]:
        return self.fields.activity_id


class SchemaValidator:
    """Validates the structural integrity of a progress update payload."""

    @property
    def name(self) -> str:
        return "SchemaValidator"

    def validate(
        self,
        payload: Union[Mapping[str, Any], ProgressUpdatePayload],
        now: Optional[datetime] = None,
    ) -> SchemaOutcome:
        now = now or datetime.now(timezone.utc)
        data = self._as_dict(payload)
        context = {"now": now}
        outcome = SchemaOutcome()

        # 1. Field-level rules
        try:
            outcome.payload = ProgressUpdatePayload.model_validate(data, context=context)
            outcome.fields = outcome.payload
        except PydanticValidationError as exc:
            outcome.errors.extend(self._translate(exc))
            outcome.fields = self._salvage(data, exc, context)

        # 2. Composite rules
        outcome.errors.extend(self._check_completed_has_score(data, outcome.fields))
        outcome.errors.extend(self._check_pause_resume(outcome.fields))

        # 3. Sanitized projection, always built from validated values
        outcome.sanitized_data = outcome.fields.model_dump(
            mode="json", by_alias=True, exclude_none=True,
        )

        return outcome

    # ── Composite rules ──

    def _check_completed_has_score(
        self, data: dict, fields: ProgressUpdateFields
    ) -> list[ValidationError]:
        # An invalid score is already reported; only a missing one is flagged here
        if fields.status == ProgressStatus.COMPLETED and data.get("score") is None:
            return [self._error(
                code=ErrorCode.SCHEMA_COMPLETED_WITHOUT_SCORE,
                message="Score is required when marking activity as completed",
                field="score",
            )]
        return []

    def _check_pause_resume(self, fields: ProgressUpdateFields) -> list[ValidationError]:
        pauses, resumes = fields.pause_count, fields.resume_count
        if pauses is None or resumes is None:
            return []
        if pauses > resumes + 1:
            return [self._error(
                code=ErrorCode.SCHEMA_PAUSE_RESUME_MISMATCH,
                message=f"Pause count ({pauses}) cannot exceed resume count ({resumes}) by more than 1",
                field="pauseCount",
            )]
        return []

    # ── Helpers ──

    def _translate(self, exc: PydanticValidationError) -> list[ValidationError]:
        errors = []
        for detail in exc.errors():
            error_type = detail["type"]
            code = _ERROR_CODES.get(error_type)
            if code is None:
                code = (
                    ErrorCode.SCHEMA_INVALID_TYPE
                    if error_type.endswith(("_type", "_parsing"))
                    else ErrorCode.SCHEMA_INVALID_VALUE
                )
            errors.append(self._error(
                code=code,
                message=detail["msg"],
                field=".".join(str(part) for part in detail["loc"]) or "payload",
            ))
        return errors

    def _salvage(self, data: dict, exc: PydanticValidationError, context: dict) -> ProgressUpdateFields:
        """Keep the top-level fields that validated; drop every field with an error."""
        invalid = {detail["loc"][0] for detail in exc.errors() if detail["loc"]}
        remainder = {k: v for k, v in data.items() if k not in invalid}
        return ProgressUpdateFields.model_validate(remainder, context=context)

    @staticmethod
    def _as_dict(payload: Union[Mapping[str, Any], ProgressUpdatePayload]) -> dict:
        """Top-level keys normalized to wire names."""
        if isinstance(payload, ProgressUpdateFields):
            return payload.model_dump(by_alias=True, exclude_none=True)
        if isinstance(payload, Mapping):
            return {_WIRE_NAMES.get(k, k): v for k, v in payload.items()}
        return {}

    @staticmethod
    def _error(code: ErrorCode, message: str, field: str) -> ValidationError:
        return ValidationError(
            field=field,
            message=message,
            code=code,
            severity=Severity.ERROR,
            category=ErrorCategory.STRUCTURAL,
        )
