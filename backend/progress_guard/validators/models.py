"""Validation models: severities, error codes, check results and the aggregated result.

All validation is deterministic: same payload, same stored state and same clock
give the same result. Expected failures are values in a ValidationResult;
nothing here raises for invalid telemetry.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from progress_guard.errors import SystemValidationFailure


class Severity(str, Enum):
    """How a finding affects persistence."""

    ERROR = "error"      # Blocks persistence
    WARNING = "warning"  # Fed to anomaly review, never blocks
    SYSTEM = "system"    # We could not check the data at all


class ErrorCategory(str, Enum):
    """Caller-side classification, used to pick a transport status code."""

    STRUCTURAL = "structural"
    NOT_FOUND = "not_found"
    INCONSISTENT = "inconsistent"
    SYSTEM = "system"


class ErrorCode(str, Enum):
    """Deterministic codes for every finding.

    Naming convention: CATEGORY_SPECIFIC_ISSUE
    """

    # Schema errors
    SCHEMA_MISSING_FIELD = "SCHEMA_MISSING_FIELD"
    SCHEMA_INVALID_TYPE = "SCHEMA_INVALID_TYPE"
    SCHEMA_INVALID_VALUE = "SCHEMA_INVALID_VALUE"
    SCHEMA_OUT_OF_RANGE = "SCHEMA_OUT_OF_RANGE"
    SCHEMA_INVALID_PRECISION = "SCHEMA_INVALID_PRECISION"
    SCHEMA_TOO_MANY_ITEMS = "SCHEMA_TOO_MANY_ITEMS"
    SCHEMA_FUTURE_TIMESTAMP = "SCHEMA_FUTURE_TIMESTAMP"
    SCHEMA_INVALID_TIME_RANGE = "SCHEMA_INVALID_TIME_RANGE"
    SCHEMA_COMPLETED_WITHOUT_SCORE = "SCHEMA_COMPLETED_WITHOUT_SCORE"
    SCHEMA_PAUSE_RESUME_MISMATCH = "SCHEMA_PAUSE_RESUME_MISMATCH"

    # Consistency / business check failures
    CONSISTENCY_CHECK_FAILED = "CONSISTENCY_CHECK_FAILED"

    # Heuristic signals
    HEURISTIC_FLAGGED = "HEURISTIC_FLAGGED"

    # Infrastructure
    VALIDATION_SYSTEM_ERROR = "VALIDATION_SYSTEM_ERROR"


class CamelModel(BaseModel):
    """Result models serialize with camelCase names for callers."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )


class ValidationError(CamelModel):
    """A single blocking finding."""

    field: str
    message: str
    code: ErrorCode
    severity: Severity = Severity.ERROR
    category: ErrorCategory = ErrorCategory.STRUCTURAL
    check: Optional[str] = None  # Name of the consistency check, if any


class ValidationWarning(CamelModel):
    """A non-blocking finding intended for anomaly review."""

    field: str
    message: str
    code: ErrorCode = ErrorCode.HEURISTIC_FLAGGED
    severity: Severity = Severity.WARNING
    suggestion: Optional[str] = None


class ConsistencyCheckResult(CamelModel):
    """Outcome of one named rule. Produced once per rule evaluated."""

    check: str
    passed: bool
    message: str
    severity: Severity = Severity.ERROR
    category: ErrorCategory = ErrorCategory.INCONSISTENT
    suggestion: Optional[str] = None
    data: Optional[dict[str, Any]] = None


class ValidationResult(CamelModel):
    """Complete validation result: the output of the validation engine."""

    is_valid: bool
    errors: list[ValidationError] = Field(default_factory=list)
    warnings: list[ValidationWarning] = Field(default_factory=list)
    sanitized_data: Optional[dict[str, Any]] = None
    consistency_checks: list[ConsistencyCheckResult] = Field(default_factory=list)
    system_error: bool = False
    summary: dict[str, int] = Field(
        default_factory=lambda: {"errors": 0, "warnings": 0, "checks_run": 0, "checks_failed": 0},
    )

    @classmethod
    def build(
        cls,
        schema_errors: list[ValidationError],
        checks: list[ConsistencyCheckResult],
        sanitized_data: Optional[dict[str, Any]],
    ) -> "ValidationResult":
        """Merge schema errors and check outcomes into one result.

        Failed error-severity checks become errors tagged with the check name.
        Failed warning-severity checks become warnings and never affect
        ``is_valid``.
        """
        errors = list(schema_errors)
        warnings: list[ValidationWarning] = []

        for check in checks:
            if check.passed:
                continue
            if check.severity == Severity.WARNING:
                warnings.append(ValidationWarning(
                    field=check.check,
                    message=check.message,
                    suggestion=check.suggestion,
                ))
            else:
                errors.append(ValidationError(
                    field=check.check,
                    message=check.message,
                    code=ErrorCode.CONSISTENCY_CHECK_FAILED,
                    category=check.category,
                    check=check.check,
                ))

        return cls(
            is_valid=len(errors) == 0,
            errors=errors,
            warnings=warnings,
            sanitized_data=sanitized_data,
            consistency_checks=checks,
            summary=cls._summarize(errors, warnings, checks),
        )

    @classmethod
    def system_failure(
        cls,
        message: str,
        sanitized_data: Optional[dict[str, Any]] = None,
        checks: Optional[list[ConsistencyCheckResult]] = None,
    ) -> "ValidationResult":
        """Result for when the payload could not be checked at all."""
        errors = [ValidationError(
            field="system",
            message=message,
            code=ErrorCode.VALIDATION_SYSTEM_ERROR,
            severity=Severity.SYSTEM,
            category=ErrorCategory.SYSTEM,
        )]
        checks = checks or []
        return cls(
            is_valid=False,
            errors=errors,
            sanitized_data=sanitized_data,
            consistency_checks=checks,
            system_error=True,
            summary=cls._summarize(errors, [], checks),
        )

    @staticmethod
    def _summarize(
        errors: list[ValidationError],
        warnings: list[ValidationWarning],
        checks: list[ConsistencyCheckResult],
    ) -> dict[str, int]:
        return {
            "errors": len(errors),
            "warnings": len(warnings),
            "checks_run": len(checks),
            "checks_failed": sum(1 for c in checks if not c.passed),
        }

    def get_check(self, name: str) -> Optional[ConsistencyCheckResult]:
        """Look up a check outcome by name."""
        return next((c for c in self.consistency_checks if c.check == name), None)

    def blocking_category(self) -> Optional[ErrorCategory]:
        """Most significant reason this result blocks persistence, if any.

        Precedence: system > structural > not_found > inconsistent.
        """
        if self.system_error:
            return ErrorCategory.SYSTEM
        categories = {ErrorCategory(e.category) for e in self.errors}
        for category in (ErrorCategory.STRUCTURAL, ErrorCategory.NOT_FOUND, ErrorCategory.INCONSISTENT):
            if category in categories:
                return category
        return None

    def raise_for_system_error(self) -> None:
        """Raise SystemValidationFailure if this result is a system error."""
        if self.system_error:
            raise SystemValidationFailure(self.errors[0].message if self.errors else "validation failed")
