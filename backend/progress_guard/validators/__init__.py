"""Progress validation: deterministic checks on self-reported progress telemetry.

Usage:
    from progress_guard.validators import ValidationEngine

    engine = ValidationEngine(store)
    result = await engine.validate(child_id, payload)
    if not result.is_valid:
        # Reject, using result.blocking_category() to choose a response
"""

from progress_guard.validators.engine import ValidationEngine
from progress_guard.validators.models import (
    ConsistencyCheckResult,
    ErrorCategory,
    ErrorCode,
    Severity,
    ValidationError,
    ValidationResult,
    ValidationWarning,
)
from progress_guard.validators.policy import ValidationPolicy
from progress_guard.validators.status_transitions import allowed_transitions, is_valid_transition

__all__ = [
    "ValidationEngine",
    "ValidationPolicy",
    "ValidationResult",
    "ValidationError",
    "ValidationWarning",
    "ConsistencyCheckResult",
    "Severity",
    "ErrorCategory",
    "ErrorCode",
    "allowed_transitions",
    "is_valid_transition",
]
