"""Base checker: abstract class implementing the Strategy Pattern.

Each checker is a standalone, independently testable unit.
New checkers are added without modifying the engine.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from progress_guard.models.progress import (
    ActivityRecord,
    ChildRecord,
    ProgressRecord,
    ProgressUpdateFields,
)
from progress_guard.validators.models import ConsistencyCheckResult, ErrorCategory, Severity
from progress_guard.validators.policy import ValidationPolicy


@dataclass(frozen=True)
class StoreSnapshot:
    """Stored state read once per validation call."""

    child: Optional[ChildRecord] = None
    activity: Optional[ActivityRecord] = None
    progress: Optional[ProgressRecord] = None


@dataclass(frozen=True)
class CheckContext:
    """Everything a checker may look at. Checkers never mutate it."""

    child_id: str
    activity_id: Optional[str]
    payload: ProgressUpdateFields  # Only the fields that passed structural validation
    snapshot: StoreSnapshot
    policy: ValidationPolicy
    now: datetime


class BaseCheck(ABC):
    """Abstract base for all consistency checkers.

    Contract:
        - run() is deterministic and synchronous: same context → same output
        - run() returns one ConsistencyCheckResult per rule it evaluated
        - rules whose inputs are absent are skipped, not failed
        - No I/O; stored state arrives through the context snapshot
    """

    severity: Severity = Severity.ERROR

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for logging."""
        ...

    @abstractmethod
    def run(self, ctx: CheckContext) -> list[ConsistencyCheckResult]:
        ...

    # ── Helper Methods ──

    def _result(
        self,
        check: str,
        passed: bool,
        ok_message: str,
        fail_message: str,
        data: Optional[dict[str, Any]] = None,
        category: ErrorCategory = ErrorCategory.INCONSISTENT,
        suggestion: Optional[str] = None,
    ) -> ConsistencyCheckResult:
        """Convenience method to create a ConsistencyCheckResult."""
        return ConsistencyCheckResult(
            check=check,
            passed=passed,
            message=ok_message if passed else fail_message,
            severity=self.severity,
            category=category,
            suggestion=None if passed else suggestion,
            data=data,
        )
