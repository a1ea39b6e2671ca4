"""Exception types raised outside of normal validation results.

Expected validation failures are never raised; they are reported as values
in a ValidationResult. These exceptions cover infrastructure problems only.
"""

from typing import Optional


class ProgressGuardError(Exception):
    """Base class for all ProgressGuard exceptions."""


class DataStoreError(ProgressGuardError):
    """A data-store read or write could not be completed."""

    def __init__(self, operation: str, message: str, cause: Optional[BaseException] = None):
        super().__init__(f"{operation}: {message}")
        self.operation = operation
        self.cause = cause


class SystemValidationFailure(ProgressGuardError):
    """Raised on request when a validation result carries a system error."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
