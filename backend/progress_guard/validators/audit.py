"""Progress Record Auditor: read-only anomaly detection over stored progress records.

Reports what is wrong with persisted records. It does not propose or apply
repairs; what to do about an inconsistency is the caller's decision.
"""

from typing import Any, Literal

from progress_guard.models.progress import ProgressRecord, ProgressStatus
from progress_guard.validators.models import CamelModel


class Inconsistency(CamelModel):
    """One anomaly found in a stored progress record."""

    child_id: str
    activity_id: str
    rule: str
    description: str
    expected: Any
    actual: Any
    severity: Literal["low", "medium", "high"]


class ProgressRecordAuditor:
    """Checks stored progress records for internal consistency."""

    @property
    def name(self) -> str:
        return "ProgressRecordAuditor"

    def audit(self, records: list[ProgressRecord]) -> list[Inconsistency]:
        findings = []
        for record in records:
            findings.extend(self._audit_record(record))
        return findings

    def _audit_record(self, record: ProgressRecord) -> list[Inconsistency]:
        findings = []

        if record.time_spent < 0:
            findings.append(self._finding(
                record, "negative_time_spent",
                description="Negative time spent in progress record",
                expected="non-negative time spent",
                actual=record.time_spent,
                severity="high",
            ))

        if record.score < 0 or record.score > 100:
            findings.append(self._finding(
                record, "score_out_of_range",
                description="Invalid score in progress record",
                expected="score between 0 and 100",
                actual=record.score,
                severity="medium",
            ))

        if record.status == ProgressStatus.COMPLETED and record.completed_at is None:
            findings.append(self._finding(
                record, "completed_without_timestamp",
                description="Completed progress record missing completion date",
                expected="completion date present",
                actual=None,
                severity="medium",
            ))

        return findings

    @staticmethod
    def _finding(record: ProgressRecord, rule: str, **fields: Any) -> Inconsistency:
        return Inconsistency(
            child_id=record.child_id,
            activity_id=record.activity_id,
            rule=rule,
            **fields,
        )
