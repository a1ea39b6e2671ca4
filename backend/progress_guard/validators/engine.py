"""Validation Engine: orchestrates schema validation and all checkers into one result.

This is the main entry point for progress validation. It reads the stored
state it needs once (child, activity, existing progress), runs every checker
against that snapshot and produces a ValidationResult. It never writes:
whether to persist is the caller's decision.

Usage:
    engine = ValidationEngine(store)
    result = await engine.validate(child_id, payload)
    if result.is_valid:
        # persist result.sanitized_data
"""

import asyncio
import time
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional, Union

import structlog

from progress_guard.models.progress import ProgressUpdatePayload
from progress_guard.services.store import ProgressDataStore
from progress_guard.validators.audit import Inconsistency, ProgressRecordAuditor
from progress_guard.validators.base import BaseCheck, CheckContext, StoreSnapshot
from progress_guard.validators.business_checker import BusinessLogicChecker
from progress_guard.validators.database_checker import DatabaseConsistencyChecker
from progress_guard.validators.models import ConsistencyCheckResult, ValidationResult
from progress_guard.validators.policy import ValidationPolicy
from progress_guard.validators.schema_validator import SchemaValidator
from progress_guard.validators.score_heuristics import ScoreHeuristics
from progress_guard.validators.time_checker import TimeConsistencyChecker

logger = structlog.get_logger()

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ValidationEngine:
    """Validates progress updates against structure, stored state and heuristics.

    Design principles:
        - Stateless: concurrent calls share nothing but the injected store
        - Read-only: three store reads per call, no writes
        - Complete: every checker runs, so one result lists every problem
        - Honest: a failed read is a system error, never valid or invalid data
    """

    def __init__(
        self,
        store: ProgressDataStore,
        policy: Optional[ValidationPolicy] = None,
        checkers: Optional[list[BaseCheck]] = None,
        clock: Clock = utc_now,
    ):
        self.store = store
        self.policy = policy or ValidationPolicy.from_settings()
        self.schema_validator = SchemaValidator()
        self.checkers = checkers if checkers is not None else self._default_checkers()
        self.auditor = ProgressRecordAuditor()
        self._clock = clock

    @staticmethod
    def _default_checkers() -> list[BaseCheck]:
        """Create the default checker chain in execution order."""
        return [
            DatabaseConsistencyChecker(),  # Entities exist, ownership, transitions, regression
            BusinessLogicChecker(),        # Time vs. estimate, help and pause/resume bookkeeping
            TimeConsistencyChecker(),      # Session arithmetic, focus chronology
            ScoreHeuristics(),             # Warning-grade anti-gaming signals
        ]

    async def validate(
        self,
        child_id: str,
        payload: Union[Mapping[str, Any], ProgressUpdatePayload],
    ) -> ValidationResult:
        """Validate one progress update for a child.

        Args:
            child_id: The child reporting progress
            payload: Raw payload (camelCase mapping) or a payload model

        Returns:
            ValidationResult; ``system_error`` is set when stored state could
            not be read or a checker crashed
        """
        start_time = time.perf_counter()
        now = self._clock()
        timings: dict[str, float] = {}

        # 1. Structure
        stage_start = time.perf_counter()
        schema = self.schema_validator.validate(payload, now=now)
        timings[self.schema_validator.name] = self._elapsed_ms(stage_start)

        # 2. Stored state
        stage_start = time.perf_counter()
        try:
            snapshot = await self._load_snapshot(child_id, schema.activity_id)
        except Exception as e:
            logger.error(
                "progress_store_read_failed",
                child_id=child_id,
                activity_id=schema.activity_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return ValidationResult.system_failure(
                "Unable to read stored progress state; the update could not be validated",
                sanitized_data=schema.sanitized_data,
            )
        timings["store_reads"] = self._elapsed_ms(stage_start)

        # 3. Consistency, business and heuristic checks
        ctx = CheckContext(
            child_id=child_id,
            activity_id=schema.activity_id,
            payload=schema.fields,
            snapshot=snapshot,
            policy=self.policy,
            now=now,
        )
        checks: list[ConsistencyCheckResult] = []
        for checker in self.checkers:
            stage_start = time.perf_counter()
            try:
                checks.extend(checker.run(ctx))
            except Exception as e:
                logger.error(
                    "progress_check_failed",
                    checker=checker.name,
                    child_id=child_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                return ValidationResult.system_failure(
                    f"Internal validation error in {checker.name}",
                    sanitized_data=schema.sanitized_data,
                    checks=checks,
                )
            finally:
                timings[checker.name] = self._elapsed_ms(stage_start)

        # 4. Aggregate
        result = ValidationResult.build(schema.errors, checks, schema.sanitized_data)

        logger.info(
            "progress_validation_complete",
            child_id=child_id,
            activity_id=schema.activity_id,
            is_valid=result.is_valid,
            summary=result.summary,
            failed_checks=[c.check for c in checks if not c.passed],
            duration_ms=self._elapsed_ms(start_time),
            stage_timings=timings,
        )

        return result

    # Name used by callers that speak in terms of progress updates
    validate_progress_update = validate

    async def audit_child(self, child_id: str) -> list[Inconsistency]:
        """Report anomalies in a child's stored progress records.

        Store failures propagate as DataStoreError.
        """
        records = await self.store.list_progress_records(child_id)
        findings = self.auditor.audit(records)
        logger.info("progress_audit_complete", child_id=child_id, records=len(records), findings=len(findings))
        return findings

    async def _load_snapshot(self, child_id: str, activity_id: Optional[str]) -> StoreSnapshot:
        """Read child, activity and existing progress concurrently."""
        if activity_id is None:
            child = await self.store.get_child(child_id)
            return StoreSnapshot(child=child)

        child, activity, progress = await asyncio.gather(
            self.store.get_child(child_id),
            self.store.get_activity(activity_id),
            self.store.get_progress_record(child_id, activity_id),
        )
        return StoreSnapshot(child=child, activity=activity, progress=progress)

    @staticmethod
    def _elapsed_ms(start: float) -> float:
        return round((time.perf_counter() - start) * 1000, 2)
