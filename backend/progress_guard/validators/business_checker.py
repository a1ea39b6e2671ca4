"""Business Logic Checker: time spent vs. estimate, help and pause/resume bookkeeping."""

from progress_guard.validators.base import BaseCheck, CheckContext
from progress_guard.validators.models import ConsistencyCheckResult


class BusinessLogicChecker(BaseCheck):
    """Cross-field rules that need the activity estimate or session lists."""

    @property
    def name(self) -> str:
        return "BusinessLogicChecker"

    def run(self, ctx: CheckContext) -> list[ConsistencyCheckResult]:
        checks = []

        # ── 1. Time spent vs. estimated duration ──
        activity = ctx.snapshot.activity
        if (
            ctx.payload.time_spent is not None
            and activity is not None
            and activity.estimated_duration_seconds > 0
        ):
            checks.append(self._check_reasonable_time(ctx))

        # ── 2. Help request count vs. session log ──
        session = ctx.payload.session_data
        if ctx.payload.help_requests_count is not None and session is not None:
            checks.append(self._check_help_requests(ctx))

        # ── 3. Pause/resume bookkeeping ──
        if ctx.payload.pause_count is not None and ctx.payload.resume_count is not None:
            checks.append(self._check_pause_resume(ctx))

        return checks

    def _check_reasonable_time(self, ctx: CheckContext) -> ConsistencyCheckResult:
        time_spent = ctx.payload.time_spent
        estimated = ctx.snapshot.activity.estimated_duration_seconds
        ratio = time_spent / estimated

        policy = ctx.policy
        reasonable = policy.min_time_ratio <= ratio <= policy.max_time_ratio
        direction = "too short" if ratio < policy.min_time_ratio else "too long"

        return self._result(
            "reasonable_time_spent",
            passed=reasonable,
            ok_message="Time spent is within reasonable bounds",
            fail_message=(
                f"Time spent ({time_spent}s) is {direction} for "
                f"estimated duration ({estimated}s)"
            ),
            data={
                "timeSpent": time_spent,
                "estimated": estimated,
                "ratio": ratio,
                "direction": None if reasonable else direction,
            },
        )

    def _check_help_requests(self, ctx: CheckContext) -> ConsistencyCheckResult:
        """Tolerates one request logged but not yet counted, or vice versa."""
        reported = ctx.payload.help_requests_count
        logged = len(ctx.payload.session_data.help_requests)
        consistent = abs(reported - logged) <= ctx.policy.help_count_tolerance

        return self._result(
            "help_request_consistency",
            passed=consistent,
            ok_message="Help request count is consistent with session data",
            fail_message=f"Help request count mismatch: payload={reported}, session={logged}",
            data={"payloadCount": reported, "sessionCount": logged},
        )

    def _check_pause_resume(self, ctx: CheckContext) -> ConsistencyCheckResult:
        """One trailing unresolved pause is allowed."""
        pauses = ctx.payload.pause_count
        resumes = ctx.payload.resume_count
        valid = pauses <= resumes + 1

        return self._result(
            "pause_resume_logic",
            passed=valid,
            ok_message="Pause/resume counts are logically consistent",
            fail_message=f"Invalid pause/resume logic: pauses={pauses}, resumes={resumes}",
            data={"pauseCount": pauses, "resumeCount": resumes},
        )
