"""Score & anti-gaming heuristics.

These are warning-grade signals for anomaly review. They never block
persistence; callers decide whether to act on them.
"""

from progress_guard.validators.base import BaseCheck, CheckContext
from progress_guard.validators.models import ConsistencyCheckResult, Severity


class ScoreHeuristics(BaseCheck):
    """Plausibility of a score given help requests and time spent."""

    severity = Severity.WARNING

    @property
    def name(self) -> str:
        return "ScoreHeuristics"

    def run(self, ctx: CheckContext) -> list[ConsistencyCheckResult]:
        if ctx.payload.score is None:
            return []

        checks = []
        if ctx.payload.help_requests_count is not None:
            checks.append(self._check_score_vs_help(ctx))
        if ctx.payload.time_spent is not None:
            checks.append(self._check_quick_perfect_score(ctx))
        return checks

    def _check_score_vs_help(self, ctx: CheckContext) -> ConsistencyCheckResult:
        """Heavy reliance on help caps how high a score plausibly is."""
        policy = ctx.policy
        score = ctx.payload.score
        help_count = ctx.payload.help_requests_count

        penalty = min(help_count * policy.help_penalty_per_request, policy.help_penalty_cap)
        expected_max = 100 - penalty
        plausible = score <= expected_max + policy.score_help_tolerance

        return self._result(
            "score_help_consistency",
            passed=plausible,
            ok_message="Score is reasonable given help request count",
            fail_message=f"Score ({score:g}) seems high for {help_count} help requests",
            data={"score": score, "helpRequests": help_count, "expectedMax": expected_max},
            suggestion="Review the session for answers copied from help responses",
        )

    def _check_quick_perfect_score(self, ctx: CheckContext) -> ConsistencyCheckResult:
        policy = ctx.policy
        score = ctx.payload.score
        time_spent = ctx.payload.time_spent

        suspicious = time_spent < policy.quick_score_max_seconds and score >= policy.quick_score_min_score

        return self._result(
            "quick_perfect_score",
            passed=not suspicious,
            ok_message="Score and time spent appear reasonable",
            fail_message="Perfect score in very short time may indicate cheating",
            data={"score": score, "timeSpent": time_spent},
            suggestion="Compare against the learner's typical pace on similar activities",
        )
