"""Database Consistency Checker: payload vs. persisted child, activity and progress."""

from progress_guard.validators.base import BaseCheck, CheckContext
from progress_guard.validators.models import ConsistencyCheckResult, ErrorCategory
from progress_guard.validators.status_transitions import allowed_transitions, is_valid_transition


class DatabaseConsistencyChecker(BaseCheck):
    """Verifies the payload is coherent with stored state.

    Every check is independent and always evaluated, so an inactive child is
    reported alongside a missing activity rather than instead of it.
    """

    @property
    def name(self) -> str:
        return "DatabaseConsistencyChecker"

    def run(self, ctx: CheckContext) -> list[ConsistencyCheckResult]:
        checks = []
        checks.extend(self._check_child(ctx))

        if ctx.activity_id is None:
            # No usable activity id survived schema validation
            return checks

        checks.extend(self._check_activity(ctx))

        if ctx.snapshot.progress is not None:
            checks.extend(self._check_status_transition(ctx))
            checks.extend(self._check_score_regression(ctx))

        return checks

    def _check_child(self, ctx: CheckContext) -> list[ConsistencyCheckResult]:
        child = ctx.snapshot.child
        return [
            self._result(
                "child_exists",
                passed=child is not None,
                ok_message="Child profile found",
                fail_message="Child profile not found",
                category=ErrorCategory.NOT_FOUND,
                data={"childId": ctx.child_id},
            ),
            self._result(
                "child_active",
                passed=child is not None and child.is_active,
                ok_message="Child profile is active",
                fail_message="Child profile is not active",
                data={"childId": ctx.child_id},
            ),
        ]

    def _check_activity(self, ctx: CheckContext) -> list[ConsistencyCheckResult]:
        activity = ctx.snapshot.activity
        owner = activity.child_id if activity is not None else None
        return [
            self._result(
                "activity_exists",
                passed=activity is not None,
                ok_message="Activity found",
                fail_message="Activity not found",
                category=ErrorCategory.NOT_FOUND,
                data={"activityId": ctx.activity_id},
            ),
            self._result(
                "activity_belongs_to_child",
                passed=owner == ctx.child_id,
                ok_message="Activity belongs to child",
                fail_message="Activity does not belong to child",
                data={"activityId": ctx.activity_id, "childId": ctx.child_id},
            ),
        ]

    def _check_status_transition(self, ctx: CheckContext) -> list[ConsistencyCheckResult]:
        requested = ctx.payload.status
        if requested is None:
            return []

        current = ctx.snapshot.progress.status
        allowed = allowed_transitions(current)
        valid = is_valid_transition(current, requested)
        return [self._result(
            "valid_status_transition",
            passed=valid,
            ok_message=f"Valid status transition from {current.value} to {requested.value}",
            fail_message=f"Invalid status transition from {current.value} to {requested.value}",
            data={"from": current.value, "to": requested.value, "valid": [s.value for s in allowed]},
            suggestion=f"Allowed transitions from {current.value}: {', '.join(s.value for s in allowed) or 'none'}",
        )]

    def _check_score_regression(self, ctx: CheckContext) -> list[ConsistencyCheckResult]:
        """A large score drop between updates is anomalous for progress."""
        new_score = ctx.payload.score
        previous = ctx.snapshot.progress.score
        if new_score is None or previous <= 0:
            return []

        decrease = previous - new_score
        significant = decrease > ctx.policy.score_regression_threshold
        return [self._result(
            "score_regression",
            passed=not significant,
            ok_message="Score progression is normal",
            fail_message=f"Significant score decrease detected: {previous:g} -> {new_score:g}",
            data={
                "previousScore": previous,
                "newScore": new_score,
                "decrease": decrease,
                "threshold": ctx.policy.score_regression_threshold,
            },
        )]
