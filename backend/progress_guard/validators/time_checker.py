"""Time Consistency Checker: session timing arithmetic and event chronology."""

from progress_guard.validators.base import BaseCheck, CheckContext
from progress_guard.validators.models import ConsistencyCheckResult


class TimeConsistencyChecker(BaseCheck):
    """Validates reported time against the session trace that came with it."""

    @property
    def name(self) -> str:
        return "TimeConsistencyChecker"

    def run(self, ctx: CheckContext) -> list[ConsistencyCheckResult]:
        if ctx.payload.session_data is None:
            return []

        checks = []
        session = ctx.payload.session_data

        # ── 1. Session duration arithmetic ──
        if session.end_time is not None:
            checks.extend(self._check_session_durations(ctx))

        # ── 2. Focus event chronology ──
        if session.focus_events:
            checks.append(self._check_focus_chronology(ctx))

        return checks

    def _check_session_durations(self, ctx: CheckContext) -> list[ConsistencyCheckResult]:
        session = ctx.payload.session_data
        time_spent = ctx.payload.time_spent

        session_duration = (session.end_time - session.start_time).total_seconds()
        active_duration = session_duration - session.paused_duration

        checks = [
            self._result(
                "positive_session_duration",
                passed=session_duration > 0,
                ok_message="Session duration is positive",
                fail_message="Session duration must be positive",
                data={
                    "sessionDuration": session_duration,
                    "startTime": session.start_time.isoformat(),
                    "endTime": session.end_time.isoformat(),
                },
            ),
            self._result(
                "positive_active_duration",
                passed=active_duration > 0,
                ok_message="Active duration is positive",
                fail_message="Active duration must be positive after accounting for pauses",
                data={
                    "activeDuration": active_duration,
                    "sessionDuration": session_duration,
                    "pausedDuration": session.paused_duration,
                },
            ),
        ]

        if time_spent is None:
            return checks

        difference = abs(time_spent - active_duration)
        tolerance = max(
            active_duration * ctx.policy.time_tolerance_ratio,
            ctx.policy.time_tolerance_min_seconds,
        )
        checks.append(self._result(
            "time_spent_session_consistency",
            passed=difference <= tolerance,
            ok_message="Time spent is consistent with session duration",
            fail_message=(
                f"Time spent ({time_spent}s) differs significantly from "
                f"active session duration ({active_duration:g}s)"
            ),
            data={
                "timeSpent": time_spent,
                "activeDuration": active_duration,
                "difference": difference,
                "tolerance": tolerance,
            },
        ))
        return checks

    def _check_focus_chronology(self, ctx: CheckContext) -> ConsistencyCheckResult:
        """Supplied order must already be non-decreasing in time.

        Out-of-order events point at client clock tampering or replayed events.
        """
        events = ctx.payload.session_data.focus_events
        first_out_of_order = next(
            (i + 1 for i in range(len(events) - 1) if events[i + 1].timestamp < events[i].timestamp),
            None,
        )
        in_order = first_out_of_order is None

        data = {"eventCount": len(events)}
        if not in_order:
            data["firstOutOfOrderIndex"] = first_out_of_order

        return self._result(
            "focus_events_chronology",
            passed=in_order,
            ok_message="Focus events are in chronological order",
            fail_message="Focus events are not in chronological order",
            data=data,
        )
