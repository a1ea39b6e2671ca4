"""Anomaly feed: in-process pub/sub that carries heuristic warnings to review listeners."""

from typing import Callable, Awaitable, Dict, Set
from collections import defaultdict

import structlog

from progress_guard.models.events import AnomalyFlaggedEvent
from progress_guard.validators.models import ValidationResult

logger = structlog.get_logger()

# Type alias for event listeners
EventListener = Callable[[dict], Awaitable[None]]

WILDCARD = "*"


class AnomalyFeed:
    """Routes flagged progress updates to review listeners.

    Listeners subscribe per child id, or to every child with ``"*"``.
    Events are fire-and-forget: if a listener fails, it's removed.
    """

    def __init__(self, max_history: int = 100):
        self._listeners: Dict[str, Set[EventListener]] = defaultdict(set)
        self._event_history: Dict[str, list] = defaultdict(list)
        self._max_history = max_history  # Per child

    def subscribe(self, child_id: str, listener: EventListener) -> None:
        self._listeners[child_id].add(listener)
        logger.debug("anomaly_feed_subscribe", child_id=child_id, total_listeners=len(self._listeners[child_id]))

    def unsubscribe(self, child_id: str, listener: EventListener) -> None:
        self._listeners[child_id].discard(listener)
        if not self._listeners[child_id]:
            del self._listeners[child_id]

    async def publish(self, child_id: str, event: dict) -> None:
        """Publish an event to the child's listeners and to wildcard listeners."""
        self._event_history[child_id].append(event)
        if len(self._event_history[child_id]) > self._max_history:
            self._event_history[child_id] = self._event_history[child_id][-self._max_history:]

        for key in (child_id, WILDCARD):
            dead_listeners = set()
            for listener in list(self._listeners.get(key, set())):
                try:
                    await listener(event)
                except Exception as e:
                    logger.warning("anomaly_listener_failed", child_id=child_id, error=str(e))
                    dead_listeners.add(listener)

            for dead in dead_listeners:
                self._listeners[key].discard(dead)

    async def publish_result(self, child_id: str, activity_id: str, result: ValidationResult) -> int:
        """Publish one event per heuristic flagged in a validation result.

        Returns the number of events published.
        """
        published = 0
        for warning in result.warnings:
            check = result.get_check(warning.field)
            event = AnomalyFlaggedEvent(
                child_id=child_id,
                activity_id=activity_id,
                check=warning.field,
                message=warning.message,
                suggestion=warning.suggestion,
                data=check.data if check else None,
            )
            logger.info("progress_anomaly_flagged", child_id=child_id, activity_id=activity_id, check=warning.field)
            await self.publish(child_id, event.model_dump())
            published += 1
        return published

    def get_history(self, child_id: str) -> list[dict]:
        return list(self._event_history.get(child_id, []))

    def cleanup(self, child_id: str) -> None:
        self._listeners.pop(child_id, None)
        self._event_history.pop(child_id, None)
