"""
Post-commit activity events.

Ingestion publishes ``ActivityRecorded`` after a check-in or risk is
persisted; subscribers (the health engine) react synchronously, in the
order they subscribed, before ``publish`` returns. A subscriber exception
propagates to the publisher unchanged.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum

from pulse.store import now_iso

logger = logging.getLogger(__name__)


class ActivityType(StrEnum):
    CHECKIN = "checkin"
    RISK = "risk"


@dataclass(frozen=True)
class ActivityRecorded:
    """A check-in or risk was recorded for a project."""

    project_id: str
    activity_type: ActivityType
    record_id: str
    timestamp: str = field(default_factory=now_iso)


Subscriber = Callable[[ActivityRecorded], object]


class EventBus:
    """Synchronous in-process dispatch of activity events."""

    def __init__(self):
        self._subscribers: list[Subscriber] = []

    def subscribe(self, handler: Subscriber) -> None:
        if handler not in self._subscribers:
            self._subscribers.append(handler)

    def unsubscribe(self, handler: Subscriber) -> None:
        if handler in self._subscribers:
            self._subscribers.remove(handler)

    def publish(self, event: ActivityRecorded) -> list[object]:
        """Deliver to every subscriber. Returns their results in subscription order."""
        logger.debug(
            "Publishing %s %s for project %s",
            event.activity_type,
            event.record_id,
            event.project_id,
        )
        return [handler(event) for handler in list(self._subscribers)]

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)
