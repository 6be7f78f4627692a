"""
Check-in and risk ingestion.

Each submission is validated, written as one new immutable record and then
announced on the event bus, where the health engine recomputes the
project's score before the call returns. If recomputation fails the record
stays persisted and RecomputeError is raised; the stale score heals on the
next successful ingestion or an explicit recompute.
"""

import logging
from dataclasses import dataclass
from typing import Any

from pulse.events import ActivityRecorded, ActivityType, EventBus
from pulse.health import HealthResult, HealthScoreEngine, ProjectNotFoundError
from pulse.models import CheckIn, CheckInKind, ClientFeedback, EmployeeUpdate, Risk, RiskStatus
from pulse.store import StateStore, new_id, now_iso
from pulse.validation import parse_severity, require_text, validate_checkin_fields

logger = logging.getLogger(__name__)


class RecomputeError(Exception):
    """The record was persisted but the health recomputation after it failed."""

    def __init__(self, project_id: str, record_id: str, cause: Exception):
        super().__init__(
            f"Recorded {record_id} but health recomputation for project {project_id} failed: {cause}"
        )
        self.project_id = project_id
        self.record_id = record_id
        self.cause = cause


@dataclass(frozen=True)
class CheckInReceipt:
    checkin: CheckIn
    health: HealthResult | None


@dataclass(frozen=True)
class RiskReceipt:
    risk: Risk
    health: HealthResult | None


class IngestionService:
    """Validates and persists activity, then triggers recomputation via the event bus."""

    def __init__(self, store: StateStore, events: EventBus):
        self.store = store
        self.events = events

    @classmethod
    def with_engine(cls, store: StateStore, engine: HealthScoreEngine) -> "IngestionService":
        """Wire a bus with the engine subscribed, the standard production setup."""
        bus = EventBus()
        bus.subscribe(engine.handle_activity)
        return cls(store, bus)

    def submit_checkin(
        self, project_id: str, author_id: str, kind: Any, fields: dict[str, Any]
    ) -> CheckInReceipt:
        """
        Record a check-in for a project.

        Raises:
            ValidationError: bad kind or field values (nothing written)
            ProjectNotFoundError: unknown project (nothing written)
            StoreError: store access failed
            RecomputeError: check-in written, score not updated
        """
        parsed_kind, payload = validate_checkin_fields(kind, fields)
        self._require_project(project_id)

        common = {
            "id": new_id(),
            "project_id": project_id,
            "author_id": author_id,
            "created_at": now_iso(),
        }
        checkin: CheckIn
        match parsed_kind:
            case CheckInKind.EMPLOYEE_UPDATE:
                checkin = EmployeeUpdate(**common, **payload)
            case CheckInKind.CLIENT_FEEDBACK:
                checkin = ClientFeedback(**common, **payload)

        self.store.insert_checkin(checkin)
        logger.info(
            "Check-in %s (%s) recorded for project %s by %s",
            checkin.id,
            parsed_kind.value,
            project_id,
            author_id,
        )

        health = self._announce(project_id, ActivityType.CHECKIN, checkin.id)
        return CheckInReceipt(checkin=checkin, health=health)

    def submit_risk(
        self,
        project_id: str,
        reporter_id: str,
        title: Any,
        severity: Any = None,
        mitigation: Any = None,
    ) -> RiskReceipt:
        """
        Record an OPEN risk for a project. Severity defaults to MEDIUM.

        Same error contract as submit_checkin.
        """
        risk_title = require_text("title", title)
        risk_mitigation = require_text("mitigation", mitigation)
        risk_severity = parse_severity(severity)
        self._require_project(project_id)

        risk = Risk(
            id=new_id(),
            project_id=project_id,
            reporter_id=reporter_id,
            title=risk_title,
            severity=risk_severity,
            mitigation=risk_mitigation,
            status=RiskStatus.OPEN,
            created_at=now_iso(),
        )
        self.store.insert_risk(risk)
        logger.info(
            "Risk %s (%s) recorded for project %s by %s",
            risk.id,
            risk.severity.value,
            project_id,
            reporter_id,
        )

        health = self._announce(project_id, ActivityType.RISK, risk.id)
        return RiskReceipt(risk=risk, health=health)

    def _require_project(self, project_id: str) -> None:
        if self.store.get_project(project_id) is None:
            raise ProjectNotFoundError(project_id)

    def _announce(self, project_id: str, activity: ActivityType, record_id: str) -> HealthResult | None:
        """Publish the post-commit event; the last HealthResult returned by a subscriber wins."""
        event = ActivityRecorded(project_id=project_id, activity_type=activity, record_id=record_id)
        try:
            results = self.events.publish(event)
        except Exception as e:
            logger.error(
                "Health recomputation failed after %s %s for project %s: %s",
                activity.value,
                record_id,
                project_id,
                e,
            )
            raise RecomputeError(project_id, record_id, e) from e

        health = None
        for result in results:
            if isinstance(result, HealthResult):
                health = result
        return health
