"""
Health Score Engine - loads project activity, scores it, persists the result.

The only write is one UPDATE of the project's health fields. Missing
check-in data never raises (calculator defaults apply); store failures
propagate as StoreError.
"""

import logging
from dataclasses import dataclass
from typing import Any

from pulse.events import ActivityRecorded
from pulse.health.calculator import HealthResult, compute_health
from pulse.health.weights import DEFAULT_WEIGHTS, ScoringWeights
from pulse.models import CheckInKind, ProjectStatus, RiskSeverity, RiskStatus
from pulse.store import StateStore

logger = logging.getLogger(__name__)


class ProjectNotFoundError(LookupError):
    """Referenced project does not exist."""

    def __init__(self, project_id: str):
        super().__init__(f"Project not found: {project_id}")
        self.project_id = project_id


@dataclass(frozen=True)
class HealthSnapshot:
    """Last persisted health of a project, as shown by listing/detail views."""

    project_id: str
    health_score: int
    status: ProjectStatus
    breakdown: dict[str, Any] | None
    computed_at: str | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "project_id": self.project_id,
            "health_score": self.health_score,
            "status": self.status.value,
            "breakdown": self.breakdown,
            "computed_at": self.computed_at,
        }


class HealthScoreEngine:
    """
    Recomputes and persists project health.

    Inputs loaded per recomputation:
    - the most recent employee updates (window from weights), newest first
    - the single most recent client feedback
    - the count of OPEN + HIGH risks
    """

    def __init__(self, store: StateStore, weights: ScoringWeights = DEFAULT_WEIGHTS):
        self.store = store
        self.weights = weights

    def recompute(self, project_id: str) -> HealthResult:
        """Score a project from its current activity and persist score + status."""
        employee_updates = self.store.recent_checkins(
            project_id, CheckInKind.EMPLOYEE_UPDATE, self.weights.employee_window
        )
        feedback = self.store.recent_checkins(project_id, CheckInKind.CLIENT_FEEDBACK, 1)
        open_high_risks = self.store.count_risks(project_id, RiskSeverity.HIGH, RiskStatus.OPEN)

        result = compute_health(
            employee_updates,
            feedback[0] if feedback else None,
            open_high_risks,
            self.weights,
        )

        updated = self.store.update_project_health(
            project_id, result.health_score, result.status, result.breakdown.to_dict()
        )
        if not updated:
            raise ProjectNotFoundError(project_id)

        logger.info(
            "Health recomputed for project %s: %d (%s)",
            project_id,
            result.health_score,
            result.status.value,
            extra={"project_id": project_id, "breakdown": result.breakdown.to_dict()},
        )
        return result

    def handle_activity(self, event: ActivityRecorded) -> HealthResult:
        """EventBus subscriber: recompute the project named by the event."""
        return self.recompute(event.project_id)

    def get_health_score(self, project_id: str) -> HealthSnapshot:
        """Read-only accessor for the last persisted health of a project."""
        project = self.store.get_project(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return HealthSnapshot(
            project_id=project.id,
            health_score=project.health_score,
            status=project.status,
            breakdown=project.health_breakdown,
            computed_at=project.health_computed_at,
        )

    def recompute_all(self) -> dict[str, HealthResult]:
        """Recompute every project. Used to heal stale scores after a failed ingestion."""
        return {project.id: self.recompute(project.id) for project in self.store.list_projects()}
