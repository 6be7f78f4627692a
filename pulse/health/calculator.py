"""
Health Calculator - pure project health scoring.

Health score (0-100) is a weighted blend of:
- Client satisfaction, from the latest client feedback (40%)
- Employee confidence, averaged over the recent employee updates (30%)
- Schedule progress, from the most recent employee update (30%)

minus a fixed penalty per open HIGH-severity risk, clamped to [0, 100] and
rounded half-up. The result maps onto ON_TRACK / AT_RISK / CRITICAL.
"""

import math
from collections.abc import Sequence
from dataclasses import asdict, dataclass

from pulse.health.weights import DEFAULT_WEIGHTS, ScoringWeights
from pulse.models import ClientFeedback, EmployeeUpdate, ProjectStatus

# Status thresholds
ON_TRACK_THRESHOLD = 80
AT_RISK_THRESHOLD = 60


@dataclass(frozen=True)
class HealthBreakdown:
    client_satisfaction_score: int
    employee_confidence_score: int
    schedule_progress_score: int
    open_high_risk_count: int
    risk_penalty: int

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class HealthResult:
    health_score: int
    status: ProjectStatus
    breakdown: HealthBreakdown

    def to_dict(self) -> dict:
        return {
            "health_score": self.health_score,
            "status": self.status.value,
            "breakdown": self.breakdown.to_dict(),
        }


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative scores (83.5 -> 84, 82.5 -> 83).

    The 9-digit pre-round absorbs float noise such as 83.49999999999999.
    """
    return int(math.floor(round(value, 9) + 0.5))


def classify_status(score: float) -> ProjectStatus:
    """Map a final score to its status tier. COMPLETED is never produced here."""
    if score >= ON_TRACK_THRESHOLD:
        return ProjectStatus.ON_TRACK
    if score >= AT_RISK_THRESHOLD:
        return ProjectStatus.AT_RISK
    return ProjectStatus.CRITICAL


def client_satisfaction_score(
    latest_feedback: ClientFeedback | None, weights: ScoringWeights = DEFAULT_WEIGHTS
) -> float:
    if latest_feedback is None or latest_feedback.satisfaction is None:
        return weights.default_client_satisfaction
    return latest_feedback.satisfaction * 100 / 5


def employee_confidence_score(
    employee_updates: Sequence[EmployeeUpdate], weights: ScoringWeights = DEFAULT_WEIGHTS
) -> float:
    if not employee_updates:
        return weights.default_employee_confidence
    total = sum(
        u.confidence if u.confidence is not None else weights.missing_confidence
        for u in employee_updates
    )
    return total * 100 / (5 * len(employee_updates))


def schedule_progress_score(
    employee_updates: Sequence[EmployeeUpdate], weights: ScoringWeights = DEFAULT_WEIGHTS
) -> float:
    if not employee_updates:
        return weights.default_schedule_progress
    latest = employee_updates[0]
    return latest.progress if latest.progress is not None else weights.missing_progress


def compute_health(
    employee_updates: Sequence[EmployeeUpdate],
    latest_feedback: ClientFeedback | None,
    open_high_risks: int,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> HealthResult:
    """
    Compute a project's health from its recent activity.

    Args:
        employee_updates: Recent employee updates, newest first. Only the
            first ``weights.employee_window`` are considered.
        latest_feedback: Most recent client feedback, or None.
        open_high_risks: Number of OPEN risks with HIGH severity.
        weights: Scoring weights and defaults.

    Returns:
        HealthResult with the rounded score, its status and the breakdown.
    """
    updates = list(employee_updates)[: weights.employee_window]

    satisfaction = client_satisfaction_score(latest_feedback, weights)
    confidence = employee_confidence_score(updates, weights)
    progress = schedule_progress_score(updates, weights)

    base_score = (
        weights.client_satisfaction * satisfaction
        + weights.employee_confidence * confidence
        + weights.schedule_progress * progress
    )
    risk_penalty = weights.risk_penalty * open_high_risks
    final_score = round_half_up(max(0.0, min(100.0, base_score - risk_penalty)))

    return HealthResult(
        health_score=final_score,
        status=classify_status(final_score),
        breakdown=HealthBreakdown(
            client_satisfaction_score=round_half_up(satisfaction),
            employee_confidence_score=round_half_up(confidence),
            schedule_progress_score=round_half_up(progress),
            open_high_risk_count=open_high_risks,
            risk_penalty=round_half_up(risk_penalty),
        ),
    )
