"""
Project Health Module

Computes project health scores from recent check-ins and open risks.

Objects:
- HealthResult (score, status, breakdown) from the pure calculator
- HealthScoreEngine, which loads inputs from the store and persists results

Invariants:
- Health scores are 0-100 integers
- Status is ON_TRACK (>= 80), AT_RISK (60-79) or CRITICAL (< 60)
- A project's stored score/status is always the last engine output
"""

from .calculator import HealthBreakdown, HealthResult, classify_status, compute_health
from .engine import HealthScoreEngine, HealthSnapshot, ProjectNotFoundError
from .weights import DEFAULT_WEIGHTS, ScoringWeights, load_weights

__all__ = [
    "HealthBreakdown",
    "HealthResult",
    "HealthScoreEngine",
    "HealthSnapshot",
    "ProjectNotFoundError",
    "ScoringWeights",
    "DEFAULT_WEIGHTS",
    "classify_status",
    "compute_health",
    "load_weights",
]
