"""
Scoring weights and defaults for the health calculator.

Built-in values can be overridden by ``scoring.yaml`` in the config
directory, e.g.:

    client_satisfaction: 0.4
    employee_confidence: 0.3
    schedule_progress: 0.3
    risk_penalty: 10
"""

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path

import yaml

from pulse import config, paths

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoringWeights:
    # Component weights (sum to 1.0)
    client_satisfaction: float = 0.4
    employee_confidence: float = 0.3
    schedule_progress: float = 0.3

    # Points removed per open HIGH risk
    risk_penalty: float = 10

    # Number of recent employee updates considered
    employee_window: int = 5

    # Defaults when there is no data at all
    default_client_satisfaction: float = 50
    default_employee_confidence: float = 60
    default_schedule_progress: float = 60

    # Defaults for a missing field on an existing update
    missing_confidence: float = 3
    missing_progress: float = 50


DEFAULT_WEIGHTS = ScoringWeights()


def load_weights(config_file: Path | None = None) -> ScoringWeights:
    """
    Load scoring weights, applying overrides from YAML when present.

    Unknown keys are ignored with a warning. A file that is not a mapping,
    a non-numeric or negative value, and weights that do not sum to 1.0 are
    rejected with ValueError naming the file.
    """
    path = config_file or paths.config_dir() / config.SCORING_CONFIG_FILE
    if not path.exists():
        return DEFAULT_WEIGHTS

    with open(path) as f:
        overrides = yaml.safe_load(f) or {}
    if not isinstance(overrides, dict):
        raise ValueError(f"{path} must be a mapping of scoring keys, got {type(overrides).__name__}")

    known = {f.name for f in fields(ScoringWeights)}
    values = {}
    for key, value in overrides.items():
        if key not in known:
            logger.warning("Ignoring unknown scoring key %r in %s", key, path)
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"Scoring key {key!r} in {path} must be a number, got {value!r}")
        if value < 0:
            raise ValueError(f"Scoring key {key!r} in {path} must not be negative, got {value}")
        values[key] = int(value) if key == "employee_window" else float(value)

    weights = replace(DEFAULT_WEIGHTS, **values)
    total = weights.client_satisfaction + weights.employee_confidence + weights.schedule_progress
    if abs(total - 1.0) > 1e-6:
        raise ValueError(f"Scoring weights must sum to 1.0, got {total:.3f} in {path}")
    if weights.employee_window < 1:
        raise ValueError(f"employee_window must be at least 1, got {weights.employee_window}")

    logger.info("Loaded scoring weights from %s", path)
    return weights
