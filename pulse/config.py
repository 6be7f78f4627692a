"""
Centralized configuration for Project Pulse.

All values that vary by deployment belong here.
Override via environment variables where marked.
"""

import os

# ============================================================
# Store
# ============================================================

DB_TIMEOUT_SECONDS: float = float(os.environ.get("PULSE_DB_TIMEOUT", "30"))
"""Busy timeout for every store connection. Bounds how long a store call may block."""

# ============================================================
# Logging
# ============================================================

LOG_LEVEL: str = os.environ.get("PULSE_LOG_LEVEL", "INFO")
"""Root log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

_log_json = os.environ.get("PULSE_LOG_JSON")
LOG_JSON: bool | None = None if _log_json is None else _log_json.lower() in ("1", "true", "yes")
"""Force JSON log output. None means auto-detect (JSON when stderr is not a TTY)."""

LOG_FILE: str | None = os.environ.get("PULSE_LOG_FILE") or None
"""Optional rotating log file; logs go to stderr only when unset."""

# ============================================================
# API
# ============================================================

CORS_ORIGINS: list[str] = (
    ["*"]
    if os.environ.get("CORS_ORIGINS", "*") == "*"
    else [o.strip() for o in os.environ["CORS_ORIGINS"].split(",")]
)
"""Allowed CORS origins. Dev default allows all."""

# ============================================================
# Dashboard
# ============================================================

MISSING_CHECKIN_DAYS: int = int(os.environ.get("PULSE_MISSING_CHECKIN_DAYS", "7"))
"""A project with no check-in inside this window is flagged as missing one."""

SCORING_CONFIG_FILE: str = os.environ.get("PULSE_SCORING_FILE", "scoring.yaml")
"""File name (inside the config dir) holding scoring weight overrides."""
