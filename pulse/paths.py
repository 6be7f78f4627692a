from __future__ import annotations

import os
from pathlib import Path

APP_ENV_HOME = "PULSE_HOME"
APP_ENV_DB = "PULSE_DB"


def app_home() -> Path:
    """
    User-writable home for Project Pulse.
    Override with PULSE_HOME.
    """
    if os.environ.get(APP_ENV_HOME):
        return Path(os.environ[APP_ENV_HOME]).expanduser().resolve()
    return (Path.home() / ".project_pulse").resolve()


def config_dir() -> Path:
    d = app_home() / "config"
    d.mkdir(parents=True, exist_ok=True)
    return d


def data_dir() -> Path:
    d = app_home() / "data"
    d.mkdir(parents=True, exist_ok=True)
    return d


def db_path() -> Path:
    """
    Canonical DB path for project pulse.

    Resolution order:
    1. PULSE_DB env var (explicit override)
    2. ~/.project_pulse/data/pulse.db (default)
    """
    if os.environ.get(APP_ENV_DB):
        return Path(os.environ[APP_ENV_DB]).expanduser().resolve()
    return data_dir() / "pulse.db"


def log_dir() -> Path:
    """Directory for rotating log files."""
    d = app_home() / "logs"
    d.mkdir(parents=True, exist_ok=True)
    return d
