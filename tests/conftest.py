"""
Test configuration: repo root on sys.path, isolated PULSE_HOME, live-DB guard.

PULSE_HOME is pointed at a throwaway directory before any project module is
imported, so importing api.server (which builds a module-level app) never
touches the user's real data directory.
"""

import os
import sqlite3
import sys
import tempfile
from pathlib import Path

import pytest

# Add repo root to sys.path so tests can import pulse.*, api.*, cli.*
REPO_ROOT = Path(__file__).parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

os.environ["PULSE_HOME"] = tempfile.mkdtemp(prefix="pulse-test-home-")
os.environ.pop("PULSE_DB", None)

from pulse.health import HealthScoreEngine  # noqa: E402
from pulse.ingestion import IngestionService  # noqa: E402
from pulse.models import Role  # noqa: E402
from pulse.store import StateStore  # noqa: E402

# =============================================================================
# DETERMINISM GUARD: Block live database access
# =============================================================================

HOME_DB_ABSOLUTE = Path.home() / ".project_pulse" / "data" / "pulse.db"
_original_sqlite_connect = sqlite3.connect


def _guarded_sqlite_connect(database, *args, **kwargs):
    """Intercept sqlite3.connect to block access to the user's real DB."""
    db_str = str(database)
    if db_str != ":memory:" and Path(db_str).resolve() == HOME_DB_ABSOLUTE:
        raise RuntimeError(
            f"DETERMINISM VIOLATION: Test attempted to access live DB at {database}.\n"
            "Tests must use the `store` fixture (temporary SQLite file)."
        )
    return _original_sqlite_connect(database, *args, **kwargs)


@pytest.fixture(autouse=True)
def guard_live_db_access(monkeypatch):
    """Automatically guard all tests against live DB access."""
    monkeypatch.setattr(sqlite3, "connect", _guarded_sqlite_connect)


# =============================================================================
# STORE FIXTURES
# =============================================================================


@pytest.fixture
def store(tmp_path):
    """Open StateStore on a temporary database."""
    with StateStore(tmp_path / "pulse.db", timeout=5.0) as s:
        yield s


@pytest.fixture
def users(store):
    """
    Admin, the project's client, two assigned employees and two outsiders:
    an unassigned employee and a second client.
    """
    return {
        "admin": store.create_user("Admin User", "admin@example.com", Role.ADMIN),
        "client": store.create_user("John Client", "client@example.com", Role.CLIENT),
        "sarah": store.create_user("Sarah Developer", "sarah@example.com", Role.EMPLOYEE),
        "mike": store.create_user("Mike Designer", "mike@example.com", Role.EMPLOYEE),
        "olivia": store.create_user("Olivia Outsider", "olivia@example.com", Role.EMPLOYEE),
        "carol": store.create_user("Carol Client", "carol@example.com", Role.CLIENT),
    }


@pytest.fixture
def project(store, users):
    """Project owned by `client`, staffed by sarah and mike."""
    return store.create_project(
        name="E-Commerce Platform Redesign",
        description="Storefront rebuild",
        start_date="2025-01-01",
        end_date="2025-06-30",
        client_id=users["client"].id,
        employee_ids=[users["sarah"].id, users["mike"].id],
    )


@pytest.fixture
def other_project(store, users):
    """Project owned by carol, staffed by olivia only."""
    return store.create_project(
        name="Mobile App",
        description="Companion app",
        start_date="2025-02-01",
        end_date="2025-09-30",
        client_id=users["carol"].id,
        employee_ids=[users["olivia"].id],
    )


@pytest.fixture
def engine(store):
    return HealthScoreEngine(store)


@pytest.fixture
def ingestion(store, engine):
    return IngestionService.with_engine(store, engine)
