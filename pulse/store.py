"""
State Store - the single persistence layer of Project Pulse.

SQLite-backed document store for users, projects, check-ins and risks.
The store is constructed explicitly and handed to the health engine and
ingestion service; it is opened once at process start and closed at
shutdown. Every sqlite failure surfaces as ``StoreError``.
"""

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

from pulse import config, paths, safe_sql
from pulse.models import (
    INITIAL_HEALTH_SCORE,
    CheckIn,
    CheckInKind,
    Project,
    ProjectStatus,
    Risk,
    RiskSeverity,
    RiskStatus,
    Role,
    User,
    checkin_from_row,
    checkin_to_dict,
)

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    email TEXT NOT NULL UNIQUE,
    role TEXT NOT NULL CHECK (role IN ('ADMIN', 'EMPLOYEE', 'CLIENT')),
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS projects (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    description TEXT NOT NULL,
    start_date TEXT NOT NULL,
    end_date TEXT NOT NULL,
    client_id TEXT NOT NULL REFERENCES users(id),
    employee_ids TEXT NOT NULL DEFAULT '[]',

    status TEXT NOT NULL CHECK (status IN
        ('ON_TRACK', 'AT_RISK', 'CRITICAL', 'COMPLETED')),
    health_score INTEGER NOT NULL CHECK (health_score BETWEEN 0 AND 100),
    health_breakdown TEXT,
    health_computed_at TEXT,

    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

-- Check-ins (append-only)
CREATE TABLE IF NOT EXISTS checkins (
    id TEXT PRIMARY KEY,
    project_id TEXT NOT NULL REFERENCES projects(id),
    author_id TEXT NOT NULL,
    kind TEXT NOT NULL CHECK (kind IN ('employee_update', 'client_feedback')),

    progress REAL CHECK (progress IS NULL OR progress BETWEEN 0 AND 100),
    confidence REAL CHECK (confidence IS NULL OR confidence BETWEEN 1 AND 5),
    blockers TEXT,

    satisfaction REAL CHECK (satisfaction IS NULL OR satisfaction BETWEEN 1 AND 5),
    communication REAL CHECK (communication IS NULL OR communication BETWEEN 1 AND 5),
    comments TEXT,

    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS risks (
    id TEXT PRIMARY KEY,
    project_id TEXT NOT NULL REFERENCES projects(id),
    reporter_id TEXT NOT NULL,
    title TEXT NOT NULL,
    severity TEXT NOT NULL CHECK (severity IN ('LOW', 'MEDIUM', 'HIGH')),
    mitigation TEXT NOT NULL,
    status TEXT NOT NULL CHECK (status IN ('OPEN', 'RESOLVED')),
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_projects_client ON projects(client_id);
CREATE INDEX IF NOT EXISTS idx_projects_health ON projects(health_score);

CREATE INDEX IF NOT EXISTS idx_checkins_lookup ON checkins(project_id, kind, created_at);
CREATE INDEX IF NOT EXISTS idx_risks_lookup ON risks(project_id, severity, status);
CREATE INDEX IF NOT EXISTS idx_risks_reporter ON risks(reporter_id);
"""


class StoreError(Exception):
    """Store access failed. Retryable infrastructure error; the core never retries."""


def now_iso() -> str:
    """Current UTC time in ISO format."""
    return datetime.now(UTC).isoformat()


def new_id() -> str:
    return uuid4().hex


class StateStore:
    """
    SQLite document store with an explicit lifecycle.

    Usage:
        store = StateStore(db_path, timeout=5.0).open()
        ...
        store.close()

    or as a context manager. ``timeout`` is the busy timeout applied to
    every connection and bounds how long a single store call may block.
    """

    def __init__(self, db_path: str | Path | None = None, timeout: float | None = None):
        self.db_path = str(db_path or paths.db_path())
        self.timeout = config.DB_TIMEOUT_SECONDS if timeout is None else timeout
        self._open = False

    # ==================== Lifecycle ====================

    def open(self) -> "StateStore":
        """Create the schema if needed and make the store usable. Safe to call twice."""
        if self._open:
            return self
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._open = True
        try:
            with self._get_conn() as conn:
                conn.executescript(SCHEMA)
                conn.execute("PRAGMA journal_mode=WAL")
        except StoreError:
            self._open = False
            raise
        logger.info("StateStore ready, DB path: %s", self.db_path)
        return self

    def close(self) -> None:
        if self._open:
            self._open = False
            logger.info("StateStore closed: %s", self.db_path)

    @property
    def is_open(self) -> bool:
        return self._open

    def __enter__(self) -> "StateStore":
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @contextmanager
    def _get_conn(self):
        """Connection context with commit/rollback; sqlite errors become StoreError."""
        if not self._open:
            raise StoreError(f"Store is not open: {self.db_path}")
        try:
            conn = sqlite3.connect(self.db_path, timeout=self.timeout)
        except sqlite3.Error as e:
            raise StoreError(f"Cannot connect to {self.db_path}: {e}") from e
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA foreign_keys=ON")
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            logger.error(f"Database error: {e}")
            raise StoreError(str(e)) from e
        finally:
            conn.close()

    # ==================== CRUD Operations ====================

    def insert(self, table: str, data: dict) -> str:
        """Insert a row. Returns ID."""
        columns = list(data.keys())
        values = [json.dumps(v) if isinstance(v, dict | list) else v for v in data.values()]

        with self._get_conn() as conn:
            conn.execute(safe_sql.insert(table, columns), values)

        return data.get("id", "")

    def get(self, table: str, id: str) -> dict | None:
        """Get a single row by ID."""
        with self._get_conn() as conn:
            row = conn.execute(safe_sql.select(table, where="id = ?"), [id]).fetchone()
            return dict(row) if row else None

    def update(self, table: str, id: str, data: dict) -> bool:
        """Update a row in a single statement. Returns False when no row matched."""
        if not data:
            return False

        values = [json.dumps(v) if isinstance(v, dict | list) else v for v in data.values()]
        values.append(id)

        with self._get_conn() as conn:
            result = conn.execute(safe_sql.update(table, list(data.keys())), values)
            return result.rowcount > 0

    def query(self, sql: str, params: list | None = None) -> list[dict]:
        """Execute raw query. Returns list of dicts."""
        with self._get_conn() as conn:
            rows = conn.execute(sql, params or []).fetchall()
            return [dict(row) for row in rows]

    def count(self, table: str, where: str | None = None, params: list | None = None) -> int:
        """Count rows."""
        with self._get_conn() as conn:
            row = conn.execute(safe_sql.select_count(table, where=where), params or []).fetchone()
            return row["c"] if row else 0

    def execute_script(self, script: str) -> None:
        """Run DDL owned by another component (e.g. the api_keys table)."""
        with self._get_conn() as conn:
            conn.executescript(script)

    def truncate(self, *tables: str) -> None:
        """Delete every row of the given tables in one transaction."""
        with self._get_conn() as conn:
            for table in tables:
                conn.execute(safe_sql.delete_all(table))

    def ping(self) -> bool:
        """Cheap round trip used by the liveness endpoint."""
        with self._get_conn() as conn:
            conn.execute("SELECT 1")
        return True

    # ==================== Users & Projects ====================

    def create_user(self, name: str, email: str, role: Role, id: str | None = None) -> User:
        user = User(id=id or new_id(), name=name, email=email, role=Role(role))
        self.insert(
            "users",
            {
                "id": user.id,
                "name": user.name,
                "email": user.email,
                "role": user.role.value,
                "created_at": now_iso(),
            },
        )
        return user

    def get_user(self, user_id: str) -> User | None:
        row = self.get("users", user_id)
        return User.from_row(row) if row else None

    def create_project(
        self,
        name: str,
        description: str,
        start_date: str,
        end_date: str,
        client_id: str,
        employee_ids: list[str] | None = None,
        id: str | None = None,
    ) -> Project:
        now = now_iso()
        project = Project(
            id=id or new_id(),
            name=name,
            description=description,
            start_date=start_date,
            end_date=end_date,
            client_id=client_id,
            employee_ids=list(employee_ids or []),
            status=ProjectStatus.ON_TRACK,
            health_score=INITIAL_HEALTH_SCORE,
            created_at=now,
            updated_at=now,
        )
        self.insert(
            "projects",
            {
                "id": project.id,
                "name": project.name,
                "description": project.description,
                "start_date": project.start_date,
                "end_date": project.end_date,
                "client_id": project.client_id,
                "employee_ids": project.employee_ids,
                "status": project.status.value,
                "health_score": project.health_score,
                "created_at": now,
                "updated_at": now,
            },
        )
        return project

    def get_project(self, project_id: str) -> Project | None:
        row = self.get("projects", project_id)
        return Project.from_row(row) if row else None

    def list_projects(
        self, client_id: str | None = None, employee_id: str | None = None
    ) -> list[Project]:
        """Projects ordered by health score ascending (critical first)."""
        where = []
        params: list[Any] = []
        if client_id is not None:
            where.append("client_id = ?")
            params.append(client_id)
        if employee_id is not None:
            where.append("EXISTS (SELECT 1 FROM json_each(projects.employee_ids) WHERE value = ?)")
            params.append(employee_id)
        sql = safe_sql.select(
            "projects",
            where=" AND ".join(where) or None,
            order_by="health_score ASC, name ASC",
        )
        return [Project.from_row(row) for row in self.query(sql, params)]

    def update_project_health(
        self,
        project_id: str,
        health_score: int,
        status: ProjectStatus,
        breakdown: dict[str, Any],
    ) -> bool:
        """Write score, status and breakdown in one UPDATE."""
        now = now_iso()
        return self.update(
            "projects",
            project_id,
            {
                "health_score": health_score,
                "status": ProjectStatus(status).value,
                "health_breakdown": breakdown,
                "health_computed_at": now,
                "updated_at": now,
            },
        )

    # ==================== Check-ins ====================

    def insert_checkin(self, checkin: CheckIn) -> str:
        return self.insert("checkins", checkin_to_dict(checkin))

    def recent_checkins(self, project_id: str, kind: CheckInKind, limit: int) -> list[CheckIn]:
        """Most recent ``limit`` check-ins of ``kind`` for a project, newest first."""
        rows = self.query(
            safe_sql.select(
                "checkins",
                where="project_id = ? AND kind = ?",
                order_by="created_at DESC, rowid DESC",
                suffix="LIMIT ?",
            ),
            [project_id, CheckInKind(kind).value, limit],
        )
        return [checkin_from_row(row) for row in rows]

    def list_checkins(self, project_id: str) -> list[CheckIn]:
        rows = self.query(
            safe_sql.select(
                "checkins", where="project_id = ?", order_by="created_at DESC, rowid DESC"
            ),
            [project_id],
        )
        return [checkin_from_row(row) for row in rows]

    def last_checkin_at(self, project_id: str) -> str | None:
        rows = self.query(
            safe_sql.select("checkins", columns="MAX(created_at) AS last", where="project_id = ?"),
            [project_id],
        )
        return rows[0]["last"] if rows else None

    # ==================== Risks ====================

    def insert_risk(self, risk: Risk) -> str:
        return self.insert("risks", risk.to_dict())

    def count_risks(self, project_id: str, severity: RiskSeverity, status: RiskStatus) -> int:
        return self.count(
            "risks",
            where="project_id = ? AND severity = ? AND status = ?",
            params=[project_id, RiskSeverity(severity).value, RiskStatus(status).value],
        )

    def list_risks(
        self, project_id: str | None = None, reporter_id: str | None = None
    ) -> list[Risk]:
        """Risks newest first, optionally narrowed by project and reporter."""
        where = []
        params: list[Any] = []
        if project_id is not None:
            where.append("project_id = ?")
            params.append(project_id)
        if reporter_id is not None:
            where.append("reporter_id = ?")
            params.append(reporter_id)
        sql = safe_sql.select(
            "risks",
            where=" AND ".join(where) or None,
            order_by="created_at DESC, rowid DESC",
        )
        return [Risk.from_row(row) for row in self.query(sql, params)]
