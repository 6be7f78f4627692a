"""
Domain records for Project Pulse.

Projects, check-ins and risks as they flow between the store, the health
engine and the API. Check-ins are a tagged union: ``EmployeeUpdate`` and
``ClientFeedback`` share identity/timestamp fields and are selected by
``CheckInKind``.
"""

import json
from dataclasses import asdict, dataclass, field
from enum import StrEnum
from typing import Any


class ProjectStatus(StrEnum):
    """Discrete health tier of a project."""

    ON_TRACK = "ON_TRACK"
    AT_RISK = "AT_RISK"
    CRITICAL = "CRITICAL"
    COMPLETED = "COMPLETED"


class CheckInKind(StrEnum):
    """Discriminator for the check-in union."""

    EMPLOYEE_UPDATE = "employee_update"
    CLIENT_FEEDBACK = "client_feedback"


class RiskSeverity(StrEnum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    @classmethod
    def parse(cls, value: str) -> "RiskSeverity":
        """Case-insensitive lookup ("high", "High", "HIGH"). Raises ValueError."""
        return cls(str(value).strip().upper())


class RiskStatus(StrEnum):
    OPEN = "OPEN"
    RESOLVED = "RESOLVED"


class Role(StrEnum):
    """Dashboard roles. Role decides which projects and risks are visible."""

    ADMIN = "ADMIN"
    EMPLOYEE = "EMPLOYEE"
    CLIENT = "CLIENT"


# Default health for a project that has never been scored
INITIAL_HEALTH_SCORE = 85


@dataclass
class User:
    id: str
    name: str
    email: str
    role: Role

    @classmethod
    def from_row(cls, row: dict) -> "User":
        return cls(id=row["id"], name=row["name"], email=row["email"], role=Role(row["role"]))


@dataclass
class Project:
    id: str
    name: str
    description: str
    start_date: str
    end_date: str
    client_id: str
    employee_ids: list[str] = field(default_factory=list)
    status: ProjectStatus = ProjectStatus.ON_TRACK
    health_score: int = INITIAL_HEALTH_SCORE
    health_breakdown: dict[str, Any] | None = None
    health_computed_at: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_row(cls, row: dict) -> "Project":
        breakdown = row.get("health_breakdown")
        return cls(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            start_date=row["start_date"],
            end_date=row["end_date"],
            client_id=row["client_id"],
            employee_ids=json.loads(row.get("employee_ids") or "[]"),
            status=ProjectStatus(row["status"]),
            health_score=row["health_score"],
            health_breakdown=json.loads(breakdown) if breakdown else None,
            health_computed_at=row.get("health_computed_at"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data


@dataclass(frozen=True)
class EmployeeUpdate:
    """Employee progress report: progress 0-100, confidence 1-5."""

    id: str
    project_id: str
    author_id: str
    created_at: str
    progress: float | None = None
    confidence: float | None = None
    blockers: str | None = None

    kind = CheckInKind.EMPLOYEE_UPDATE


@dataclass(frozen=True)
class ClientFeedback:
    """Client satisfaction report: satisfaction and communication 1-5."""

    id: str
    project_id: str
    author_id: str
    created_at: str
    satisfaction: float | None = None
    communication: float | None = None
    comments: str | None = None

    kind = CheckInKind.CLIENT_FEEDBACK


CheckIn = EmployeeUpdate | ClientFeedback

# Payload fields owned by each variant
CHECKIN_FIELDS: dict[CheckInKind, tuple[str, ...]] = {
    CheckInKind.EMPLOYEE_UPDATE: ("progress", "confidence", "blockers"),
    CheckInKind.CLIENT_FEEDBACK: ("satisfaction", "communication", "comments"),
}


def checkin_from_row(row: dict) -> CheckIn:
    """Build the right variant from a stored check-in row."""
    kind = CheckInKind(row["kind"])
    common = {
        "id": row["id"],
        "project_id": row["project_id"],
        "author_id": row["author_id"],
        "created_at": row["created_at"],
    }
    payload = {name: row.get(name) for name in CHECKIN_FIELDS[kind]}
    match kind:
        case CheckInKind.EMPLOYEE_UPDATE:
            return EmployeeUpdate(**common, **payload)
        case CheckInKind.CLIENT_FEEDBACK:
            return ClientFeedback(**common, **payload)


def checkin_to_dict(checkin: CheckIn) -> dict[str, Any]:
    data = asdict(checkin)
    data["kind"] = checkin.kind.value
    return data


@dataclass(frozen=True)
class Risk:
    id: str
    project_id: str
    reporter_id: str
    title: str
    severity: RiskSeverity
    mitigation: str
    status: RiskStatus
    created_at: str

    @classmethod
    def from_row(cls, row: dict) -> "Risk":
        return cls(
            id=row["id"],
            project_id=row["project_id"],
            reporter_id=row["reporter_id"],
            title=row["title"],
            severity=RiskSeverity(row["severity"]),
            mitigation=row["mitigation"],
            status=RiskStatus(row["status"]),
            created_at=row["created_at"],
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["severity"] = self.severity.value
        data["status"] = self.status.value
        return data
