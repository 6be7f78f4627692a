"""
Role-based visibility for Project Pulse.

Pure filters over projects and risks, applied after the gate has resolved
the caller to an ``Identity``:

  ADMIN:    every project, every risk
  EMPLOYEE: projects they are assigned to; risks they reported
  CLIENT:   projects where they are the client

Only EMPLOYEE and ADMIN may report risks.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from pulse.models import Project, Role

logger = logging.getLogger(__name__)

RISK_REPORTER_ROLES = frozenset({Role.ADMIN, Role.EMPLOYEE})


class AccessDeniedError(PermissionError):
    """Caller is authenticated but the resource is outside their role's scope."""


@dataclass(frozen=True)
class Identity:
    """Authenticated caller as supplied by the gate."""

    user_id: str
    role: Role
    name: str = ""


@dataclass(frozen=True)
class ProjectScope:
    """Store-level filter equivalent to ``can_view_project`` for one identity."""

    client_id: str | None = None
    employee_id: str | None = None


@dataclass(frozen=True)
class RiskScope:
    reporter_id: str | None = None


def can_view_project(identity: Identity, project: Project) -> bool:
    match identity.role:
        case Role.ADMIN:
            return True
        case Role.EMPLOYEE:
            return identity.user_id in project.employee_ids
        case Role.CLIENT:
            return project.client_id == identity.user_id
    return False


def visible_projects(identity: Identity, projects: Iterable[Project]) -> list[Project]:
    return [p for p in projects if can_view_project(identity, p)]


def project_scope_for(identity: Identity) -> ProjectScope:
    match identity.role:
        case Role.ADMIN:
            return ProjectScope()
        case Role.EMPLOYEE:
            return ProjectScope(employee_id=identity.user_id)
        case Role.CLIENT:
            return ProjectScope(client_id=identity.user_id)
    raise ValueError(f"Unknown role: {identity.role!r}")


def risk_scope_for(identity: Identity) -> RiskScope:
    """EMPLOYEE risk listings are narrowed to their own reports."""
    if identity.role == Role.EMPLOYEE:
        return RiskScope(reporter_id=identity.user_id)
    return RiskScope()


def can_submit_risk(identity: Identity) -> bool:
    allowed = identity.role in RISK_REPORTER_ROLES
    if not allowed:
        logger.warning(f"Access denied: {identity.role} {identity.user_id} cannot report risks")
    return allowed
