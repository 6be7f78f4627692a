"""
Read models for the dashboard listing and detail views.

Every function takes the caller's Identity and applies the role filters
from pulse.access before anything is returned.
"""

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from pulse import config
from pulse.access import (
    AccessDeniedError,
    Identity,
    can_view_project,
    project_scope_for,
    risk_scope_for,
)
from pulse.health import ProjectNotFoundError
from pulse.models import Project, Risk, Role, checkin_to_dict
from pulse.store import StateStore

logger = logging.getLogger(__name__)


def _missing_checkin(store: StateStore, project_id: str, cutoff: datetime) -> bool:
    last = store.last_checkin_at(project_id)
    return last is None or datetime.fromisoformat(last) < cutoff


def list_projects_for(
    store: StateStore,
    identity: Identity,
    now: datetime | None = None,
    missing_days: int = config.MISSING_CHECKIN_DAYS,
) -> list[dict[str, Any]]:
    """
    Projects visible to the caller, lowest health first.

    Each entry carries ``missing_checkin``: no check-in within the last
    ``missing_days`` days.
    """
    scope = project_scope_for(identity)
    projects = store.list_projects(client_id=scope.client_id, employee_id=scope.employee_id)
    cutoff = (now or datetime.now(UTC)) - timedelta(days=missing_days)
    return [
        {**p.to_dict(), "missing_checkin": _missing_checkin(store, p.id, cutoff)}
        for p in projects
    ]


def get_visible_project(store: StateStore, identity: Identity, project_id: str) -> Project:
    """Load a project or raise ProjectNotFoundError / AccessDeniedError."""
    project = store.get_project(project_id)
    if project is None:
        raise ProjectNotFoundError(project_id)
    if not can_view_project(identity, project):
        logger.warning(f"Access denied: {identity.role} {identity.user_id} on project {project_id}")
        raise AccessDeniedError(f"Project {project_id} is not visible to {identity.user_id}")
    return project


def _author(store: StateStore, user_id: str, cache: dict[str, dict[str, Any]]) -> dict[str, Any]:
    if user_id not in cache:
        user = store.get_user(user_id)
        cache[user_id] = {
            "id": user_id,
            "name": user.name if user else None,
            "role": user.role.value if user else None,
        }
    return cache[user_id]


def project_detail(store: StateStore, identity: Identity, project_id: str) -> dict[str, Any]:
    """
    Project plus its activity timeline (check-ins and risks, newest first).

    Each entry carries the author's name and role; an author whose user row
    is gone keeps only the id.
    """
    project = get_visible_project(store, identity, project_id)
    authors: dict[str, dict[str, Any]] = {}

    activities = [
        {
            "type": "checkin",
            "data": checkin_to_dict(c),
            "author": _author(store, c.author_id, authors),
            "created_at": c.created_at,
        }
        for c in store.list_checkins(project_id)
    ] + [
        {
            "type": "risk",
            "data": r.to_dict(),
            "author": _author(store, r.reporter_id, authors),
            "created_at": r.created_at,
        }
        for r in store.list_risks(project_id=project_id)
    ]
    activities.sort(key=lambda a: a["created_at"], reverse=True)

    return {"project": project.to_dict(), "activities": activities}


def list_risks_for(
    store: StateStore, identity: Identity, project_id: str | None = None
) -> list[Risk]:
    """
    Risks visible to the caller, newest first.

    Non-admins only see risks on projects they can view; employees are
    further narrowed to risks they reported.
    """
    scope = risk_scope_for(identity)
    risks = store.list_risks(project_id=project_id, reporter_id=scope.reporter_id)
    if identity.role == Role.ADMIN:
        return risks

    project_scope = project_scope_for(identity)
    visible = {
        p.id
        for p in store.list_projects(
            client_id=project_scope.client_id, employee_id=project_scope.employee_id
        )
    }
    return [r for r in risks if r.project_id in visible]
