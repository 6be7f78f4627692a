"""
Projects Router - listing, detail and health for the dashboard views.

Usage in server.py:
    from api.projects_router import projects_router
    app.include_router(projects_router, prefix="/api")

Endpoints:
- GET /api/projects                     - projects visible to the caller
- GET /api/projects/{project_id}        - project + activity timeline
- GET /api/projects/{project_id}/health - last persisted health score
"""

import logging

from fastapi import APIRouter, Depends

from api.auth import require_identity
from api.dependencies import get_engine, get_store
from api.response_models import (
    ERROR_RESPONSES,
    HealthScoreResponse,
    ProjectDetailResponse,
    ProjectListResponse,
)
from pulse import dashboard
from pulse.access import Identity
from pulse.health import HealthScoreEngine
from pulse.store import StateStore

logger = logging.getLogger(__name__)

projects_router = APIRouter(tags=["Projects"], responses=ERROR_RESPONSES)


@projects_router.get("/projects", response_model=ProjectListResponse)
def list_projects(
    identity: Identity = Depends(require_identity),
    store: StateStore = Depends(get_store),
):
    """Projects for the caller's role, lowest health first."""
    return {"projects": dashboard.list_projects_for(store, identity)}


@projects_router.get("/projects/{project_id}", response_model=ProjectDetailResponse)
def get_project(
    project_id: str,
    identity: Identity = Depends(require_identity),
    store: StateStore = Depends(get_store),
):
    return dashboard.project_detail(store, identity, project_id)


@projects_router.get("/projects/{project_id}/health", response_model=HealthScoreResponse)
def get_health_score(
    project_id: str,
    identity: Identity = Depends(require_identity),
    store: StateStore = Depends(get_store),
    engine: HealthScoreEngine = Depends(get_engine),
):
    """Last persisted {health_score, status} with the breakdown for diagnostics."""
    dashboard.get_visible_project(store, identity, project_id)
    return engine.get_health_score(project_id).to_dict()
