"""
Activity Router - check-in and risk ingestion, risk listing.

Usage in server.py:
    from api.activity_router import activity_router
    app.include_router(activity_router, prefix="/api")

Endpoints:
- POST /api/checkins - submit a check-in, returns it with the new health
- GET  /api/risks    - risks visible to the caller (optional ?projectId=)
- POST /api/risks    - report a risk (EMPLOYEE and ADMIN only)

Author/reporter identity always comes from the authenticated caller, and
writes are only accepted on projects the caller can view.
"""

import logging

from fastapi import APIRouter, Depends, Query

from api.auth import require_identity
from api.dependencies import get_ingestion, get_store
from api.response_models import (
    ERROR_RESPONSES,
    CheckInRequest,
    CheckInResponse,
    RiskListResponse,
    RiskRequest,
    RiskResponse,
)
from pulse import dashboard
from pulse.access import AccessDeniedError, Identity, can_submit_risk
from pulse.ingestion import IngestionService
from pulse.models import checkin_to_dict
from pulse.store import StateStore

logger = logging.getLogger(__name__)

activity_router = APIRouter(tags=["Activity"], responses=ERROR_RESPONSES)


@activity_router.post("/checkins", response_model=CheckInResponse)
def submit_checkin(
    body: CheckInRequest,
    identity: Identity = Depends(require_identity),
    store: StateStore = Depends(get_store),
    ingestion: IngestionService = Depends(get_ingestion),
):
    dashboard.get_visible_project(store, identity, body.project)
    receipt = ingestion.submit_checkin(body.project, identity.user_id, body.type, body.payload())
    return {
        "checkin": checkin_to_dict(receipt.checkin),
        "health": receipt.health.to_dict() if receipt.health else None,
    }


@activity_router.get("/risks", response_model=RiskListResponse)
def list_risks(
    project_id: str | None = Query(default=None, alias="projectId"),
    identity: Identity = Depends(require_identity),
    store: StateStore = Depends(get_store),
):
    risks = dashboard.list_risks_for(store, identity, project_id)
    return {"risks": [r.to_dict() for r in risks]}


@activity_router.post("/risks", response_model=RiskResponse)
def submit_risk(
    body: RiskRequest,
    identity: Identity = Depends(require_identity),
    store: StateStore = Depends(get_store),
    ingestion: IngestionService = Depends(get_ingestion),
):
    if not can_submit_risk(identity):
        raise AccessDeniedError("Only employees and admins can report risks")
    dashboard.get_visible_project(store, identity, body.project)
    receipt = ingestion.submit_risk(
        body.project, identity.user_id, body.title, body.severity, body.mitigation
    )
    return {
        "risk": receipt.risk.to_dict(),
        "health": receipt.health.to_dict() if receipt.health else None,
    }
