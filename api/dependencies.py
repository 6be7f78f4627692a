"""
FastAPI dependencies exposing the services wired in ``api.server.create_app``.
"""

from fastapi import Request

from pulse.health import HealthScoreEngine
from pulse.ingestion import IngestionService
from pulse.store import StateStore


def get_store(request: Request) -> StateStore:
    return request.app.state.store


def get_engine(request: Request) -> HealthScoreEngine:
    return request.app.state.engine


def get_ingestion(request: Request) -> IngestionService:
    return request.app.state.ingestion
