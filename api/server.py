"""
Project Pulse API Server - REST API for the project health dashboard.
"""
# ruff: noqa: S104
# S104: Development server binding (guarded by __name__ check)

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.activity_router import activity_router
from api.projects_router import projects_router
from api.response_models import HealthResponse
from pulse import __version__, config
from pulse.access import AccessDeniedError
from pulse.health import HealthScoreEngine, ProjectNotFoundError, ScoringWeights, load_weights
from pulse.ingestion import IngestionService, RecomputeError
from pulse.observability import CorrelationIdMiddleware, configure_logging
from pulse.security import KeyManager
from pulse.store import StateStore, StoreError
from pulse.validation import ValidationError

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str, code: str, details: dict | None = None) -> JSONResponse:
    content = {"status": "error", "error": message, "error_code": code}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


# ==== Exception Handlers ====


async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    logger.info(f"Rejected {request.method} {request.url.path}: {exc}")
    return _error(422, str(exc), "VALIDATION_ERROR", exc.to_dict())


async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body") or "body"
    return _error(
        422,
        f"{field}: {first.get('msg', 'invalid request')}",
        "VALIDATION_ERROR",
        {"field": field, "reason": first.get("msg", "invalid request")},
    )


async def _not_found(request: Request, exc: ProjectNotFoundError) -> JSONResponse:
    return _error(404, f"Project not found: {exc.project_id}", "NOT_FOUND")


async def _forbidden(request: Request, exc: AccessDeniedError) -> JSONResponse:
    return _error(403, str(exc) or "Forbidden", "FORBIDDEN")


async def _store_unavailable(request: Request, exc: StoreError) -> JSONResponse:
    logger.error(f"Store failure on {request.method} {request.url.path}: {exc}")
    return _error(503, "Store unavailable, retry later", "STORE_UNAVAILABLE")


async def _recompute_failed(request: Request, exc: RecomputeError) -> JSONResponse:
    logger.error(
        "Health recompute failed after write",
        extra={"project_id": exc.project_id, "record_id": exc.record_id},
    )
    return _error(
        503,
        str(exc),
        "RECOMPUTE_FAILED",
        {"project_id": exc.project_id, "record_id": exc.record_id},
    )


async def _http_error(request: Request, exc: HTTPException) -> JSONResponse:
    codes = {401: "UNAUTHORIZED", 403: "FORBIDDEN", 404: "NOT_FOUND"}
    response = _error(exc.status_code, str(exc.detail), codes.get(exc.status_code, "ERROR"))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


# ==== App Factory ====


def create_app(store: StateStore | None = None, weights: ScoringWeights | None = None) -> FastAPI:
    """
    Build the API around a store.

    The store is opened at startup and closed at shutdown. Tests pass their
    own temporary store; the module-level ``app`` uses the configured path.
    """
    store = store or StateStore()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("=== Project Pulse Startup ===")
        store.open()
        app.state.store = store
        app.state.engine = HealthScoreEngine(store, weights or load_weights())
        app.state.ingestion = IngestionService.with_engine(store, app.state.engine)
        app.state.keys = KeyManager(store)
        try:
            yield
        finally:
            store.close()

    app = FastAPI(
        title="Project Pulse API",
        description="Role-based project health dashboard",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware)

    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(RequestValidationError, _request_validation_error)
    app.add_exception_handler(ProjectNotFoundError, _not_found)
    app.add_exception_handler(AccessDeniedError, _forbidden)
    app.add_exception_handler(StoreError, _store_unavailable)
    app.add_exception_handler(RecomputeError, _recompute_failed)
    app.add_exception_handler(HTTPException, _http_error)

    app.include_router(projects_router, prefix="/api")
    app.include_router(activity_router, prefix="/api")

    @app.get("/api/health", response_model=HealthResponse)
    def health_check(request: Request):
        """Health check endpoint."""
        request.app.state.store.ping()
        return {
            "status": "healthy",
            "version": __version__,
            "timestamp": datetime.now().isoformat(),
        }

    return app


configure_logging(config.LOG_LEVEL, config.LOG_JSON, config.LOG_FILE)
app = create_app()


# ==== Main ====


def main():
    """Run the server."""
    port = int(os.environ.get("PORT", 8420))
    uvicorn.run(app, host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
