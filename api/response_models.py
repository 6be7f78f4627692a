"""
Pydantic request/response models for the Project Pulse API.

These give FastAPI the type information for validation and accurate
OpenAPI schemas. Requests are parsed in strict mode so no coercion runs
ahead of the core validator, which does the range checks for API and CLI
callers alike.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

# ==== Requests ====


class CheckInRequest(BaseModel):
    """Body of POST /api/checkins. Author comes from the authenticated caller."""

    model_config = ConfigDict(extra="forbid", strict=True)

    project: str = Field(description="Project id")
    type: str = Field(description="employee_update or client_feedback")
    progress: float | None = Field(default=None, description="0-100, employee updates")
    confidence: float | None = Field(default=None, description="1-5, employee updates")
    blockers: str | None = None
    satisfaction: float | None = Field(default=None, description="1-5, client feedback")
    communication: float | None = Field(default=None, description="1-5, client feedback")
    comments: str | None = None

    def payload(self) -> dict[str, Any]:
        return self.model_dump(exclude={"project", "type"}, exclude_none=True)


class RiskRequest(BaseModel):
    """Body of POST /api/risks. Reporter comes from the authenticated caller."""

    model_config = ConfigDict(extra="forbid", strict=True)

    project: str = Field(description="Project id")
    title: str = ""
    severity: str | None = Field(default=None, description="LOW, MEDIUM or HIGH; MEDIUM if omitted")
    mitigation: str = ""


# ==== Health ====


class HealthBreakdownModel(BaseModel):
    client_satisfaction_score: int
    employee_confidence_score: int
    schedule_progress_score: int
    open_high_risk_count: int
    risk_penalty: int


class HealthResultModel(BaseModel):
    """Output of one Score Engine run."""

    health_score: int = Field(ge=0, le=100)
    status: Literal["ON_TRACK", "AT_RISK", "CRITICAL"]
    breakdown: HealthBreakdownModel


class HealthScoreResponse(BaseModel):
    """Last persisted health of a project."""

    project_id: str
    health_score: int = Field(ge=0, le=100)
    status: Literal["ON_TRACK", "AT_RISK", "CRITICAL", "COMPLETED"]
    breakdown: HealthBreakdownModel | None = Field(
        default=None, description="Last computed breakdown, None before the first recompute"
    )
    computed_at: str | None = None


# ==== Records ====


class CheckInModel(BaseModel):
    id: str
    project_id: str
    author_id: str
    kind: Literal["employee_update", "client_feedback"]
    created_at: str
    progress: float | None = None
    confidence: float | None = None
    blockers: str | None = None
    satisfaction: float | None = None
    communication: float | None = None
    comments: str | None = None


class RiskModel(BaseModel):
    id: str
    project_id: str
    reporter_id: str
    title: str
    severity: Literal["LOW", "MEDIUM", "HIGH"]
    mitigation: str
    status: Literal["OPEN", "RESOLVED"]
    created_at: str


class ProjectModel(BaseModel):
    id: str
    name: str
    description: str
    start_date: str
    end_date: str
    client_id: str
    employee_ids: list[str]
    status: Literal["ON_TRACK", "AT_RISK", "CRITICAL", "COMPLETED"]
    health_score: int = Field(ge=0, le=100)
    health_breakdown: dict[str, Any] | None = None
    health_computed_at: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class ProjectSummaryModel(ProjectModel):
    missing_checkin: bool = Field(description="No check-in within the configured window")


class AuthorModel(BaseModel):
    id: str
    name: str | None = None
    role: Literal["ADMIN", "EMPLOYEE", "CLIENT"] | None = None


class ActivityModel(BaseModel):
    type: Literal["checkin", "risk"]
    data: dict[str, Any]
    author: AuthorModel
    created_at: str


# ==== Envelopes ====


class ProjectListResponse(BaseModel):
    projects: list[ProjectSummaryModel]


class ProjectDetailResponse(BaseModel):
    project: ProjectModel
    activities: list[ActivityModel]


class CheckInResponse(BaseModel):
    checkin: CheckInModel
    health: HealthResultModel | None = None


class RiskResponse(BaseModel):
    risk: RiskModel
    health: HealthResultModel | None = None


class RiskListResponse(BaseModel):
    risks: list[RiskModel]


class HealthResponse(BaseModel):
    """Liveness check result."""

    status: str = Field(description="healthy or error")
    version: str
    timestamp: str


class ErrorEnvelope(BaseModel):
    """Standard error response envelope."""

    status: str = Field("error", description="Always 'error'")
    error: str = Field(description="Error message")
    error_code: str = Field(default="ERROR", description="Error code")
    details: dict[str, Any] | None = None


ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    401: {"model": ErrorEnvelope, "description": "Missing or invalid API key"},
    403: {"model": ErrorEnvelope, "description": "Project not visible to the caller"},
    404: {"model": ErrorEnvelope, "description": "Unknown project"},
    422: {"model": ErrorEnvelope, "description": "Invalid input"},
    503: {"model": ErrorEnvelope, "description": "Store unavailable or recompute failed"},
}
