"""
Demo data: one admin, one client, two employees and a project with
sample check-ins and a risk. Seeding replaces any existing data.
"""

import logging
from dataclasses import dataclass

from pulse.health import HealthResult, HealthScoreEngine
from pulse.ingestion import IngestionService
from pulse.models import CheckInKind, Project, Role, User
from pulse.security import KeyManager
from pulse.store import StateStore

logger = logging.getLogger(__name__)

_TABLES = ("api_keys", "risks", "checkins", "projects", "users")


@dataclass
class SeedResult:
    users: dict[str, User]
    project: Project
    health: HealthResult | None
    api_keys: dict[str, str]


def clear(store: StateStore) -> None:
    store.truncate(*_TABLES)
    logger.info("Cleared existing data")


def seed(store: StateStore, engine: HealthScoreEngine | None = None) -> SeedResult:
    """Populate the store with demo data and return the created records and keys."""
    keys = KeyManager(store)
    clear(store)

    users = {
        "admin": store.create_user("Admin User", "admin@projectpulse.com", Role.ADMIN),
        "client": store.create_user("John Client", "client@example.com", Role.CLIENT),
        "sarah": store.create_user("Sarah Developer", "sarah@projectpulse.com", Role.EMPLOYEE),
        "mike": store.create_user("Mike Designer", "mike@projectpulse.com", Role.EMPLOYEE),
    }
    logger.info("Created users")

    project = store.create_project(
        name="E-Commerce Platform Redesign",
        description=(
            "Complete redesign of the client e-commerce platform with enhanced "
            "user experience and modern technology stack."
        ),
        start_date="2025-01-01",
        end_date="2025-06-30",
        client_id=users["client"].id,
        employee_ids=[users["sarah"].id, users["mike"].id],
    )
    logger.info("Created demo project")

    ingestion = IngestionService.with_engine(store, engine or HealthScoreEngine(store))
    ingestion.submit_checkin(
        project.id,
        users["sarah"].id,
        CheckInKind.EMPLOYEE_UPDATE,
        {
            "progress": 65,
            "confidence": 4,
            "blockers": "Waiting for API documentation from third-party vendor",
        },
    )
    ingestion.submit_checkin(
        project.id,
        users["client"].id,
        CheckInKind.CLIENT_FEEDBACK,
        {
            "satisfaction": 5,
            "communication": 5,
            "comments": "Very happy with the progress. Team is responsive and professional.",
        },
    )
    receipt = ingestion.submit_risk(
        project.id,
        users["sarah"].id,
        title="Third-party API integration delay",
        severity="MEDIUM",
        mitigation=(
            "Working with vendor to expedite documentation. "
            "Prepared fallback solution if needed."
        ),
    )
    logger.info("Created sample check-ins and risk")

    api_keys = {name: keys.create_key(user.id, f"{name}-demo")[0] for name, user in users.items()}

    return SeedResult(
        users=users,
        project=store.get_project(project.id),
        health=receipt.health,
        api_keys=api_keys,
    )
