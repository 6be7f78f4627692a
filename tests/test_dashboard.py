"""Tests for the role-filtered listing and detail read models."""

from datetime import UTC, datetime, timedelta

import pytest

from pulse.access import AccessDeniedError, Identity
from pulse.dashboard import get_visible_project, list_projects_for, list_risks_for, project_detail
from pulse.health import ProjectNotFoundError
from tests.fixtures import employee_update


def _me(user):
    return Identity(user.id, user.role, user.name)


class TestListProjects:
    def test_admin_sees_all(self, store, users, project, other_project):
        listed = list_projects_for(store, _me(users["admin"]))
        assert {p["id"] for p in listed} == {project.id, other_project.id}

    def test_employee_sees_assigned(self, store, users, project, other_project):
        assert [p["id"] for p in list_projects_for(store, _me(users["mike"]))] == [project.id]
        assert [p["id"] for p in list_projects_for(store, _me(users["olivia"]))] == [other_project.id]

    def test_client_sees_own(self, store, users, project, other_project):
        assert [p["id"] for p in list_projects_for(store, _me(users["client"]))] == [project.id]

    def test_missing_checkin_flag(self, store, users, project):
        now = datetime(2025, 3, 10, tzinfo=UTC)
        admin = _me(users["admin"])

        assert list_projects_for(store, admin, now=now)[0]["missing_checkin"] is True

        # Check-in at 2025-03-01T10:00 is inside a 10-day window, outside a 7-day one
        store.insert_checkin(employee_update(seq=0, project_id=project.id))
        assert list_projects_for(store, admin, now=now, missing_days=10)[0]["missing_checkin"] is False
        assert list_projects_for(store, admin, now=now, missing_days=7)[0]["missing_checkin"] is True

    def test_recent_checkin_clears_flag(self, store, users, ingestion, project):
        ingestion.submit_checkin(project.id, users["sarah"].id, "employee_update", {"progress": 5})

        listed = list_projects_for(store, _me(users["sarah"]), now=datetime.now(UTC) + timedelta(days=1))

        assert listed[0]["missing_checkin"] is False


class TestProjectDetail:
    def test_timeline_newest_first(self, store, users, ingestion, project):
        ingestion.submit_checkin(project.id, users["sarah"].id, "employee_update", {"progress": 5})
        ingestion.submit_risk(project.id, users["sarah"].id, "Delay", "LOW", "Plan")
        ingestion.submit_checkin(project.id, users["client"].id, "client_feedback", {"satisfaction": 4})

        detail = project_detail(store, _me(users["client"]), project.id)

        assert detail["project"]["id"] == project.id
        types = [a["type"] for a in detail["activities"]]
        assert sorted(types) == ["checkin", "checkin", "risk"]
        stamps = [a["created_at"] for a in detail["activities"]]
        assert stamps == sorted(stamps, reverse=True)

    def test_timeline_carries_author(self, store, users, ingestion, project):
        ingestion.submit_checkin(project.id, users["client"].id, "client_feedback", {"satisfaction": 4})
        ingestion.submit_risk(project.id, users["sarah"].id, "Delay", "LOW", "Plan")

        detail = project_detail(store, _me(users["admin"]), project.id)

        authors = {a["type"]: a["author"] for a in detail["activities"]}
        assert authors["checkin"] == {
            "id": users["client"].id,
            "name": users["client"].name,
            "role": "CLIENT",
        }
        assert authors["risk"]["name"] == users["sarah"].name
        assert authors["risk"]["role"] == "EMPLOYEE"

    def test_not_visible(self, store, users, project):
        with pytest.raises(AccessDeniedError):
            project_detail(store, _me(users["carol"]), project.id)

    def test_unknown(self, store, users):
        with pytest.raises(ProjectNotFoundError):
            get_visible_project(store, _me(users["admin"]), "nope")


class TestListRisks:
    @pytest.fixture
    def risks(self, ingestion, users, project, other_project):
        return {
            "sarah": ingestion.submit_risk(project.id, users["sarah"].id, "A", "LOW", "x").risk,
            "mike": ingestion.submit_risk(project.id, users["mike"].id, "B", "LOW", "x").risk,
            "olivia": ingestion.submit_risk(other_project.id, users["olivia"].id, "C", "LOW", "x").risk,
        }

    def test_admin_sees_all(self, store, users, risks):
        assert len(list_risks_for(store, _me(users["admin"]))) == 3

    def test_employee_sees_own_reports(self, store, users, risks):
        assert list_risks_for(store, _me(users["sarah"])) == [risks["sarah"]]

    def test_client_sees_project_risks(self, store, users, risks, project):
        listed = list_risks_for(store, _me(users["client"]))
        assert {r.id for r in listed} == {risks["sarah"].id, risks["mike"].id}

    def test_project_filter(self, store, users, risks, other_project):
        listed = list_risks_for(store, _me(users["admin"]), other_project.id)
        assert listed == [risks["olivia"]]

    def test_client_cannot_see_other_project_risks(self, store, users, risks, other_project):
        assert list_risks_for(store, _me(users["client"]), other_project.id) == []
