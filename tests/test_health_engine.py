"""
Tests for HealthScoreEngine: loading inputs from the store, persisting
the result, and the read-only health accessor.
"""

import pytest

from pulse.health import HealthScoreEngine, ProjectNotFoundError
from pulse.health.weights import ScoringWeights
from pulse.models import INITIAL_HEALTH_SCORE, ProjectStatus, RiskSeverity, RiskStatus
from tests.fixtures import client_feedback, employee_update, risk


class TestRecompute:
    def test_no_activity_scores_defaults(self, store, engine, project):
        result = engine.recompute(project.id)

        assert result.health_score == 56
        assert result.status == ProjectStatus.CRITICAL

    def test_persists_score_status_and_breakdown(self, store, engine, project):
        store.insert_checkin(employee_update(progress=65, confidence=4, project_id=project.id))
        store.insert_checkin(client_feedback(satisfaction=5, communication=5, project_id=project.id))

        result = engine.recompute(project.id)

        saved = store.get_project(project.id)
        assert saved.health_score == result.health_score == 84
        assert saved.status == ProjectStatus.ON_TRACK
        assert saved.health_breakdown == result.breakdown.to_dict()
        assert saved.health_computed_at is not None

    def test_only_open_high_risks_count(self, store, engine, project):
        store.insert_checkin(employee_update(progress=65, confidence=4, project_id=project.id))
        store.insert_checkin(client_feedback(satisfaction=5, project_id=project.id))
        store.insert_risk(risk(RiskSeverity.HIGH, RiskStatus.OPEN, seq=1, project_id=project.id))
        store.insert_risk(risk(RiskSeverity.HIGH, RiskStatus.OPEN, seq=2, project_id=project.id))
        store.insert_risk(risk(RiskSeverity.HIGH, RiskStatus.RESOLVED, seq=3, project_id=project.id))
        store.insert_risk(risk(RiskSeverity.MEDIUM, RiskStatus.OPEN, seq=4, project_id=project.id))

        result = engine.recompute(project.id)

        assert result.breakdown.open_high_risk_count == 2
        assert result.health_score == 64
        assert result.status == ProjectStatus.AT_RISK

    def test_uses_latest_feedback_only(self, store, engine, project):
        store.insert_checkin(client_feedback(satisfaction=1, seq=1, project_id=project.id))
        store.insert_checkin(client_feedback(satisfaction=5, seq=2, project_id=project.id))

        result = engine.recompute(project.id)

        assert result.breakdown.client_satisfaction_score == 100

    def test_window_limits_employee_updates(self, store, engine, project):
        # Oldest update has confidence 1 and falls outside the 5-update window
        store.insert_checkin(employee_update(confidence=1, progress=10, seq=0, project_id=project.id))
        for seq in range(1, 6):
            store.insert_checkin(employee_update(confidence=5, progress=70, seq=seq, project_id=project.id))

        result = engine.recompute(project.id)

        assert result.breakdown.employee_confidence_score == 100
        assert result.breakdown.schedule_progress_score == 70

    def test_other_projects_do_not_leak(self, store, engine, project, other_project):
        store.insert_checkin(employee_update(progress=100, confidence=5, project_id=other_project.id))
        store.insert_risk(risk(RiskSeverity.HIGH, project_id=other_project.id))

        result = engine.recompute(project.id)

        assert result.health_score == 56

    def test_idempotent(self, store, engine, project):
        store.insert_checkin(employee_update(progress=30, confidence=2, project_id=project.id))

        first = engine.recompute(project.id)
        second = engine.recompute(project.id)

        assert (first.health_score, first.status) == (second.health_score, second.status)

    def test_unknown_project_raises(self, engine):
        with pytest.raises(ProjectNotFoundError) as exc_info:
            engine.recompute("missing")
        assert exc_info.value.project_id == "missing"

    def test_custom_weights(self, store, project):
        engine = HealthScoreEngine(store, ScoringWeights(risk_penalty=30))
        store.insert_risk(risk(RiskSeverity.HIGH, project_id=project.id))

        result = engine.recompute(project.id)

        assert result.health_score == 26


class TestGetHealthScore:
    def test_before_first_recompute(self, engine, project):
        snapshot = engine.get_health_score(project.id)

        assert snapshot.health_score == INITIAL_HEALTH_SCORE
        assert snapshot.status == ProjectStatus.ON_TRACK
        assert snapshot.breakdown is None
        assert snapshot.computed_at is None

    def test_reflects_last_recompute(self, engine, project):
        result = engine.recompute(project.id)

        snapshot = engine.get_health_score(project.id)

        assert snapshot.health_score == result.health_score
        assert snapshot.status == result.status
        assert snapshot.breakdown == result.breakdown.to_dict()
        assert snapshot.to_dict()["status"] == "CRITICAL"

    def test_unknown_project(self, engine):
        with pytest.raises(ProjectNotFoundError):
            engine.get_health_score("missing")


class TestRecomputeAll:
    def test_heals_every_project(self, store, engine, project, other_project):
        results = engine.recompute_all()

        assert set(results) == {project.id, other_project.id}
        assert store.get_project(project.id).health_score == 56
        assert store.get_project(other_project.id).health_score == 56
