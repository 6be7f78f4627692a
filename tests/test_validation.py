"""Tests for check-in and risk input validation."""

import math

import pytest

from pulse.models import CheckInKind, RiskSeverity
from pulse.validation import (
    ValidationError,
    parse_kind,
    parse_severity,
    require_text,
    validate_checkin_fields,
)


class TestKind:
    @pytest.mark.parametrize("raw", ["employee_update", "client_feedback"])
    def test_known_kinds(self, raw):
        assert parse_kind(raw) == CheckInKind(raw)

    @pytest.mark.parametrize("raw", ["EMPLOYEE_UPDATE", "status", "", None])
    def test_unknown_kind(self, raw):
        with pytest.raises(ValidationError) as exc_info:
            parse_kind(raw)
        assert exc_info.value.field == "type"


class TestCheckinFields:
    def test_employee_update_cleaned(self):
        kind, cleaned = validate_checkin_fields(
            "employee_update", {"progress": 65, "confidence": 4, "blockers": "  vendor docs  "}
        )

        assert kind == CheckInKind.EMPLOYEE_UPDATE
        assert cleaned == {"progress": 65, "confidence": 4, "blockers": "vendor docs"}

    def test_absent_fields_become_none(self):
        _, cleaned = validate_checkin_fields("client_feedback", {"satisfaction": 5})

        assert cleaned == {"satisfaction": 5, "communication": None, "comments": None}

    def test_blank_text_becomes_none(self):
        _, cleaned = validate_checkin_fields("client_feedback", {"comments": "   "})
        assert cleaned["comments"] is None

    @pytest.mark.parametrize(
        "field,value",
        [
            ("progress", -1),
            ("progress", 100.5),
            ("confidence", 0),
            ("confidence", 6),
        ],
    )
    def test_employee_out_of_range_rejected(self, field, value):
        with pytest.raises(ValidationError) as exc_info:
            validate_checkin_fields("employee_update", {field: value})
        assert exc_info.value.field == field
        assert "between" in exc_info.value.reason

    @pytest.mark.parametrize("field", ["satisfaction", "communication"])
    @pytest.mark.parametrize("value", [0, 5.01, 10])
    def test_client_out_of_range_rejected(self, field, value):
        with pytest.raises(ValidationError):
            validate_checkin_fields("client_feedback", {field: value})

    @pytest.mark.parametrize("value", [0, 100, 1.5])
    def test_bounds_inclusive(self, value):
        _, cleaned = validate_checkin_fields("employee_update", {"progress": value})
        assert cleaned["progress"] == value

    @pytest.mark.parametrize("value", ["50", True, math.nan, math.inf, [1]])
    def test_non_numbers_rejected(self, value):
        with pytest.raises(ValidationError) as exc_info:
            validate_checkin_fields("employee_update", {"progress": value})
        assert exc_info.value.field == "progress"

    def test_other_variant_field_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_checkin_fields("employee_update", {"progress": 50, "satisfaction": 5})

        assert exc_info.value.field == "satisfaction"
        assert "employee_update" in exc_info.value.reason

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_checkin_fields("client_feedback", {"mood": "great"})
        assert exc_info.value.reason == "unexpected field"

    def test_none_for_other_variant_is_ignored(self):
        _, cleaned = validate_checkin_fields("employee_update", {"progress": 10, "satisfaction": None})
        assert "satisfaction" not in cleaned

    def test_text_must_be_string(self):
        with pytest.raises(ValidationError):
            validate_checkin_fields("employee_update", {"blockers": 42})


class TestRiskFields:
    def test_require_text_strips(self):
        assert require_text("title", "  Vendor delay ") == "Vendor delay"

    @pytest.mark.parametrize("value", ["", "   ", None, 7])
    def test_require_text_rejects_empty(self, value):
        with pytest.raises(ValidationError) as exc_info:
            require_text("mitigation", value)
        assert exc_info.value.to_dict() == {"field": "mitigation", "reason": "is required"}

    @pytest.mark.parametrize("value", [None, "", "  "])
    def test_severity_defaults_to_medium(self, value):
        assert parse_severity(value) == RiskSeverity.MEDIUM

    @pytest.mark.parametrize("value", ["high", "High", "HIGH", " high "])
    def test_severity_case_insensitive(self, value):
        assert parse_severity(value) == RiskSeverity.HIGH

    def test_unknown_severity(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_severity("catastrophic")
        assert exc_info.value.field == "severity"
