"""
Tests for schema validation.
"""

import pytest
from mentormatch.schema import validate_case, validate_mentor


class TestValidateMentor:
    """Test mentor record validation."""

    def test_valid_full_record(self, mentor_records):
        """Valid record should have no errors."""
        assert validate_mentor(mentor_records[0]) == []

    def test_name_only_is_valid(self):
        """Every field except name is optional."""
        assert validate_mentor({"name": "王老师"}) == []

    def test_missing_name(self):
        errors = validate_mentor({"direction": "金融"})
        assert any("name" in err.lower() for err in errors)

    def test_blank_name(self):
        errors = validate_mentor({"name": "   "})
        assert len(errors) > 0

    def test_null_optional_fields_allowed(self):
        assert validate_mentor({"name": "王老师", "company": None, "position": None}) == []

    def test_non_string_optional_field(self):
        errors = validate_mentor({"name": "王老师", "direction": ["金融"]})
        assert any("direction" in err for err in errors)

    def test_extra_fields_ignored(self):
        assert validate_mentor({"name": "王老师", "avatar": 1}) == []

    @pytest.mark.parametrize("data", [None, "王老师", ["name"]])
    def test_not_an_object(self, data):
        assert validate_mentor(data) == ["Mentor record must be an object"]


class TestValidateCase:
    """Test case record validation."""

    def test_valid(self, case_record):
        assert validate_case(case_record) == []

    def test_case_text_required(self, case_record):
        case_record.pop("case")
        errors = validate_case(case_record)
        assert any("'case'" in err for err in errors)

    def test_problems_must_be_list(self, case_record):
        case_record["customer_problems"] = "interview"
        errors = validate_case(case_record)
        assert any("customer_problems" in err for err in errors)

    def test_mentor_must_be_object(self, case_record):
        case_record["mentor"] = "张老师"
        errors = validate_case(case_record)
        assert any("mentor" in err for err in errors)

    def test_string_fields(self, case_record):
        case_record["direction"] = 5
        errors = validate_case(case_record)
        assert any("direction" in err for err in errors)
