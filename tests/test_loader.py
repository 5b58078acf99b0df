"""Tests for schedule data loading and validation."""

import json

import pytest

from periods.data.loader import (
    DataValidationError,
    convert_keys_to_snake_case,
    load_schedule_data,
    validate_schedule_data,
)


@pytest.fixture
def valid_data(schedule_dict):
    return convert_keys_to_snake_case(schedule_dict)


class TestValidation:
    """Tests for data validation."""

    def test_valid_data_passes(self, valid_data):
        validate_schedule_data(valid_data)  # Should not raise

    def test_missing_required_field(self, valid_data):
        del valid_data["classes"]
        with pytest.raises(DataValidationError, match="Missing required field: classes"):
            validate_schedule_data(valid_data)

    def test_unknown_class(self, valid_data):
        valid_data["schedule_entries"][0]["class_id"] = "c9"
        with pytest.raises(DataValidationError, match="unknown class: c9"):
            validate_schedule_data(valid_data)

    def test_unknown_teacher(self, valid_data):
        valid_data["schedule_entries"][0]["teacher_id"] = "t9"
        with pytest.raises(DataValidationError, match="unknown teacher: t9"):
            validate_schedule_data(valid_data)

    def test_null_teacher_is_allowed(self, valid_data):
        valid_data["schedule_entries"][0]["teacher_id"] = None
        validate_schedule_data(valid_data)

    def test_invalid_day(self, valid_data):
        valid_data["schedule_entries"][0]["day_of_week"] = "funday"
        with pytest.raises(DataValidationError, match="invalid day_of_week"):
            validate_schedule_data(valid_data)

    def test_duplicate_entry_ids(self, valid_data):
        valid_data["schedule_entries"][1]["id"] = "e1"
        with pytest.raises(DataValidationError, match="Duplicate schedule entry ID: e1"):
            validate_schedule_data(valid_data)

    def test_errors_are_collected(self, valid_data):
        valid_data["schedule_entries"][0]["class_id"] = "c9"
        valid_data["teachers"].append({"id": "t1", "first_name": "Dup"})
        with pytest.raises(DataValidationError) as exc_info:
            validate_schedule_data(valid_data)
        assert "unknown class" in str(exc_info.value)
        assert "Duplicate teacher ID" in str(exc_info.value)


class TestKeyConversion:
    """Tests for camelCase conversion."""

    def test_nested_keys(self):
        data = {"scheduleEntries": [{"teacherId": "t1", "dayOfWeek": "monday"}]}
        assert convert_keys_to_snake_case(data) == {
            "schedule_entries": [{"teacher_id": "t1", "day_of_week": "monday"}]
        }


class TestFileLoading:
    """Tests for loading data from files."""

    def test_load_valid_file(self, schedule_dict, tmp_path):
        path = tmp_path / "schedule.json"
        path.write_text(json.dumps(schedule_dict))

        data = load_schedule_data(path)

        assert len(data.schedule_entries) == 6
        assert data.teachers[0].name == "Ahmad Karimi"
        assert data.schedule_entries[0].class_name == "Grade 10A"
        assert data.schedule_entries[2].day_of_week == "monday"
        assert data.schedule_entries[4].hours == 1

    def test_load_nonexistent_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_schedule_data(tmp_path / "missing.json")

    def test_load_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{ not json")
        with pytest.raises(json.JSONDecodeError):
            load_schedule_data(path)

    def test_row_validation_error_is_wrapped(self, schedule_dict, tmp_path):
        schedule_dict["scheduleEntries"][0]["startTime"] = "half past eight"
        path = tmp_path / "schedule.json"
        path.write_text(json.dumps(schedule_dict))

        with pytest.raises(DataValidationError, match="start_time"):
            load_schedule_data(path)
