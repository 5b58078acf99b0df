"""Load and validate schedule data from JSON files."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Union

from pydantic import ValidationError

from .models import DAY_NAMES, ScheduleData


class DataValidationError(Exception):
    """Raised when schedule data fails validation."""
    pass


REQUIRED_FIELDS = ["teachers", "classes", "schedule_entries"]


def load_schedule_data(path: Union[str, Path]) -> ScheduleData:
    """
    Load schedule data from a JSON file.

    Keys may be camelCase ("scheduleEntries", "teacherId") or snake_case.

    Args:
        path: Path to the JSON file

    Returns:
        Validated ScheduleData model

    Raises:
        FileNotFoundError: If the file doesn't exist
        json.JSONDecodeError: If the file isn't valid JSON
        DataValidationError: If the data fails validation
    """
    path = Path(path)

    with open(path) as f:
        data = json.load(f)

    data = convert_keys_to_snake_case(data)
    validate_schedule_data(data)
    try:
        return ScheduleData.model_validate(data)
    except ValidationError as e:
        raise DataValidationError(str(e)) from e


def validate_schedule_data(data: dict) -> None:
    """
    Validate schedule data structure and references.

    Args:
        data: Schedule data dictionary with snake_case keys

    Raises:
        DataValidationError: If validation fails
    """
    errors = []

    for field in REQUIRED_FIELDS:
        if field not in data:
            errors.append(f"Missing required field: {field}")

    if errors:
        raise DataValidationError("; ".join(errors))

    teacher_ids = {t["id"] for t in data["teachers"] if "id" in t}
    class_ids = {c["id"] for c in data["classes"] if "id" in c}

    for i, entry in enumerate(data["schedule_entries"]):
        if "id" not in entry:
            errors.append(f"Schedule entry {i} missing 'id'")
            continue

        entry_id = entry["id"]

        if "class_id" not in entry:
            errors.append(f"Schedule entry {entry_id} missing 'class_id'")
        elif entry["class_id"] not in class_ids:
            errors.append(f"Schedule entry {entry_id} references unknown class: {entry['class_id']}")

        teacher_id = entry.get("teacher_id")
        if teacher_id is not None and teacher_id not in teacher_ids:
            errors.append(f"Schedule entry {entry_id} references unknown teacher: {teacher_id}")

        day = entry.get("day_of_week")
        if not isinstance(day, str) or day.strip().lower() not in DAY_NAMES:
            errors.append(f"Schedule entry {entry_id} has invalid day_of_week: {day}")

        if "start_time" not in entry:
            errors.append(f"Schedule entry {entry_id} missing 'start_time'")

    def check_duplicates(items: list, name: str):
        seen = set()
        for item in items:
            if "id" not in item:
                continue
            if item["id"] in seen:
                errors.append(f"Duplicate {name} ID: {item['id']}")
            seen.add(item["id"])

    check_duplicates(data["teachers"], "teacher")
    check_duplicates(data["classes"], "class")
    check_duplicates(data["schedule_entries"], "schedule entry")

    if errors:
        raise DataValidationError("; ".join(errors))


def convert_keys_to_snake_case(obj: Any) -> Any:
    """Recursively convert dictionary keys from camelCase to snake_case."""

    def to_snake_case(name: str) -> str:
        name = re.sub(r'([A-Z]+)([A-Z][a-z])', r'\1_\2', name)
        name = re.sub(r'([a-z\d])([A-Z])', r'\1_\2', name)
        return name.lower()

    if isinstance(obj, dict):
        return {to_snake_case(k): convert_keys_to_snake_case(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [convert_keys_to_snake_case(item) for item in obj]
    else:
        return obj
