from typing import Any, Dict, List

from .models import MENTOR_FIELDS

REQUIRED_MENTOR_FIELDS = ["name"]
OPTIONAL_MENTOR_FIELDS = [f for f in MENTOR_FIELDS if f not in REQUIRED_MENTOR_FIELDS]

CASE_LIST_FIELDS = ["customer_problems"]
CASE_STR_FIELDS = ["id", "direction", "role", "core_content", "highlights", "language_style"]


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def validate_mentor(data: Any) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    Optional fields may be missing, null or empty.
    """
    if not isinstance(data, dict):
        return ["Mentor record must be an object"]

    errors: List[str] = []
    for f in REQUIRED_MENTOR_FIELDS:
        if f not in data:
            errors.append(f"Missing required field: {f}")
        elif not _is_non_empty_str(data[f]):
            errors.append(f"Field '{f}' must be a non-empty string")

    for f in OPTIONAL_MENTOR_FIELDS:
        if data.get(f) is not None and not isinstance(data[f], str):
            errors.append(f"Field '{f}' must be a string if provided")

    return errors


def validate_case(data: Any) -> List[str]:
    """Validate a case record before it is archived."""
    if not isinstance(data, dict):
        return ["Case record must be an object"]

    errors: List[str] = []
    if not _is_non_empty_str(data.get("case")):
        errors.append("Field 'case' must be a non-empty string")

    mentor = data.get("mentor")
    if mentor is not None and not isinstance(mentor, dict):
        errors.append("Field 'mentor' must be an object if provided")

    for f in CASE_STR_FIELDS:
        if data.get(f) is not None and not isinstance(data[f], str):
            errors.append(f"Field '{f}' must be a string if provided")

    for f in CASE_LIST_FIELDS:
        if data.get(f) is not None and not isinstance(data[f], list):
            errors.append(f"Field '{f}' must be a list if provided")

    return errors
