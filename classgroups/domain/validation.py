# classgroups/domain/validation.py
"""
Input validation for classes, member registrations and manual group edits.

Validators never raise: they collect every problem into a ValidationResult
so the API can report all of them at once. Payloads are plain dicts as
received from the client.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List

from classgroups.domain.grouping import GroupConstraints

MAX_GROUPS_LIMIT = 100
CLASS_NAME_MAX = 100
MEMBER_NAME_MAX = 100
LOCATION_MAX = 100
SECTOR_MAX = 50
NOTES_MAX = 500


@dataclass
class ValidationResult:
    valid: bool
    errors: List[str] = field(default_factory=list)


def _is_int(value: Any) -> bool:
    # bool is an int subclass; JSON true/false is not a size
    if isinstance(value, bool):
        return False
    if isinstance(value, float):
        return value.is_integer()
    return isinstance(value, int)


def as_int(value: Any) -> int:
    """Coerce a value that passed _is_int (e.g. JSON 3.0) to int."""
    return int(value)


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def _result(errors: List[str]) -> ValidationResult:
    return ValidationResult(valid=not errors, errors=errors)


def validate_class_creation(data: Dict[str, Any], max_groups_limit: int = MAX_GROUPS_LIMIT) -> ValidationResult:
    errors: List[str] = []

    name = data.get("name")
    if _is_blank(name):
        errors.append("Class name is required")
    elif len(name) > CLASS_NAME_MAX:
        errors.append(f"Class name must be {CLASS_NAME_MAX} characters or less")

    max_groups = data.get("max_groups")
    if not _is_int(max_groups) or max_groups < 1:
        errors.append("Max groups must be a positive integer")
    elif max_groups > max_groups_limit:
        errors.append(f"Max groups cannot exceed {max_groups_limit}")

    min_size = data.get("min_group_size")
    max_size = data.get("max_group_size")
    if not _is_int(min_size) or min_size < 1:
        errors.append("Min group size must be a positive integer")
    if not _is_int(max_size) or max_size < 1:
        errors.append("Max group size must be a positive integer")

    if _is_int(min_size) and _is_int(max_size) and max_size < min_size:
        errors.append("Max group size must be greater than or equal to min group size")

    return _result(errors)


def validate_member_registration(data: Dict[str, Any]) -> ValidationResult:
    errors: List[str] = []

    for key, label, limit in (
        ("name", "Name", MEMBER_NAME_MAX),
        ("location", "Location", LOCATION_MAX),
        ("sector", "Sector", SECTOR_MAX),
    ):
        value = data.get(key)
        if _is_blank(value):
            errors.append(f"{label} is required")
        elif len(value) > limit:
            errors.append(f"{label} must be {limit} characters or less")

    notes = data.get("notes")
    if isinstance(notes, str) and len(notes) > NOTES_MAX:
        errors.append(f"Notes must be {NOTES_MAX} characters or less")

    return _result(errors)


def validate_group_update(data: Dict[str, Any], min_group_size: int, max_group_size: int) -> ValidationResult:
    """
    Check a bulk group edit: {"groups": [{"id", "name", "position", "member_ids"}]}.
    Group sizes must stay within the class bounds.
    """
    errors: List[str] = []

    groups = data.get("groups")
    if not isinstance(groups, list):
        return _result(["Groups must be an array"])

    for group in groups:
        if not isinstance(group, dict):
            errors.append("Each group must be an object")
            continue

        group_id = group.get("id")
        label = group_id if isinstance(group_id, str) and group_id else "unknown"
        if not isinstance(group_id, str) or not group_id:
            errors.append("Each group must have a valid ID")

        name = group.get("name")
        if _is_blank(name):
            errors.append(f"Group {label} must have a name")

        position = group.get("position")
        if not _is_int(position) or position < 1:
            errors.append(f"Group {label} must have a positive position")

        member_ids = group.get("member_ids")
        if not isinstance(member_ids, list):
            errors.append(f"Group {label} must have member_ids array")
            continue
        if not all(isinstance(mid, str) for mid in member_ids):
            errors.append(f"Group {label} member_ids must be strings")

        count = len(member_ids)
        if count < min_group_size:
            errors.append(f'Group "{name}" has {count} members, minimum is {min_group_size}')
        if count > max_group_size:
            errors.append(f'Group "{name}" has {count} members, maximum is {max_group_size}')

    return _result(errors)


def constraints_from_class(max_groups: int, min_group_size: int, max_group_size: int) -> GroupConstraints:
    return GroupConstraints(
        max_groups=max_groups,
        min_group_size=min_group_size,
        max_group_size=max_group_size,
    )
