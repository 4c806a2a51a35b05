from typing import Any, Dict, Mapping

from app.utils.string_utils import is_blank, to_int, to_str
from app.validators.student_validator import parse_gender, read_field

TEXT_FIELDS = ("student_id", "name", "major", "grade")
OPTIONAL_TEXT_FIELDS = ("email", "phone")


def sanitize_student(record: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Normalize a validated record into the canonical form that gets persisted.

    Strings are trimmed, age becomes an int, email is lower-cased and gender becomes
    its enum value. Blank optional fields become None and unknown keys are dropped.
    Applying it to its own output changes nothing.
    """
    sanitized: Dict[str, Any] = {
        field: to_str(read_field(record, field)) for field in TEXT_FIELDS
    }

    gender = parse_gender(read_field(record, "gender"))
    sanitized["gender"] = gender.value if gender else to_str(read_field(record, "gender"))
    sanitized["age"] = to_int(read_field(record, "age"))

    for field in OPTIONAL_TEXT_FIELDS:
        value = read_field(record, field)
        sanitized[field] = None if is_blank(value) else to_str(value)

    if sanitized["email"]:
        sanitized["email"] = sanitized["email"].lower()

    return sanitized
