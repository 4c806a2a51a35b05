"""
Field-level validation for student records.

Every field runs presence -> length/range -> pattern, and the first failing rule
sets that field's message. Fields are checked independently so one pass reports
every problem. Nothing here touches the database; student ID uniqueness is the
service's job.
"""

import re
from typing import Any, Callable, Dict, Mapping, Optional

from app.db.models import Gender
from app.schemas.student_schemas import ValidationResult
from app.utils.string_utils import is_blank, to_int, to_str

STUDENT_FIELDS = (
    "student_id",
    "name",
    "gender",
    "age",
    "major",
    "grade",
    "email",
    "phone",
)

# Keys sent by clients that differ from the internal field name
FIELD_ALIASES = {"student_id": "studentId"}

GENDER_LABELS = {
    "MALE": Gender.MALE,
    "FEMALE": Gender.FEMALE,
    "男": Gender.MALE,
    "女": Gender.FEMALE,
}

STUDENT_ID_PATTERN = re.compile(r"[A-Za-z0-9]+")
# Letters from any script (CJK included) and whitespace
NAME_PATTERN = re.compile(r"(?:[^\W\d_]|\s)+")
GRADE_PATTERN = re.compile(
    r"大一|大二|大三|大四|研一|研二|研三|博一|博二|博三|博四|[0-9]{4}级"
)
EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
PHONE_PATTERN = re.compile(r"1[3-9][0-9]{9}")

MIN_AGE, MAX_AGE = 16, 60
EMAIL_MAX_LENGTH = 100

MESSAGES = {
    "student_id_required": "Student ID is required",
    "student_id_length": "Student ID must be 6-20 characters long",
    "student_id_pattern": "Student ID may only contain letters and digits",
    "name_required": "Name is required",
    "name_length": "Name must be 2-50 characters long",
    "name_pattern": "Name may only contain letters and spaces",
    "gender_required": "Gender is required",
    "gender_invalid": "Gender must be MALE or FEMALE",
    "age_required": "Age is required",
    "age_invalid": f"Age must be a whole number between {MIN_AGE} and {MAX_AGE}",
    "major_required": "Major is required",
    "major_length": "Major must be 2-100 characters long",
    "grade_required": "Grade is required",
    "grade_invalid": "Grade must be a level such as 大一, 研一, 博一 or a year such as 2023级",
    "email_length": f"Email must be at most {EMAIL_MAX_LENGTH} characters",
    "email_invalid": "Email format is invalid",
    "phone_invalid": "Phone must be an 11-digit mobile number starting with 13-19",
}


def read_field(record: Mapping[str, Any], field: str) -> Any:
    """Read a field by its internal name, falling back to the client alias."""
    if field in record:
        return record[field]
    alias = FIELD_ALIASES.get(field)
    return record.get(alias) if alias else None


def parse_gender(value: Any) -> Optional[Gender]:
    if isinstance(value, Gender):
        return value
    text = to_str(value)
    return GENDER_LABELS.get(text.upper(), GENDER_LABELS.get(text))


def _check_student_id(value: Any) -> Optional[str]:
    if is_blank(value):
        return MESSAGES["student_id_required"]
    student_id = to_str(value)
    if not 6 <= len(student_id) <= 20:
        return MESSAGES["student_id_length"]
    if not STUDENT_ID_PATTERN.fullmatch(student_id):
        return MESSAGES["student_id_pattern"]
    return None


def _check_name(value: Any) -> Optional[str]:
    if is_blank(value):
        return MESSAGES["name_required"]
    name = to_str(value)
    if not 2 <= len(name) <= 50:
        return MESSAGES["name_length"]
    if not NAME_PATTERN.fullmatch(name):
        return MESSAGES["name_pattern"]
    return None


def _check_gender(value: Any) -> Optional[str]:
    if is_blank(value):
        return MESSAGES["gender_required"]
    if parse_gender(value) is None:
        return MESSAGES["gender_invalid"]
    return None


def _check_age(value: Any) -> Optional[str]:
    if is_blank(value):
        return MESSAGES["age_required"]
    age = to_int(value)
    if age is None or not MIN_AGE <= age <= MAX_AGE:
        return MESSAGES["age_invalid"]
    return None


def _check_major(value: Any) -> Optional[str]:
    if is_blank(value):
        return MESSAGES["major_required"]
    if not 2 <= len(to_str(value)) <= 100:
        return MESSAGES["major_length"]
    return None


def _check_grade(value: Any) -> Optional[str]:
    if is_blank(value):
        return MESSAGES["grade_required"]
    if not GRADE_PATTERN.fullmatch(to_str(value)):
        return MESSAGES["grade_invalid"]
    return None


def _check_email(value: Any) -> Optional[str]:
    # Optional field
    if is_blank(value):
        return None
    email = to_str(value)
    if len(email) > EMAIL_MAX_LENGTH:
        return MESSAGES["email_length"]
    if not EMAIL_PATTERN.fullmatch(email):
        return MESSAGES["email_invalid"]
    return None


def _check_phone(value: Any) -> Optional[str]:
    # Optional field
    if is_blank(value):
        return None
    if not PHONE_PATTERN.fullmatch(to_str(value)):
        return MESSAGES["phone_invalid"]
    return None


FIELD_CHECKS: Dict[str, Callable[[Any], Optional[str]]] = {
    "student_id": _check_student_id,
    "name": _check_name,
    "gender": _check_gender,
    "age": _check_age,
    "major": _check_major,
    "grade": _check_grade,
    "email": _check_email,
    "phone": _check_phone,
}


def validate_student(record: Mapping[str, Any]) -> ValidationResult:
    """
    Validate every field of a raw student record.

    Args:
        record: Raw field mapping; ``studentId`` is accepted for ``student_id``.

    Returns:
        ValidationResult whose ``errors`` maps each invalid field to its message,
        in field declaration order. ``is_valid`` is True exactly when it is empty.
    """
    errors: Dict[str, str] = {}
    for field in STUDENT_FIELDS:
        message = FIELD_CHECKS[field](read_field(record, field))
        if message:
            errors[field] = message
    return ValidationResult.from_errors(errors)
