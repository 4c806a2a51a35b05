from .student_validator import validate_student, read_field, STUDENT_FIELDS
from .sanitizer import sanitize_student
from .query_guards import PaginationGuard, SearchGuard

__all__ = [
    "validate_student",
    "read_field",
    "STUDENT_FIELDS",
    "sanitize_student",
    "PaginationGuard",
    "SearchGuard",
]
