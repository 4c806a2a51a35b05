from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field

from app.db.models import Gender
from app.schemas.camel_base_model import CamelCaseBaseModel as BaseModel
from app.schemas.response_schemas import ListPagination


# Pipeline values
class ValidationResult(BaseModel):
    """Outcome of validating a single student record"""

    is_valid: bool
    errors: Dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_errors(cls, errors: Dict[str, str]) -> "ValidationResult":
        return cls(is_valid=not errors, errors=errors)


class PaginationParams(BaseModel):
    page: int = 1
    limit: int = 10
    search: str = ""


class SearchCheck(BaseModel):
    is_valid: bool
    search: Optional[str] = None
    error: Optional[str] = None


class ValidEntry(BaseModel):
    index: int
    data: Dict[str, Any]


class InvalidEntry(BaseModel):
    index: int
    data: Any
    errors: Dict[str, str]


class DuplicateKey(BaseModel):
    index: int
    student_id: str


class BulkOutcome(BaseModel):
    """Partition of a batch into sanitized valid records and rejected ones"""

    valid_data: List[ValidEntry] = Field(default_factory=list)
    invalid_data: List[InvalidEntry] = Field(default_factory=list)
    duplicate_keys: List[DuplicateKey] = Field(default_factory=list)


# Request bodies
class StudentPayload(BaseModel):
    """
    Raw create/update body.

    Fields are untyped so that type problems reach the field validator and are reported
    per field instead of being rejected by request parsing.
    """

    student_id: Optional[Any] = None
    name: Optional[Any] = None
    gender: Optional[Any] = None
    age: Optional[Any] = None
    major: Optional[Any] = None
    grade: Optional[Any] = None
    email: Optional[Any] = None
    phone: Optional[Any] = None

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class BulkImportRequest(BaseModel):
    """Request schema for importing already-parsed student records"""

    students: Optional[Any] = Field(
        default=None, description="List of student records to import"
    )


# Responses
class StudentResponse(BaseModel):
    id: int
    student_id: str
    name: str
    gender: Gender
    age: int
    major: str
    grade: str
    email: Optional[str] = None
    phone: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class StudentListResult(BaseModel):
    students: List[StudentResponse]
    pagination: ListPagination
    search: str = ""


class DeletedStudent(BaseModel):
    id: int
    student_id: str
    name: str


class StudentIdAvailability(BaseModel):
    available: bool
    message: str


class ImportSuccessItem(BaseModel):
    index: int
    student_id: str
    name: str


class ImportFailureKind(str, Enum):
    """Why a bulk import entry was not stored"""

    INVALID = "invalid"
    DUPLICATE_IN_BATCH = "duplicate_in_batch"
    DUPLICATE_IN_DATABASE = "duplicate_in_database"
    INSERT_FAILED = "insert_failed"


class ImportFailureItem(BaseModel):
    index: int
    data: Any
    error: str
    kind: ImportFailureKind


class BulkImportResult(BaseModel):
    success: List[ImportSuccessItem] = Field(default_factory=list)
    failed: List[ImportFailureItem] = Field(default_factory=list)
    total: int = 0
    duplicates: List[DuplicateKey] = Field(default_factory=list)


class GenderCount(BaseModel):
    gender: Optional[Gender] = None
    count: int


class MajorCount(BaseModel):
    major: Optional[str] = None
    count: int


class GradeCount(BaseModel):
    grade: Optional[str] = None
    count: int


class StudentStatistics(BaseModel):
    total_students: int
    gender_stats: List[GenderCount] = Field(default_factory=list)
    major_stats: List[MajorCount] = Field(default_factory=list)
    grade_stats: List[GradeCount] = Field(default_factory=list)
