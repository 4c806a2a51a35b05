import math
from typing import Any, Dict, List, Mapping, Optional

from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import Student
from app.db.session import get_async_session
from app.repositories.student_repository import StudentRepository, UniqueViolationError
from app.schemas.response_schemas import ListPagination
from app.schemas.student_schemas import (
    BulkImportResult,
    DeletedStudent,
    GenderCount,
    GradeCount,
    ImportFailureItem,
    ImportFailureKind,
    ImportSuccessItem,
    MajorCount,
    StudentIdAvailability,
    StudentListResult,
    StudentResponse,
    StudentStatistics,
)
from app.services.bulk_reconciler import BulkReconciler
from app.utils.errors import (
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
    OperationFailedError,
    StudentValidationError,
)
from app.utils.logging import get_logger
from app.utils.string_utils import MAX_SQL_INTEGER, to_int, to_str
from app.validators.query_guards import PaginationGuard, SearchGuard
from app.validators.sanitizer import sanitize_student
from app.validators.student_validator import read_field, validate_student

logger = get_logger()

STUDENT_ID_EXISTS_MESSAGE = "Student ID already exists, please use a different one"
STUDENT_NOT_FOUND_MESSAGE = "Student not found"
EXISTS_IN_DATABASE_MESSAGE = "studentId already exists in database"
TOP_MAJORS_LIMIT = 10


class StudentService:
    """Service provider for student records: validation, persistence and bulk import"""

    def __init__(
        self,
        repository: StudentRepository,
        pagination_guard: Optional[PaginationGuard] = None,
        search_guard: Optional[SearchGuard] = None,
        bulk_reconciler: Optional[BulkReconciler] = None,
    ):
        self.repository = repository
        self.pagination_guard = pagination_guard or PaginationGuard()
        self.search_guard = search_guard or SearchGuard()
        self.bulk_reconciler = bulk_reconciler or BulkReconciler()

    # Queries
    async def list_students(
        self, page: Any = 1, limit: Any = None, search: Any = ""
    ) -> StudentListResult:
        """
        Get one page of students, optionally filtered by a search keyword.

        Pagination input is clamped, never rejected. A search keyword that fails the
        search guard raises InvalidArgumentError.
        """
        params = self.pagination_guard.normalize(
            {"page": page, "limit": limit, "search": search}
        )
        search_check = self.search_guard.check(params.search)
        if not search_check.is_valid:
            logger.warning(f"Rejected student search {params.search!r}: {search_check.error}")
            raise InvalidArgumentError(search_check.error, "INVALID_SEARCH")

        students, total_count = await self._run(
            self.repository.find_page(
                search=search_check.search,
                limit=params.limit,
                offset=(params.page - 1) * params.limit,
            ),
            "Failed to retrieve students",
        )

        total_pages = math.ceil(total_count / params.limit)
        return StudentListResult(
            students=[StudentResponse.model_validate(s) for s in students],
            pagination=ListPagination(
                current_page=params.page,
                total_pages=total_pages,
                total_count=total_count,
                has_next=params.page < total_pages,
                has_prev=params.page > 1,
                limit=params.limit,
            ),
            search=search_check.search,
        )

    async def get_by_id(self, pk: Any) -> StudentResponse:
        student = await self._get_student_or_raise(pk)
        return StudentResponse.model_validate(student)

    async def get_by_student_id(self, student_id: Any) -> Optional[Student]:
        """Look a student up by student ID; None when absent"""
        return await self._run(
            self.repository.find_one(student_id=to_str(student_id)),
            "Failed to look up student",
        )

    async def check_student_id_available(
        self, student_id: Any, exclude_id: Any = None
    ) -> StudentIdAvailability:
        """Report whether a student ID is free; `exclude_id` lets an edit form keep its own"""
        existing = await self.get_by_student_id(student_id)
        available = existing is None or (
            exclude_id is not None and existing.id == to_int(exclude_id)
        )
        return StudentIdAvailability(
            available=available,
            message="Student ID is available" if available else "Student ID already exists",
        )

    async def statistics(self) -> StudentStatistics:
        async def collect() -> StudentStatistics:
            return StudentStatistics(
                total_students=await self.repository.count(),
                gender_stats=[
                    GenderCount(gender=value, count=count)
                    for value, count in await self.repository.group_count("gender")
                ],
                major_stats=[
                    MajorCount(major=value, count=count)
                    for value, count in await self.repository.group_count(
                        "major", order_by_count=True, limit=TOP_MAJORS_LIMIT
                    )
                ],
                grade_stats=[
                    GradeCount(grade=value, count=count)
                    for value, count in await self.repository.group_count("grade")
                ],
            )

        return await self._run(collect(), "Failed to retrieve statistics")

    # Mutations
    async def create(self, data: Mapping[str, Any]) -> StudentResponse:
        """Create a student after the uniqueness probe, validation and sanitizing"""
        if await self.get_by_student_id(read_field(data, "student_id")):
            raise ConflictError(STUDENT_ID_EXISTS_MESSAGE)

        clean_data = self._validate_and_clean(data)
        try:
            student = await self._run(
                self.repository.insert(clean_data), "Failed to create student"
            )
        except UniqueViolationError:
            # Lost a race with a concurrent create between probe and insert
            logger.warning(f"Unique violation creating student {clean_data['student_id']}")
            raise ConflictError(STUDENT_ID_EXISTS_MESSAGE)

        logger.info(f"Created student {student.student_id} (id={student.id})")
        return StudentResponse.model_validate(student)

    async def update(self, pk: Any, data: Mapping[str, Any]) -> StudentResponse:
        student = await self._get_student_or_raise(pk)
        student_pk, current_student_id = student.id, student.student_id

        new_student_id = to_str(read_field(data, "student_id"))
        if new_student_id and new_student_id != current_student_id:
            if await self.get_by_student_id(new_student_id):
                raise ConflictError(STUDENT_ID_EXISTS_MESSAGE)

        clean_data = self._validate_and_clean(data)
        try:
            updated = await self._run(
                self.repository.update(student_pk, clean_data),
                "Failed to update student",
            )
        except UniqueViolationError:
            logger.warning(f"Unique violation updating student id={student_pk}")
            raise ConflictError(STUDENT_ID_EXISTS_MESSAGE)

        if updated is None:
            raise NotFoundError(STUDENT_NOT_FOUND_MESSAGE, "STUDENT_NOT_FOUND")

        logger.info(f"Updated student {updated.student_id} (id={student_pk})")
        return StudentResponse.model_validate(updated)

    async def delete(self, pk: Any) -> DeletedStudent:
        student = await self._get_student_or_raise(pk)
        deleted = DeletedStudent(
            id=student.id, student_id=student.student_id, name=student.name
        )

        await self._run(self.repository.delete(deleted.id), "Failed to delete student")

        logger.info(f"Deleted student {deleted.student_id} (id={deleted.id})")
        return deleted

    async def bulk_import(self, records: Any) -> BulkImportResult:
        """
        Import a batch of raw records, best effort.

        Only a batch that is not a list, is empty or is too large raises
        (BatchSizeError). Everything else is reported per record: invalid entries,
        in-batch duplicates, IDs already in the database and failed inserts all land
        in ``failed`` with their original 1-based index.
        """
        outcome = self.bulk_reconciler.reconcile(records)
        duplicate_indexes = {item.index for item in outcome.duplicate_keys}

        success: List[ImportSuccessItem] = []
        failed: List[ImportFailureItem] = [
            ImportFailureItem(
                index=item.index,
                data=item.data,
                error=", ".join(item.errors.values()),
                kind=ImportFailureKind.DUPLICATE_IN_BATCH
                if item.index in duplicate_indexes
                else ImportFailureKind.INVALID,
            )
            for item in outcome.invalid_data
        ]

        for entry in outcome.valid_data:
            student_id = entry.data["student_id"]
            try:
                if await self.repository.find_one(student_id=student_id):
                    failed.append(
                        ImportFailureItem(
                            index=entry.index,
                            data=entry.data,
                            error=EXISTS_IN_DATABASE_MESSAGE,
                            kind=ImportFailureKind.DUPLICATE_IN_DATABASE,
                        )
                    )
                    continue

                student = await self.repository.insert(entry.data)
            except UniqueViolationError:
                failed.append(
                    ImportFailureItem(
                        index=entry.index,
                        data=entry.data,
                        error=EXISTS_IN_DATABASE_MESSAGE,
                        kind=ImportFailureKind.DUPLICATE_IN_DATABASE,
                    )
                )
                continue
            except SQLAlchemyError as e:
                logger.error(f"Bulk import failed to insert record {entry.index}: {e}")
                failed.append(
                    ImportFailureItem(
                        index=entry.index,
                        data=entry.data,
                        error=f"Failed to save record: {e.__class__.__name__}",
                        kind=ImportFailureKind.INSERT_FAILED,
                    )
                )
                continue

            success.append(
                ImportSuccessItem(
                    index=entry.index, student_id=student.student_id, name=student.name
                )
            )

        failed.sort(key=lambda item: item.index)
        logger.info(
            f"Bulk import finished: {len(success)} created, {len(failed)} failed "
            f"of {len(records)}"
        )
        return BulkImportResult(
            success=success,
            failed=failed,
            total=len(records),
            duplicates=outcome.duplicate_keys,
        )

    # Helpers
    async def _get_student_or_raise(self, pk: Any) -> Student:
        student_pk = to_int(pk)
        if student_pk is None or student_pk <= 0:
            raise InvalidArgumentError("ID must be a positive integer", "INVALID_ID")
        if student_pk > MAX_SQL_INTEGER:
            # No row can carry an id the column cannot store
            raise NotFoundError(STUDENT_NOT_FOUND_MESSAGE, "STUDENT_NOT_FOUND")

        student = await self._run(
            self.repository.find_by_id(student_pk), "Failed to retrieve student"
        )
        if student is None:
            raise NotFoundError(STUDENT_NOT_FOUND_MESSAGE, "STUDENT_NOT_FOUND")
        return student

    @staticmethod
    def _validate_and_clean(data: Mapping[str, Any]) -> Dict[str, Any]:
        validation = validate_student(data)
        if not validation.is_valid:
            raise StudentValidationError(validation.errors)
        return sanitize_student(data)

    @staticmethod
    async def _run(operation, failure_message: str):
        """Await a repository call, wrapping driver errors into OperationFailedError"""
        try:
            return await operation
        except SQLAlchemyError as e:
            logger.error(f"{failure_message}: {e}")
            raise OperationFailedError(failure_message, detail=str(e))


def get_student_service(
    db: AsyncSession = Depends(get_async_session),
) -> StudentService:
    return StudentService(StudentRepository(db))
