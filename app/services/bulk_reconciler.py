from typing import Any, Optional, Set

from app.config.settings import settings
from app.schemas.student_schemas import (
    BulkOutcome,
    DuplicateKey,
    InvalidEntry,
    ValidEntry,
)
from app.utils.errors import BatchSizeError
from app.validators.sanitizer import sanitize_student
from app.validators.student_validator import validate_student

DUPLICATE_IN_BATCH_MESSAGE = "duplicate within batch"


class BulkReconciler:
    """
    Validates an import batch and partitions it before anything touches the database.

    Records keep their 1-based position in the batch as ``index``. Only the first
    occurrence of a student ID survives; later ones are reported as invalid and as
    duplicate keys. Existing rows in the database are not consulted here.
    """

    def __init__(self, max_batch_size: Optional[int] = None):
        self.max_batch_size = max_batch_size or settings.MAX_BULK_IMPORT_SIZE

    def check_batch_size(self, records: Any) -> None:
        """Reject the whole call when the batch is not a usable list."""
        if not isinstance(records, list):
            raise BatchSizeError("Import data must be a list of student records")
        if not records:
            raise BatchSizeError("Import data must not be empty")
        if len(records) > self.max_batch_size:
            raise BatchSizeError(
                f"A single import may contain at most {self.max_batch_size} records"
            )

    def reconcile(self, records: Any) -> BulkOutcome:
        self.check_batch_size(records)

        outcome = BulkOutcome()
        seen: Set[str] = set()

        for index, record in enumerate(records, start=1):
            if not isinstance(record, dict):
                outcome.invalid_data.append(
                    InvalidEntry(
                        index=index,
                        data=record,
                        errors={"record": "Each entry must be an object of student fields"},
                    )
                )
                continue

            validation = validate_student(record)
            if not validation.is_valid:
                outcome.invalid_data.append(
                    InvalidEntry(index=index, data=record, errors=validation.errors)
                )
                continue

            sanitized = sanitize_student(record)
            student_id = sanitized["student_id"]

            if student_id in seen:
                outcome.duplicate_keys.append(
                    DuplicateKey(index=index, student_id=student_id)
                )
                outcome.invalid_data.append(
                    InvalidEntry(
                        index=index,
                        data=record,
                        errors={"student_id": DUPLICATE_IN_BATCH_MESSAGE},
                    )
                )
            else:
                seen.add(student_id)
                outcome.valid_data.append(ValidEntry(index=index, data=sanitized))

        return outcome
