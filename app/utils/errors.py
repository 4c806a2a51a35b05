from typing import Dict, Optional

from fastapi import FastAPI, Request, status
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from pydantic.alias_generators import to_camel
import traceback
from .logging import get_logger
from .responses import ResponseBuilder

logger = get_logger()


class ServiceError(Exception):
    """Base class for errors raised by the student service layer."""

    error_code = "SERVICE_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.error_code


class StudentValidationError(ServiceError):
    """One or more record fields failed validation."""

    error_code = "VALIDATION_ERROR"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(
        self,
        field_errors: Dict[str, str],
        message: str = "Student data validation failed",
        error_code: Optional[str] = None,
    ):
        super().__init__(message, error_code)
        self.field_errors = dict(field_errors)


class ConflictError(ServiceError):
    """The student ID is already taken."""

    error_code = "STUDENT_ID_EXISTS"
    status_code = status.HTTP_409_CONFLICT


class NotFoundError(ServiceError):
    """Custom exception for resource not found errors."""

    error_code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(
        self, message: str = "Resource not found", error_code: Optional[str] = None
    ):
        super().__init__(message, error_code)


class InvalidArgumentError(ServiceError):
    """Malformed id, pagination or search input."""

    error_code = "INVALID_ARGUMENT"


class BatchSizeError(ServiceError):
    """A bulk import batch is not a list, is empty or is too large."""

    error_code = "INVALID_BATCH"


class OperationFailedError(ServiceError):
    """
    A persistence failure that is neither a uniqueness violation nor a missing row.

    `detail` keeps the driver message for diagnostics; it is logged, never returned
    to the client.
    """

    error_code = "OPERATION_FAILED"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str = "Operation failed",
        detail: Optional[str] = None,
        error_code: Optional[str] = None,
    ):
        super().__init__(message, error_code)
        self.detail = detail


ERROR_TYPES = {
    StudentValidationError: "VALIDATION_ERROR",
    ConflictError: "CONFLICT_ERROR",
    NotFoundError: "NOT_FOUND_ERROR",
    InvalidArgumentError: "INVALID_ARGUMENT_ERROR",
    BatchSizeError: "BATCH_SIZE_ERROR",
    OperationFailedError: "OPERATION_FAILED_ERROR",
}


def setup_error_handlers(app: FastAPI):
    """Setup custom error handlers."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        logger.error(f"HTTP Exception: {exc.status_code} - {exc.detail}")
        return ResponseBuilder.error(
            request=request,
            message=str(exc.detail),
            error_code="HTTP_ERROR",
            status_code=exc.status_code,
            meta={"http_status": exc.status_code},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(
        request: Request, exc: RequestValidationError
    ):
        logger.warning(f"Request Validation Error: {exc.errors()}")

        # Format validation errors for better readability
        formatted_errors = []
        for error in exc.errors():
            field_path = " -> ".join(str(loc) for loc in error["loc"])
            formatted_errors.append(
                {
                    "field": field_path,
                    "message": error["msg"],
                    "type": error["type"],
                }
            )

        return ResponseBuilder.error(
            request=request,
            message="Request validation failed",
            errors=formatted_errors,
            error_code="REQUEST_VALIDATION_ERROR",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        )

    @app.exception_handler(StudentValidationError)
    async def student_validation_exception_handler(
        request: Request, exc: StudentValidationError
    ):
        logger.warning(f"Student Validation Error: {exc.field_errors}")

        # Same camelCase keys as the request and response bodies
        field_errors = {
            to_camel(field): message for field, message in exc.field_errors.items()
        }
        return ResponseBuilder.error(
            request=request,
            message=exc.message,
            errors=[
                {"field": field, "message": message}
                for field, message in field_errors.items()
            ],
            data={"fieldErrors": field_errors},
            error_code=exc.error_code,
            status_code=exc.status_code,
            meta={"error_type": ERROR_TYPES[StudentValidationError]},
        )

    @app.exception_handler(OperationFailedError)
    async def operation_failed_exception_handler(
        request: Request, exc: OperationFailedError
    ):
        logger.error(f"Operation Failed: {exc.message} ({exc.detail})")

        # Don't expose internal database errors to users
        return ResponseBuilder.error(
            request=request,
            message=exc.message,
            error_code=exc.error_code,
            status_code=exc.status_code,
            meta={"error_type": ERROR_TYPES[OperationFailedError]},
        )

    @app.exception_handler(ServiceError)
    async def service_exception_handler(request: Request, exc: ServiceError):
        logger.warning(f"{type(exc).__name__}: {exc.message}")

        return ResponseBuilder.error(
            request=request,
            message=exc.message,
            error_code=exc.error_code,
            status_code=exc.status_code,
            meta={"error_type": ERROR_TYPES.get(type(exc), "SERVICE_ERROR")},
        )

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
        logger.error(f"SQLAlchemy Error: {str(exc)}")

        return ResponseBuilder.error(
            request=request,
            message="A database error occurred",
            error_code="DATABASE_ERROR",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            meta={"error_type": "SQLALCHEMY_ERROR"},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle all other unhandled exceptions"""
        logger.error(f"Unhandled Exception: {str(exc)}")
        logger.error(f"Traceback: {traceback.format_exc()}")

        return ResponseBuilder.error(
            request=request,
            message="An internal server error occurred",
            error_code="INTERNAL_ERROR",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            meta={"error_type": "INTERNAL_ERROR"},
        )
