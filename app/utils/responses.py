import uuid
from typing import Any, Dict, List, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse

from app.schemas.response_schemas import ApiResponse
from app.schemas.student_schemas import StudentListResult


class ResponseBuilder:
    """Wraps service results and errors in the ApiResponse envelope"""

    @staticmethod
    def _render(request: Request, status_code: int, **fields: Any) -> JSONResponse:
        # Requests rejected before the middleware ran have no id yet
        request_id = getattr(request.state, "request_id", None) or str(uuid.uuid4())
        envelope = ApiResponse(
            request_id=request_id, path=str(request.url.path), **fields
        )
        return JSONResponse(
            status_code=status_code,
            content=envelope.model_dump(mode="json", by_alias=True, exclude_none=True),
        )

    @classmethod
    def success(
        cls,
        request: Request,
        data: Any = None,
        message: str = "Request successful",
        meta: Optional[Dict[str, Any]] = None,
        status_code: int = status.HTTP_200_OK,
    ) -> JSONResponse:
        return cls._render(
            request, status_code, success=True, message=message, data=data, meta=meta
        )

    @classmethod
    def created(cls, request: Request, data: Any, message: str) -> JSONResponse:
        return cls.success(
            request, data=data, message=message, status_code=status.HTTP_201_CREATED
        )

    @classmethod
    def page(
        cls, request: Request, result: StudentListResult, message: str
    ) -> JSONResponse:
        """One page of students, with the pagination block lifted into the envelope"""
        return cls._render(
            request,
            status.HTTP_200_OK,
            success=True,
            message=message,
            data=[student.model_dump(by_alias=True) for student in result.students],
            pagination=result.pagination,
            meta={"search": result.search} if result.search else None,
        )

    @classmethod
    def error(
        cls,
        request: Request,
        message: str,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        error_code: Optional[str] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
        data: Any = None,
        meta: Optional[Dict[str, Any]] = None,
    ) -> JSONResponse:
        return cls._render(
            request,
            status_code,
            success=False,
            message=message,
            error_code=error_code,
            errors=errors,
            data=data,
            meta=meta,
        )
