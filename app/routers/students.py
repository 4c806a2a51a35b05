from typing import Annotated, Optional

from fastapi import APIRouter, Body, Depends, Path, Query, Request, status

from app.schemas.student_schemas import BulkImportRequest, StudentPayload
from app.services.student_service import StudentService, get_student_service
from app.utils.responses import ResponseBuilder

students_router = APIRouter()

StudentServiceDep = Annotated[StudentService, Depends(get_student_service)]


@students_router.get(
    "",
    status_code=status.HTTP_200_OK,
    summary="List students",
    description="Paginated student list, newest first, filtered by an optional keyword over name, student ID, major and grade.",
)
async def list_students(
    request: Request,
    student_service: StudentServiceDep,
    page: Optional[str] = Query(default=None),
    limit: Optional[str] = Query(default=None),
    search: Optional[str] = Query(default=None),
):
    result = await student_service.list_students(page=page, limit=limit, search=search)

    return ResponseBuilder.page(
        request=request,
        result=result,
        message=f"Found {result.pagination.total_count} students",
    )


@students_router.get(
    "/search",
    status_code=status.HTTP_200_OK,
    summary="Search students",
)
async def search_students(
    request: Request,
    student_service: StudentServiceDep,
    q: Optional[str] = Query(default=None),
    page: Optional[str] = Query(default=None),
    limit: Optional[str] = Query(default=None),
):
    result = await student_service.list_students(page=page, limit=limit, search=q)

    return ResponseBuilder.success(
        request=request,
        data=result.model_dump(by_alias=True),
        message=f"Found {result.pagination.total_count} students",
    )


@students_router.get(
    "/statistics",
    status_code=status.HTTP_200_OK,
    summary="Student statistics",
    description="Total count plus counts by gender, the ten largest majors and every grade.",
)
async def get_statistics(request: Request, student_service: StudentServiceDep):
    stats = await student_service.statistics()

    return ResponseBuilder.success(
        request=request,
        data=stats.model_dump(by_alias=True),
        message="Statistics retrieved successfully",
    )


@students_router.get(
    "/check-student-id/{student_id}",
    status_code=status.HTTP_200_OK,
    summary="Check whether a student ID is available",
)
async def check_student_id(
    request: Request,
    student_service: StudentServiceDep,
    student_id: Annotated[str, Path(description="Student ID to check")],
    exclude_id: Optional[str] = Query(default=None, alias="excludeId"),
):
    availability = await student_service.check_student_id_available(
        student_id, exclude_id
    )

    return ResponseBuilder.success(
        request=request,
        data=availability.model_dump(by_alias=True),
        message=availability.message,
    )


@students_router.post(
    "/bulk-import",
    status_code=status.HTTP_200_OK,
    summary="Bulk import students",
    description="Import up to 1000 already-parsed records. Partial success is normal; every failure carries its 1-based index.",
)
async def bulk_import_students(
    request: Request,
    student_service: StudentServiceDep,
    payload: BulkImportRequest = Body(...),
):
    result = await student_service.bulk_import(payload.students)

    return ResponseBuilder.success(
        request=request,
        data=result.model_dump(by_alias=True),
        message=f"Imported {len(result.success)} students, {len(result.failed)} failed",
    )


@students_router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create a student",
)
async def create_student(
    request: Request,
    student_service: StudentServiceDep,
    payload: StudentPayload = Body(...),
):
    student = await student_service.create(payload.to_record())

    return ResponseBuilder.created(
        request=request,
        data=student.model_dump(by_alias=True),
        message=f"Student {student.name} ({student.student_id}) created successfully",
    )


@students_router.get(
    "/{student_pk}",
    status_code=status.HTTP_200_OK,
    summary="Get a student",
)
async def get_student(
    request: Request,
    student_service: StudentServiceDep,
    student_pk: Annotated[str, Path(description="Student record ID")],
):
    student = await student_service.get_by_id(student_pk)

    return ResponseBuilder.success(
        request=request,
        data=student.model_dump(by_alias=True),
        message="Student retrieved successfully",
    )


@students_router.put(
    "/{student_pk}",
    status_code=status.HTTP_200_OK,
    summary="Update a student",
)
async def update_student(
    request: Request,
    student_service: StudentServiceDep,
    student_pk: Annotated[str, Path(description="Student record ID")],
    payload: StudentPayload = Body(...),
):
    student = await student_service.update(student_pk, payload.to_record())

    return ResponseBuilder.success(
        request=request,
        data=student.model_dump(by_alias=True),
        message=f"Student {student.name} updated successfully",
    )


@students_router.delete(
    "/{student_pk}",
    status_code=status.HTTP_200_OK,
    summary="Delete a student",
)
async def delete_student(
    request: Request,
    student_service: StudentServiceDep,
    student_pk: Annotated[str, Path(description="Student record ID")],
):
    deleted = await student_service.delete(student_pk)

    return ResponseBuilder.success(
        request=request,
        data=deleted.model_dump(by_alias=True),
        message=f"Student {deleted.name} ({deleted.student_id}) deleted successfully",
    )
