from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from eduwise.auth.rbac import check_permission
from eduwise.core.enums import ClassStatus
from eduwise.core.exceptions import ServiceError
from eduwise.core.pagination import PageParams
from eduwise.core.schemas import PaginatedResponse
from eduwise.db.session import get_db

from .batch_schemas import (
    BatchClassCreate,
    BatchClassCreateResponse,
    ScheduleAdjustment,
    ScheduleAdjustmentResponse,
)
from .schemas import (
    ClassCreate,
    ClassResponse,
    ClassUpdate,
    EnrollRequest,
    EnrollResponse,
    RosterEntry,
    ScheduleCreate,
    ScheduleResponse,
    ScheduleUpdate,
)
from . import batch_service, service

router = APIRouter(prefix="/api/v1/classes", tags=["classes"])


@router.post(
    "",
    response_model=ClassResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("classes", "create"))],
)
async def create_class(
    payload: ClassCreate,
    db: AsyncSession = Depends(get_db),
) -> ClassResponse:
    try:
        return await service.create_class(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "/batch",
    response_model=BatchClassCreateResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("classes", "create"))],
)
async def create_classes_batch(
    payload: BatchClassCreate,
    db: AsyncSession = Depends(get_db),
) -> BatchClassCreateResponse:
    """Create sections_per_course classes for each course in the term. All-or-nothing."""
    try:
        return await batch_service.create_classes_batch(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "/schedule/batch",
    response_model=ScheduleAdjustmentResponse,
    dependencies=[Depends(check_permission("schedules", "update"))],
)
async def adjust_schedules_batch(
    payload: ScheduleAdjustment,
    db: AsyncSession = Depends(get_db),
) -> ScheduleAdjustmentResponse:
    try:
        return await batch_service.adjust_schedules_batch(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "",
    response_model=PaginatedResponse[ClassResponse],
    dependencies=[Depends(check_permission("classes", "read"))],
)
async def list_classes(
    search: Optional[str] = Query(None, description="Matches class name or code"),
    course_id: Optional[UUID] = Query(None),
    term_id: Optional[UUID] = Query(None),
    teacher_id: Optional[UUID] = Query(None),
    status_filter: Optional[ClassStatus] = Query(None, alias="status"),
    params: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    return await service.list_classes(
        db,
        params,
        search=search,
        course_id=course_id,
        term_id=term_id,
        teacher_id=teacher_id,
        status_=status_filter.value if status_filter else None,
    )


@router.get(
    "/code/{code}",
    response_model=ClassResponse,
    dependencies=[Depends(check_permission("classes", "read"))],
)
async def get_class_by_code(
    code: str,
    db: AsyncSession = Depends(get_db),
) -> ClassResponse:
    obj = await service.get_class_by_code(db, code)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Class not found")
    return obj


@router.patch(
    "/schedules/{schedule_id}",
    response_model=ScheduleResponse,
    dependencies=[Depends(check_permission("schedules", "update"))],
)
async def update_schedule(
    schedule_id: UUID,
    payload: ScheduleUpdate,
    db: AsyncSession = Depends(get_db),
) -> ScheduleResponse:
    try:
        obj = await service.update_schedule(db, schedule_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Schedule not found")
    return obj


@router.delete(
    "/schedules/{schedule_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(check_permission("schedules", "delete"))],
)
async def delete_schedule(
    schedule_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> None:
    if not await service.delete_schedule(db, schedule_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Schedule not found")


@router.get(
    "/{class_id}",
    response_model=ClassResponse,
    dependencies=[Depends(check_permission("classes", "read"))],
)
async def get_class(
    class_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> ClassResponse:
    obj = await service.get_class(db, class_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Class not found")
    return obj


@router.patch(
    "/{class_id}",
    response_model=ClassResponse,
    dependencies=[Depends(check_permission("classes", "update"))],
)
async def update_class(
    class_id: UUID,
    payload: ClassUpdate,
    db: AsyncSession = Depends(get_db),
) -> ClassResponse:
    try:
        obj = await service.update_class(db, class_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Class not found")
    return obj


@router.delete(
    "/{class_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(check_permission("classes", "delete"))],
)
async def delete_class(
    class_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> None:
    try:
        deleted = await service.delete_class(db, class_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Class not found")


@router.post(
    "/{class_id}/schedules",
    response_model=ScheduleResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("schedules", "create"))],
)
async def add_schedule(
    class_id: UUID,
    payload: ScheduleCreate,
    db: AsyncSession = Depends(get_db),
) -> ScheduleResponse:
    try:
        return await service.add_schedule(db, class_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "/{class_id}/schedules",
    response_model=List[ScheduleResponse],
    dependencies=[Depends(check_permission("schedules", "read"))],
)
async def list_schedules(
    class_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> List[ScheduleResponse]:
    try:
        return await service.list_schedules(db, class_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "/{class_id}/students",
    response_model=List[RosterEntry],
    dependencies=[Depends(check_permission("enrollments", "read"))],
)
async def list_roster(
    class_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> List[RosterEntry]:
    try:
        return await service.list_roster(db, class_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "/{class_id}/enroll",
    response_model=EnrollResponse,
    dependencies=[Depends(check_permission("enrollments", "create"))],
)
async def enroll_students(
    class_id: UUID,
    payload: EnrollRequest,
    db: AsyncSession = Depends(get_db),
) -> EnrollResponse:
    try:
        return await service.enroll_students(db, class_id, payload.student_ids)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete(
    "/{class_id}/students/{student_id}",
    response_model=ClassResponse,
    dependencies=[Depends(check_permission("enrollments", "delete"))],
)
async def unenroll_student(
    class_id: UUID,
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> ClassResponse:
    try:
        return await service.unenroll_student(db, class_id, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
