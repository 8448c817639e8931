from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from eduwise.auth.dependencies import get_current_user
from eduwise.auth.rbac import check_permission
from eduwise.auth.schemas import CurrentUser
from eduwise.core.enums import AttendanceStatus
from eduwise.core.exceptions import ServiceError
from eduwise.core.pagination import PageParams
from eduwise.core.schemas import PaginatedResponse
from eduwise.db.session import get_db

from .schemas import (
    AttendanceBatchMark,
    AttendanceBatchResponse,
    AttendanceResponse,
    AttendanceStatistics,
    AttendanceUpdate,
)
from . import service

router = APIRouter(prefix="/api/v1/attendance", tags=["attendance"])


@router.post(
    "",
    response_model=AttendanceBatchResponse,
    dependencies=[Depends(check_permission("attendance", "create"))],
)
async def mark_attendance(
    payload: AttendanceBatchMark,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> AttendanceBatchResponse:
    """Record attendance for a class on a date. Re-marking the same students overwrites."""
    try:
        return await service.mark_attendance(db, current_user, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "",
    response_model=PaginatedResponse[AttendanceResponse],
    dependencies=[Depends(check_permission("attendance", "read"))],
)
async def list_attendance(
    class_id: Optional[UUID] = Query(None),
    student_id: Optional[UUID] = Query(None),
    on_date: Optional[date] = Query(None, alias="date"),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    status_filter: Optional[AttendanceStatus] = Query(None, alias="status"),
    params: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    return await service.list_attendance(
        db,
        params,
        class_id=class_id,
        student_id=student_id,
        on_date=on_date,
        start_date=start_date,
        end_date=end_date,
        status_=status_filter.value if status_filter else None,
    )


@router.get(
    "/statistics/student/{student_id}",
    response_model=AttendanceStatistics,
    dependencies=[Depends(check_permission("attendance", "read"))],
)
async def student_statistics(
    student_id: UUID,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> AttendanceStatistics:
    try:
        return await service.student_statistics(db, student_id, start_date=start_date, end_date=end_date)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "/{record_id}",
    response_model=AttendanceResponse,
    dependencies=[Depends(check_permission("attendance", "read"))],
)
async def get_attendance(
    record_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> AttendanceResponse:
    obj = await service.get_attendance(db, record_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Attendance record not found")
    return obj


@router.patch(
    "/{record_id}",
    response_model=AttendanceResponse,
    dependencies=[Depends(check_permission("attendance", "update"))],
)
async def update_attendance(
    record_id: UUID,
    payload: AttendanceUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> AttendanceResponse:
    try:
        obj = await service.update_attendance(db, current_user, record_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Attendance record not found")
    return obj


@router.delete(
    "/{record_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(check_permission("attendance", "delete"))],
)
async def delete_attendance(
    record_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> None:
    if not await service.delete_attendance(db, record_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Attendance record not found")
