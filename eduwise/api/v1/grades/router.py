from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from eduwise.auth.dependencies import get_current_user
from eduwise.auth.rbac import check_permission
from eduwise.auth.schemas import CurrentUser
from eduwise.core.exceptions import ServiceError
from eduwise.core.pagination import PageParams
from eduwise.core.schemas import PaginatedResponse
from eduwise.db.session import get_db

from .schemas import (
    AssignmentCreate,
    AssignmentResponse,
    AssignmentUpdate,
    GradeBatchRecord,
    GradeBatchResponse,
    GradeResponse,
    GradeStatistics,
    GradeUpdate,
)
from . import service

router = APIRouter(prefix="/api/v1/grades", tags=["grades"])


# ----- Assignments -----


@router.post(
    "/assignments",
    response_model=AssignmentResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("assignments", "create"))],
)
async def create_assignment(
    payload: AssignmentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> AssignmentResponse:
    try:
        return await service.create_assignment(db, current_user, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "/assignments",
    response_model=PaginatedResponse[AssignmentResponse],
    dependencies=[Depends(check_permission("assignments", "read"))],
)
async def list_assignments(
    class_id: Optional[UUID] = Query(None),
    params: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    return await service.list_assignments(db, params, class_id=class_id)


@router.get(
    "/assignments/{assignment_id}",
    response_model=AssignmentResponse,
    dependencies=[Depends(check_permission("assignments", "read"))],
)
async def get_assignment(
    assignment_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> AssignmentResponse:
    obj = await service.get_assignment(db, assignment_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Assignment not found")
    return obj


@router.patch(
    "/assignments/{assignment_id}",
    response_model=AssignmentResponse,
    dependencies=[Depends(check_permission("assignments", "update"))],
)
async def update_assignment(
    assignment_id: UUID,
    payload: AssignmentUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> AssignmentResponse:
    try:
        obj = await service.update_assignment(db, current_user, assignment_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Assignment not found")
    return obj


@router.delete(
    "/assignments/{assignment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(check_permission("assignments", "delete"))],
)
async def delete_assignment(
    assignment_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> None:
    if not await service.delete_assignment(db, assignment_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Assignment not found")


# ----- Grades -----


@router.post(
    "",
    response_model=GradeBatchResponse,
    dependencies=[Depends(check_permission("grades", "create"))],
)
async def record_grades(
    payload: GradeBatchRecord,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> GradeBatchResponse:
    """Record scores for an assignment. Missing/excused entries are stored without a score."""
    try:
        return await service.record_grades(db, current_user, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "",
    response_model=PaginatedResponse[GradeResponse],
    dependencies=[Depends(check_permission("grades", "read"))],
)
async def list_grades(
    assignment_id: Optional[UUID] = Query(None),
    student_id: Optional[UUID] = Query(None),
    class_id: Optional[UUID] = Query(None),
    params: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    return await service.list_grades(
        db, params, assignment_id=assignment_id, student_id=student_id, class_id=class_id
    )


@router.get(
    "/statistics/student/{student_id}/class/{class_id}",
    response_model=GradeStatistics,
    dependencies=[Depends(check_permission("grades", "read"))],
)
async def student_class_statistics(
    student_id: UUID,
    class_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> GradeStatistics:
    try:
        return await service.student_class_statistics(db, student_id, class_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "/{grade_id}",
    response_model=GradeResponse,
    dependencies=[Depends(check_permission("grades", "read"))],
)
async def get_grade(
    grade_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> GradeResponse:
    obj = await service.get_grade(db, grade_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Grade not found")
    return obj


@router.patch(
    "/{grade_id}",
    response_model=GradeResponse,
    dependencies=[Depends(check_permission("grades", "update"))],
)
async def update_grade(
    grade_id: UUID,
    payload: GradeUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> GradeResponse:
    try:
        obj = await service.update_grade(db, current_user, grade_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Grade not found")
    return obj


@router.delete(
    "/{grade_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(check_permission("grades", "delete"))],
)
async def delete_grade(
    grade_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> None:
    if not await service.delete_grade(db, grade_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Grade not found")
