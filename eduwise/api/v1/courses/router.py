from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from eduwise.auth.rbac import check_permission
from eduwise.core.exceptions import ServiceError
from eduwise.core.pagination import PageParams
from eduwise.core.schemas import PaginatedResponse
from eduwise.db.session import get_db

from .schemas import CourseCreate, CourseResponse, CourseUpdate
from . import service

router = APIRouter(prefix="/api/v1/courses", tags=["courses"])


@router.post(
    "",
    response_model=CourseResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("courses", "create"))],
)
async def create_course(
    payload: CourseCreate,
    db: AsyncSession = Depends(get_db),
) -> CourseResponse:
    try:
        return await service.create_course(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "",
    response_model=PaginatedResponse[CourseResponse],
    dependencies=[Depends(check_permission("courses", "read"))],
)
async def list_courses(
    search: Optional[str] = Query(None, description="Matches code, name or description"),
    department: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    grade_level: Optional[int] = Query(None, ge=0, le=12),
    params: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    return await service.list_courses(
        db, params, search=search, department=department, is_active=is_active, grade_level=grade_level
    )


@router.get(
    "/code/{code}",
    response_model=CourseResponse,
    dependencies=[Depends(check_permission("courses", "read"))],
)
async def get_course_by_code(
    code: str,
    db: AsyncSession = Depends(get_db),
) -> CourseResponse:
    obj = await service.get_course_by_code(db, code)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")
    return obj


@router.get(
    "/{course_id}",
    response_model=CourseResponse,
    dependencies=[Depends(check_permission("courses", "read"))],
)
async def get_course(
    course_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> CourseResponse:
    obj = await service.get_course(db, course_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")
    return obj


@router.patch(
    "/{course_id}",
    response_model=CourseResponse,
    dependencies=[Depends(check_permission("courses", "update"))],
)
async def update_course(
    course_id: UUID,
    payload: CourseUpdate,
    db: AsyncSession = Depends(get_db),
) -> CourseResponse:
    try:
        obj = await service.update_course(db, course_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")
    return obj


@router.delete(
    "/{course_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(check_permission("courses", "delete"))],
)
async def delete_course(
    course_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> None:
    try:
        deleted = await service.delete_course(db, course_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")
