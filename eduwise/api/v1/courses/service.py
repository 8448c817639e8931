import logging
from typing import List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from eduwise.core.exceptions import ServiceError
from eduwise.core.models import Course, SchoolClass
from eduwise.core.pagination import PageParams, paginate
from eduwise.core.schemas import PaginatedResponse

from .schemas import CourseCreate, CourseResponse, CourseUpdate

logger = logging.getLogger(__name__)


def _course_to_response(c: Course) -> CourseResponse:
    return CourseResponse(
        id=c.id,
        code=c.code,
        name=c.name,
        description=c.description,
        department=c.department,
        credits=c.credits,
        min_grade_level=c.min_grade_level,
        max_grade_level=c.max_grade_level,
        prerequisites=list(c.prerequisites or []),
        is_active=c.is_active,
        created_at=c.created_at,
        updated_at=c.updated_at,
    )


def _normalize_code(code: str) -> str:
    return code.strip().upper()


async def _validate_prerequisites(db: AsyncSession, codes: List[str], own_code: str) -> List[str]:
    cleaned = []
    for code in codes:
        code = _normalize_code(code)
        if code and code not in cleaned:
            cleaned.append(code)
    if own_code in cleaned:
        raise ServiceError("A course cannot be its own prerequisite", status.HTTP_400_BAD_REQUEST)
    if not cleaned:
        return []
    result = await db.execute(select(Course.code).where(Course.code.in_(cleaned)))
    found = set(result.scalars().all())
    missing = [c for c in cleaned if c not in found]
    if missing:
        raise ServiceError(
            f"Unknown prerequisite course code(s): {', '.join(missing)}",
            status.HTTP_400_BAD_REQUEST,
        )
    return cleaned


async def create_course(db: AsyncSession, payload: CourseCreate) -> CourseResponse:
    code = _normalize_code(payload.code)
    prerequisites = await _validate_prerequisites(db, payload.prerequisites, code)
    try:
        obj = Course(
            code=code,
            name=payload.name.strip(),
            description=payload.description,
            department=payload.department.strip(),
            credits=payload.credits,
            min_grade_level=payload.min_grade_level,
            max_grade_level=payload.max_grade_level,
            prerequisites=prerequisites,
            is_active=payload.is_active,
        )
        db.add(obj)
        await db.commit()
        await db.refresh(obj)
        return _course_to_response(obj)
    except IntegrityError:
        await db.rollback()
        raise ServiceError(f"Course with code {code} already exists", status.HTTP_409_CONFLICT)


async def list_courses(
    db: AsyncSession,
    params: PageParams,
    search: Optional[str] = None,
    department: Optional[str] = None,
    is_active: Optional[bool] = None,
    grade_level: Optional[int] = None,
) -> PaginatedResponse[CourseResponse]:
    stmt = select(Course)
    if search:
        term = f"%{search.strip()}%"
        stmt = stmt.where(
            or_(Course.code.ilike(term), Course.name.ilike(term), Course.description.ilike(term))
        )
    if department:
        stmt = stmt.where(Course.department == department)
    if is_active is not None:
        stmt = stmt.where(Course.is_active.is_(is_active))
    if grade_level is not None:
        stmt = stmt.where(
            or_(Course.min_grade_level.is_(None), Course.min_grade_level <= grade_level),
            or_(Course.max_grade_level.is_(None), Course.max_grade_level >= grade_level),
        )
    stmt = stmt.order_by(Course.code)
    return await paginate(db, stmt, params, _course_to_response)


async def get_course_model(db: AsyncSession, course_id: UUID) -> Optional[Course]:
    result = await db.execute(select(Course).where(Course.id == course_id))
    return result.scalar_one_or_none()


async def get_course(db: AsyncSession, course_id: UUID) -> Optional[CourseResponse]:
    obj = await get_course_model(db, course_id)
    return _course_to_response(obj) if obj else None


async def get_course_by_code(db: AsyncSession, code: str) -> Optional[CourseResponse]:
    result = await db.execute(select(Course).where(Course.code == _normalize_code(code)))
    obj = result.scalar_one_or_none()
    return _course_to_response(obj) if obj else None


async def update_course(db: AsyncSession, course_id: UUID, payload: CourseUpdate) -> Optional[CourseResponse]:
    obj = await get_course_model(db, course_id)
    if not obj:
        return None
    data = payload.model_dump(exclude_unset=True)
    if data.get("code") is not None:
        obj.code = _normalize_code(data.pop("code"))
    if "prerequisites" in data:
        obj.prerequisites = await _validate_prerequisites(db, data.pop("prerequisites") or [], obj.code)
    for field in ("name", "department"):
        if data.get(field) is not None:
            setattr(obj, field, data.pop(field).strip())
    for field, value in data.items():
        if value is not None or field == "description":
            setattr(obj, field, value)
    if (
        obj.min_grade_level is not None
        and obj.max_grade_level is not None
        and obj.min_grade_level > obj.max_grade_level
    ):
        await db.rollback()
        raise ServiceError("min_grade_level cannot exceed max_grade_level", status.HTTP_400_BAD_REQUEST)
    code = obj.code
    try:
        await db.commit()
        await db.refresh(obj)
        return _course_to_response(obj)
    except IntegrityError:
        await db.rollback()
        raise ServiceError(f"Course with code {code} already exists", status.HTTP_409_CONFLICT)


async def delete_course(db: AsyncSession, course_id: UUID) -> bool:
    obj = await get_course_model(db, course_id)
    if not obj:
        return False
    used = await db.execute(select(SchoolClass.id).where(SchoolClass.course_id == course_id).limit(1))
    if used.scalar_one_or_none() is not None:
        logger.warning("Refused to delete course %s: classes reference it", obj.code)
        raise ServiceError(
            "Cannot delete course with existing classes. Please delete or reassign the classes first.",
            status.HTTP_400_BAD_REQUEST,
        )
    await db.delete(obj)
    await db.commit()
    return True
