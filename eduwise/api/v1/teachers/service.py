from typing import Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from eduwise.core.exceptions import ServiceError
from eduwise.core.models import SchoolClass, Section, Teacher
from eduwise.core.pagination import PageParams, paginate
from eduwise.core.schemas import PaginatedResponse

from .schemas import Qualifications, TeacherCreate, TeacherResponse, TeacherUpdate


def _teacher_to_response(t: Teacher) -> TeacherResponse:
    return TeacherResponse(
        id=t.id,
        first_name=t.first_name,
        last_name=t.last_name,
        full_name=f"{t.first_name} {t.last_name}",
        email=t.email,
        phone=t.phone,
        department=t.department,
        position=t.position,
        status=t.status,
        hire_date=t.hire_date,
        teaching_hours=t.teaching_hours,
        qualifications=Qualifications(**(t.qualifications or {})),
        user_id=t.user_id,
        created_at=t.created_at,
        updated_at=t.updated_at,
    )


async def create_teacher(db: AsyncSession, payload: TeacherCreate) -> TeacherResponse:
    try:
        obj = Teacher(
            first_name=payload.first_name.strip(),
            last_name=payload.last_name.strip(),
            email=payload.email.lower(),
            phone=payload.phone,
            department=payload.department,
            position=payload.position,
            status=payload.status.value,
            hire_date=payload.hire_date,
            teaching_hours=payload.teaching_hours,
            qualifications=payload.qualifications.model_dump(),
            user_id=payload.user_id,
        )
        db.add(obj)
        await db.commit()
        await db.refresh(obj)
        return _teacher_to_response(obj)
    except IntegrityError:
        await db.rollback()
        raise ServiceError("A teacher with this email or user account already exists", status.HTTP_409_CONFLICT)


async def list_teachers(
    db: AsyncSession,
    params: PageParams,
    name: Optional[str] = None,
    department: Optional[str] = None,
    status_: Optional[str] = None,
) -> PaginatedResponse[TeacherResponse]:
    stmt = select(Teacher)
    if name:
        term = f"%{name.strip()}%"
        stmt = stmt.where(
            or_(Teacher.first_name.ilike(term), Teacher.last_name.ilike(term), Teacher.email.ilike(term))
        )
    if department:
        stmt = stmt.where(Teacher.department == department)
    if status_:
        stmt = stmt.where(Teacher.status == status_)
    stmt = stmt.order_by(Teacher.last_name, Teacher.first_name)
    return await paginate(db, stmt, params, _teacher_to_response)


async def _get_teacher_model(db: AsyncSession, teacher_id: UUID) -> Optional[Teacher]:
    result = await db.execute(select(Teacher).where(Teacher.id == teacher_id))
    return result.scalar_one_or_none()


async def get_teacher(db: AsyncSession, teacher_id: UUID) -> Optional[TeacherResponse]:
    obj = await _get_teacher_model(db, teacher_id)
    return _teacher_to_response(obj) if obj else None


async def update_teacher(db: AsyncSession, teacher_id: UUID, payload: TeacherUpdate) -> Optional[TeacherResponse]:
    obj = await _get_teacher_model(db, teacher_id)
    if not obj:
        return None
    data = payload.model_dump(exclude_unset=True)
    for field, value in data.items():
        if field in ("first_name", "last_name", "email", "status", "teaching_hours", "qualifications") and value is None:
            continue
        if field == "status":
            value = value.value
        elif field == "email":
            value = value.lower()
        setattr(obj, field, value)
    try:
        await db.commit()
        await db.refresh(obj)
        return _teacher_to_response(obj)
    except IntegrityError:
        await db.rollback()
        raise ServiceError("A teacher with this email or user account already exists", status.HTTP_409_CONFLICT)


async def delete_teacher(db: AsyncSession, teacher_id: UUID) -> bool:
    obj = await _get_teacher_model(db, teacher_id)
    if not obj:
        return False
    in_class = await db.execute(select(SchoolClass.id).where(SchoolClass.teacher_id == teacher_id).limit(1))
    in_section = await db.execute(select(Section.id).where(Section.teacher_id == teacher_id).limit(1))
    if in_class.scalar_one_or_none() is not None or in_section.scalar_one_or_none() is not None:
        raise ServiceError(
            "Cannot delete teacher: assigned to classes or sections. Reassign them first.",
            status.HTTP_400_BAD_REQUEST,
        )
    await db.delete(obj)
    await db.commit()
    return True
