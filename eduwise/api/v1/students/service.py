import logging
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from eduwise.auth.models import User
from eduwise.core.exceptions import ServiceError
from eduwise.core.models import Enrollment, Section, Student
from eduwise.core.pagination import PageParams, paginate
from eduwise.core.schemas import PaginatedResponse

from .schemas import StudentCreate, StudentResponse, StudentUpdate

logger = logging.getLogger(__name__)


def _student_to_response(s: Student) -> StudentResponse:
    return StudentResponse(
        id=s.id,
        first_name=s.first_name,
        last_name=s.last_name,
        full_name=f"{s.first_name} {s.last_name}".strip(),
        email=s.email,
        phone=s.phone,
        address=s.address,
        dob=s.dob,
        gender=s.gender,
        grade_level=s.grade_level,
        status=s.status,
        enrollment_date=s.enrollment_date,
        guardian_name=s.guardian_name,
        guardian_phone=s.guardian_phone,
        guardian_email=s.guardian_email,
        section_id=s.section_id,
        user_id=s.user_id,
        guardian_user_id=s.guardian_user_id,
        registration_id=s.registration_id,
        created_at=s.created_at,
        updated_at=s.updated_at,
    )


async def _check_references(db: AsyncSession, section_id: Optional[UUID], user_ids) -> None:
    if section_id is not None:
        result = await db.execute(select(Section.id).where(Section.id == section_id))
        if result.scalar_one_or_none() is None:
            raise ServiceError("Section not found", status.HTTP_404_NOT_FOUND)
    for user_id in user_ids:
        if user_id is None:
            continue
        result = await db.execute(select(User.id).where(User.id == user_id))
        if result.scalar_one_or_none() is None:
            raise ServiceError("Linked user account not found", status.HTTP_404_NOT_FOUND)


async def create_student(db: AsyncSession, payload: StudentCreate) -> StudentResponse:
    await _check_references(db, payload.section_id, (payload.user_id, payload.guardian_user_id))
    data = payload.model_dump()
    data["first_name"] = data["first_name"].strip()
    data["last_name"] = data["last_name"].strip()
    data["status"] = payload.status.value
    data["gender"] = payload.gender.value if payload.gender else None
    data["enrollment_date"] = payload.enrollment_date or date.today()
    obj = Student(**data)
    db.add(obj)
    await db.commit()
    await db.refresh(obj)
    return _student_to_response(obj)


async def list_students(
    db: AsyncSession,
    params: PageParams,
    name: Optional[str] = None,
    grade: Optional[str] = None,
    status_: Optional[str] = None,
    section_id: Optional[UUID] = None,
) -> PaginatedResponse[StudentResponse]:
    stmt = select(Student)
    if name:
        term = f"%{name.strip()}%"
        full_name = Student.first_name + " " + Student.last_name
        stmt = stmt.where(
            or_(
                Student.first_name.ilike(term),
                Student.last_name.ilike(term),
                full_name.ilike(term),
                Student.email.ilike(term),
            )
        )
    if grade:
        stmt = stmt.where(Student.grade_level == grade)
    if status_:
        stmt = stmt.where(Student.status == status_)
    if section_id:
        stmt = stmt.where(Student.section_id == section_id)
    stmt = stmt.order_by(Student.last_name, Student.first_name)
    return await paginate(db, stmt, params, _student_to_response)


async def get_student_model(db: AsyncSession, student_id: UUID) -> Optional[Student]:
    result = await db.execute(select(Student).where(Student.id == student_id))
    return result.scalar_one_or_none()


async def get_student(db: AsyncSession, student_id: UUID) -> Optional[StudentResponse]:
    obj = await get_student_model(db, student_id)
    return _student_to_response(obj) if obj else None


async def update_student(db: AsyncSession, student_id: UUID, payload: StudentUpdate) -> Optional[StudentResponse]:
    obj = await get_student_model(db, student_id)
    if not obj:
        return None
    data = payload.model_dump(exclude_unset=True)
    await _check_references(
        db,
        data.get("section_id"),
        (data.get("user_id"), data.get("guardian_user_id")),
    )
    for field, value in data.items():
        if field in ("first_name", "last_name", "status") and value is None:
            continue
        if field in ("status", "gender") and value is not None:
            value = value.value
        setattr(obj, field, value)
    await db.commit()
    await db.refresh(obj)
    return _student_to_response(obj)


async def delete_student(db: AsyncSession, student_id: UUID) -> bool:
    obj = await get_student_model(db, student_id)
    if not obj:
        return False
    enrolled = await db.execute(select(Enrollment.id).where(Enrollment.student_id == student_id).limit(1))
    if enrolled.scalar_one_or_none() is not None:
        logger.warning("Refused to delete student %s: has enrollments", student_id)
        raise ServiceError(
            "Cannot delete a student with class enrollments; change the status instead",
            status.HTTP_400_BAD_REQUEST,
        )
    await db.delete(obj)
    await db.commit()
    return True
