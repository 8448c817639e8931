from typing import Dict, Iterable, List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from eduwise.core.exceptions import ServiceError
from eduwise.core.models import SchoolClass, Section, Student, Teacher
from eduwise.core.pagination import PageParams, fetch_page, page_meta
from eduwise.core.schemas import PaginatedResponse

from .schemas import SectionBulkCreate, SectionCreate, SectionResponse, SectionUpdate


def _section_to_response(s: Section, enrolled: int = 0) -> SectionResponse:
    return SectionResponse(
        id=s.id,
        class_id=s.class_id,
        name=s.name,
        capacity=s.capacity,
        enrolled_students=enrolled,
        room=s.room,
        teacher_id=s.teacher_id,
        status=s.status,
        created_at=s.created_at,
        updated_at=s.updated_at,
    )


async def _enrolled_by_section(db: AsyncSession, section_ids: Iterable[UUID]) -> Dict[UUID, int]:
    ids = list(section_ids)
    if not ids:
        return {}
    result = await db.execute(
        select(Student.section_id, func.count(Student.id).label("cnt"))
        .where(Student.section_id.in_(ids))
        .group_by(Student.section_id)
    )
    return {row.section_id: row.cnt for row in result.all()}


async def _ensure_class(db: AsyncSession, class_id: UUID) -> None:
    result = await db.execute(select(SchoolClass.id).where(SchoolClass.id == class_id))
    if result.scalar_one_or_none() is None:
        raise ServiceError("Class not found", status.HTTP_404_NOT_FOUND)


async def _ensure_teacher(db: AsyncSession, teacher_id: Optional[UUID]) -> None:
    if teacher_id is None:
        return
    result = await db.execute(select(Teacher.id).where(Teacher.id == teacher_id))
    if result.scalar_one_or_none() is None:
        raise ServiceError("Teacher not found", status.HTTP_404_NOT_FOUND)


async def create_section(db: AsyncSession, payload: SectionCreate) -> SectionResponse:
    await _ensure_class(db, payload.class_id)
    await _ensure_teacher(db, payload.teacher_id)
    try:
        obj = Section(
            class_id=payload.class_id,
            name=payload.name.strip(),
            capacity=payload.capacity,
            room=payload.room,
            teacher_id=payload.teacher_id,
            status=payload.status.value,
        )
        db.add(obj)
        await db.commit()
        await db.refresh(obj)
        return _section_to_response(obj, enrolled=0)
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Section name already exists for this class", status.HTTP_409_CONFLICT)


async def create_sections_bulk(db: AsyncSession, payload: SectionBulkCreate) -> List[SectionResponse]:
    """Create multiple sections for a class in one request. All-or-nothing: rollback on first duplicate name."""
    await _ensure_class(db, payload.class_id)
    try:
        created = []
        for item in payload.sections:
            obj = Section(
                class_id=payload.class_id,
                name=item.name.strip(),
                capacity=item.capacity,
                room=item.room,
                status="active",
            )
            db.add(obj)
            await db.flush()
            created.append(obj)
        await db.commit()
        for obj in created:
            await db.refresh(obj)
        return [_section_to_response(s, enrolled=0) for s in created]
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Section name already exists for this class (duplicate in bulk or existing)", status.HTTP_409_CONFLICT)


async def list_sections(
    db: AsyncSession,
    params: PageParams,
    class_id: Optional[UUID] = None,
    status_: Optional[str] = None,
) -> PaginatedResponse[SectionResponse]:
    stmt = select(Section)
    if class_id:
        stmt = stmt.where(Section.class_id == class_id)
    if status_:
        stmt = stmt.where(Section.status == status_)
    stmt = stmt.order_by(Section.class_id, Section.name)
    rows, total = await fetch_page(db, stmt, params)
    enrolled = await _enrolled_by_section(db, (s.id for s in rows))
    return PaginatedResponse(
        data=[_section_to_response(s, enrolled.get(s.id, 0)) for s in rows],
        meta=page_meta(total, params.page, params.limit),
    )


async def _get_section_model(db: AsyncSession, section_id: UUID) -> Optional[Section]:
    result = await db.execute(select(Section).where(Section.id == section_id))
    return result.scalar_one_or_none()


async def get_section(db: AsyncSession, section_id: UUID) -> Optional[SectionResponse]:
    obj = await _get_section_model(db, section_id)
    if not obj:
        return None
    enrolled = await _enrolled_by_section(db, [obj.id])
    return _section_to_response(obj, enrolled.get(obj.id, 0))


async def update_section(db: AsyncSession, section_id: UUID, payload: SectionUpdate) -> Optional[SectionResponse]:
    obj = await _get_section_model(db, section_id)
    if not obj:
        return None
    enrolled = (await _enrolled_by_section(db, [obj.id])).get(obj.id, 0)
    data = payload.model_dump(exclude_unset=True)
    if data.get("capacity") is not None and data["capacity"] < enrolled:
        raise ServiceError(
            f"Capacity cannot be lower than the {enrolled} students already in this section",
            status.HTTP_400_BAD_REQUEST,
        )
    if "teacher_id" in data:
        await _ensure_teacher(db, data["teacher_id"])
    if data.get("name"):
        data["name"] = data["name"].strip()
    if data.get("status") is not None:
        data["status"] = data["status"].value
    for field, value in data.items():
        if value is None and field in ("name", "capacity", "status"):
            continue
        setattr(obj, field, value)
    try:
        await db.commit()
        await db.refresh(obj)
        return _section_to_response(obj, enrolled)
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Section name already exists for this class", status.HTTP_409_CONFLICT)


async def delete_section(db: AsyncSession, section_id: UUID) -> bool:
    obj = await _get_section_model(db, section_id)
    if not obj:
        return False
    enrolled = (await _enrolled_by_section(db, [obj.id])).get(obj.id, 0)
    if enrolled > 0:
        raise ServiceError(
            "Cannot delete section with enrolled students. Please move students to another section first.",
            status.HTTP_400_BAD_REQUEST,
        )
    await db.delete(obj)
    await db.commit()
    return True
