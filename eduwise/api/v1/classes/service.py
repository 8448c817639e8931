import logging
from datetime import time
from typing import List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from eduwise.core.exceptions import ServiceError
from eduwise.core.models import (
    Assignment,
    AttendanceRecord,
    ClassSchedule,
    Course,
    Enrollment,
    SchoolClass,
    Section,
    Student,
    Teacher,
    Term,
)
from eduwise.core.pagination import PageParams, paginate
from eduwise.core.schemas import PaginatedResponse

from .schemas import (
    ClassCreate,
    ClassResponse,
    ClassUpdate,
    EnrollResponse,
    RosterEntry,
    ScheduleCreate,
    ScheduleResponse,
    ScheduleUpdate,
)

logger = logging.getLogger(__name__)


def _class_to_response(c: SchoolClass) -> ClassResponse:
    return ClassResponse(
        id=c.id,
        code=c.code,
        name=c.name,
        course_id=c.course_id,
        term_id=c.term_id,
        section_label=c.section_label,
        teacher_id=c.teacher_id,
        room=c.room,
        building=c.building,
        capacity=c.capacity,
        enrolled_count=c.enrolled_count,
        waitlist_count=c.waitlist_count,
        available_seats=max(c.capacity - c.enrolled_count, 0),
        status=c.status,
        notes=c.notes,
        created_at=c.created_at,
        updated_at=c.updated_at,
    )


def _schedule_to_response(s: ClassSchedule) -> ScheduleResponse:
    return ScheduleResponse(
        id=s.id,
        class_id=s.class_id,
        day_of_week=s.day_of_week,
        start_time=s.start_time,
        end_time=s.end_time,
        room=s.room,
        building=s.building,
    )


async def _require(db: AsyncSession, model, obj_id: Optional[UUID], label: str):
    if obj_id is None:
        return None
    result = await db.execute(select(model).where(model.id == obj_id))
    obj = result.scalar_one_or_none()
    if not obj:
        raise ServiceError(f"{label} not found", status.HTTP_404_NOT_FOUND)
    return obj


async def create_class(db: AsyncSession, payload: ClassCreate) -> ClassResponse:
    await _require(db, Course, payload.course_id, "Course")
    await _require(db, Term, payload.term_id, "Term")
    await _require(db, Teacher, payload.teacher_id, "Teacher")
    code = payload.code.strip().upper()
    try:
        obj = SchoolClass(
            code=code,
            name=payload.name.strip(),
            course_id=payload.course_id,
            term_id=payload.term_id,
            section_label=payload.section_label,
            teacher_id=payload.teacher_id,
            room=payload.room,
            building=payload.building,
            capacity=payload.capacity,
            enrolled_count=0,
            waitlist_count=0,
            status=payload.status.value,
            notes=payload.notes,
        )
        db.add(obj)
        await db.commit()
        await db.refresh(obj)
        return _class_to_response(obj)
    except IntegrityError:
        await db.rollback()
        raise ServiceError(f"Class with code {code} already exists", status.HTTP_409_CONFLICT)


async def list_classes(
    db: AsyncSession,
    params: PageParams,
    search: Optional[str] = None,
    course_id: Optional[UUID] = None,
    term_id: Optional[UUID] = None,
    teacher_id: Optional[UUID] = None,
    status_: Optional[str] = None,
) -> PaginatedResponse[ClassResponse]:
    stmt = select(SchoolClass)
    if search:
        term = f"%{search.strip()}%"
        stmt = stmt.where(or_(SchoolClass.name.ilike(term), SchoolClass.code.ilike(term)))
    if course_id:
        stmt = stmt.where(SchoolClass.course_id == course_id)
    if term_id:
        stmt = stmt.where(SchoolClass.term_id == term_id)
    if teacher_id:
        stmt = stmt.where(SchoolClass.teacher_id == teacher_id)
    if status_:
        stmt = stmt.where(SchoolClass.status == status_)
    stmt = stmt.order_by(SchoolClass.code)
    return await paginate(db, stmt, params, _class_to_response)


async def get_class_model(db: AsyncSession, class_id: UUID) -> Optional[SchoolClass]:
    result = await db.execute(select(SchoolClass).where(SchoolClass.id == class_id))
    return result.scalar_one_or_none()


async def get_class(db: AsyncSession, class_id: UUID) -> Optional[ClassResponse]:
    obj = await get_class_model(db, class_id)
    return _class_to_response(obj) if obj else None


async def get_class_by_code(db: AsyncSession, code: str) -> Optional[ClassResponse]:
    result = await db.execute(select(SchoolClass).where(SchoolClass.code == code.strip().upper()))
    obj = result.scalar_one_or_none()
    return _class_to_response(obj) if obj else None


async def update_class(db: AsyncSession, class_id: UUID, payload: ClassUpdate) -> Optional[ClassResponse]:
    obj = await get_class_model(db, class_id)
    if not obj:
        return None
    data = payload.model_dump(exclude_unset=True)
    if "teacher_id" in data:
        await _require(db, Teacher, data["teacher_id"], "Teacher")
    if data.get("capacity") is not None and data["capacity"] < obj.enrolled_count:
        raise ServiceError(
            f"Capacity cannot be lower than the {obj.enrolled_count} students already enrolled",
            status.HTTP_400_BAD_REQUEST,
        )
    if data.get("code"):
        data["code"] = data["code"].strip().upper()
    if data.get("status") is not None:
        data["status"] = data["status"].value
    for field, value in data.items():
        if value is None and field in ("code", "name", "capacity", "status"):
            continue
        setattr(obj, field, value)
    try:
        await db.commit()
        await db.refresh(obj)
        return _class_to_response(obj)
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Class with this code already exists", status.HTTP_409_CONFLICT)


async def delete_class(db: AsyncSession, class_id: UUID) -> bool:
    obj = await get_class_model(db, class_id)
    if not obj:
        return False
    if obj.enrolled_count > 0:
        logger.warning("Refused to delete class %s: %d students enrolled", obj.code, obj.enrolled_count)
        raise ServiceError(
            "Cannot delete class with enrolled students. Please unenroll all students first.",
            status.HTTP_400_BAD_REQUEST,
        )
    has_sections = await db.execute(select(Section.id).where(Section.class_id == class_id).limit(1))
    if has_sections.scalar_one_or_none() is not None:
        raise ServiceError("Cannot delete class: it has sections", status.HTTP_400_BAD_REQUEST)
    for model, what in ((AttendanceRecord, "attendance records"), (Assignment, "grade items")):
        found = await db.execute(select(model.id).where(model.class_id == class_id).limit(1))
        if found.scalar_one_or_none() is not None:
            logger.warning("Refused to delete class %s: it has %s", obj.code, what)
            raise ServiceError(
                f"Cannot delete class: it has {what}. Set its status to inactive instead.",
                status.HTTP_400_BAD_REQUEST,
            )
    await db.execute(delete(ClassSchedule).where(ClassSchedule.class_id == class_id))
    await db.delete(obj)
    await db.commit()
    return True


# ----- Schedules -----


def _overlaps(start_a: time, end_a: time, start_b: time, end_b: time) -> bool:
    return start_a < end_b and end_a > start_b


async def find_schedule_conflict(
    db: AsyncSession,
    term_id: UUID,
    day_of_week: str,
    start_time: time,
    end_time: time,
    room: Optional[str],
    building: Optional[str],
    exclude_ids: Optional[List[UUID]] = None,
) -> Optional[ClassSchedule]:
    """First schedule of the same term and day that overlaps in time in the same room and building."""
    if not room:
        return None
    stmt = (
        select(ClassSchedule, SchoolClass.room, SchoolClass.building)
        .join(SchoolClass, SchoolClass.id == ClassSchedule.class_id)
        .where(SchoolClass.term_id == term_id, ClassSchedule.day_of_week == day_of_week)
    )
    if exclude_ids:
        stmt = stmt.where(ClassSchedule.id.not_in(exclude_ids))
    result = await db.execute(stmt)
    for other, class_room, class_building in result.all():
        other_room = other.room or class_room
        other_building = other.building or class_building
        if other_room != room or (other_building or None) != (building or None):
            continue
        if _overlaps(start_time, end_time, other.start_time, other.end_time):
            return other
    return None


async def _assert_no_conflict(db, klass: SchoolClass, day, start, end, room, building, exclude_ids=None) -> None:
    conflict = await find_schedule_conflict(
        db,
        klass.term_id,
        day,
        start,
        end,
        room or klass.room,
        building or klass.building,
        exclude_ids=exclude_ids,
    )
    if conflict is not None:
        raise ServiceError(
            "Schedule conflicts with existing class in the same room/building",
            status.HTTP_409_CONFLICT,
        )


async def add_schedule(db: AsyncSession, class_id: UUID, payload: ScheduleCreate) -> ScheduleResponse:
    klass = await _require(db, SchoolClass, class_id, "Class")
    day = payload.day_of_week.value
    await _assert_no_conflict(db, klass, day, payload.start_time, payload.end_time, payload.room, payload.building)
    obj = ClassSchedule(
        class_id=class_id,
        day_of_week=day,
        start_time=payload.start_time,
        end_time=payload.end_time,
        room=payload.room,
        building=payload.building,
    )
    db.add(obj)
    await db.commit()
    await db.refresh(obj)
    return _schedule_to_response(obj)


async def list_schedules(db: AsyncSession, class_id: UUID) -> List[ScheduleResponse]:
    await _require(db, SchoolClass, class_id, "Class")
    result = await db.execute(
        select(ClassSchedule).where(ClassSchedule.class_id == class_id).order_by(ClassSchedule.start_time)
    )
    return [_schedule_to_response(s) for s in result.scalars().all()]


async def update_schedule(
    db: AsyncSession, schedule_id: UUID, payload: ScheduleUpdate
) -> Optional[ScheduleResponse]:
    result = await db.execute(select(ClassSchedule).where(ClassSchedule.id == schedule_id))
    obj = result.scalar_one_or_none()
    if not obj:
        return None
    data = payload.model_dump(exclude_unset=True)
    day = data["day_of_week"].value if data.get("day_of_week") else obj.day_of_week
    start = data.get("start_time") or obj.start_time
    end = data.get("end_time") or obj.end_time
    room = data["room"] if "room" in data else obj.room
    building = data["building"] if "building" in data else obj.building
    if end <= start:
        raise ServiceError("end_time must be after start_time", status.HTTP_400_BAD_REQUEST)
    klass = await _require(db, SchoolClass, obj.class_id, "Class")
    await _assert_no_conflict(db, klass, day, start, end, room, building, exclude_ids=[obj.id])
    obj.day_of_week = day
    obj.start_time = start
    obj.end_time = end
    obj.room = room
    obj.building = building
    await db.commit()
    await db.refresh(obj)
    return _schedule_to_response(obj)


async def delete_schedule(db: AsyncSession, schedule_id: UUID) -> bool:
    result = await db.execute(select(ClassSchedule).where(ClassSchedule.id == schedule_id))
    obj = result.scalar_one_or_none()
    if not obj:
        return False
    await db.delete(obj)
    await db.commit()
    return True


# ----- Enrollment -----


async def enroll_students(db: AsyncSession, class_id: UUID, student_ids: List[UUID]) -> EnrollResponse:
    klass = await _require(db, SchoolClass, class_id, "Class")
    wanted = list(dict.fromkeys(student_ids))
    if klass.enrolled_count >= klass.capacity:
        raise ServiceError("Class is at full capacity", status.HTTP_400_BAD_REQUEST)

    found = await db.execute(select(Student.id).where(Student.id.in_(wanted)))
    found_ids = set(found.scalars().all())
    if len(found_ids) != len(wanted):
        raise ServiceError("One or more students not found", status.HTTP_404_NOT_FOUND)

    existing = await db.execute(
        select(Enrollment.student_id).where(Enrollment.class_id == class_id, Enrollment.student_id.in_(wanted))
    )
    already = set(existing.scalars().all())
    new_ids = [sid for sid in wanted if sid not in already]
    if not new_ids:
        raise ServiceError("All students are already enrolled in this class", status.HTTP_400_BAD_REQUEST)
    if klass.enrolled_count + len(new_ids) > klass.capacity:
        raise ServiceError(
            f"Enrolling {len(new_ids)} students would exceed class capacity "
            f"({klass.enrolled_count}/{klass.capacity})",
            status.HTTP_400_BAD_REQUEST,
        )
    try:
        for sid in new_ids:
            db.add(Enrollment(student_id=sid, class_id=class_id, term_id=klass.term_id))
        klass.enrolled_count = klass.enrolled_count + len(new_ids)
        await db.commit()
        await db.refresh(klass)
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Enrollment changed concurrently; please retry", status.HTTP_409_CONFLICT)
    logger.info("Enrolled %d students in class %s", len(new_ids), klass.code)
    return EnrollResponse(
        class_id=klass.id,
        enrolled=new_ids,
        enrolled_count=klass.enrolled_count,
        capacity=klass.capacity,
    )


async def unenroll_student(db: AsyncSession, class_id: UUID, student_id: UUID) -> ClassResponse:
    klass = await _require(db, SchoolClass, class_id, "Class")
    result = await db.execute(
        select(Enrollment).where(Enrollment.class_id == class_id, Enrollment.student_id == student_id)
    )
    enrollment = result.scalar_one_or_none()
    if not enrollment:
        raise ServiceError("Student is not enrolled in this class", status.HTTP_400_BAD_REQUEST)
    await db.delete(enrollment)
    klass.enrolled_count = max(klass.enrolled_count - 1, 0)
    await db.commit()
    await db.refresh(klass)
    return _class_to_response(klass)


async def list_roster(db: AsyncSession, class_id: UUID) -> List[RosterEntry]:
    await _require(db, SchoolClass, class_id, "Class")
    result = await db.execute(
        select(Student, Enrollment.enrolled_at)
        .join(Enrollment, Enrollment.student_id == Student.id)
        .where(Enrollment.class_id == class_id)
        .order_by(Student.last_name, Student.first_name)
    )
    return [
        RosterEntry(
            student_id=s.id,
            first_name=s.first_name,
            last_name=s.last_name,
            email=s.email,
            grade_level=s.grade_level,
            enrolled_at=enrolled_at,
        )
        for s, enrolled_at in result.all()
    ]


async def is_enrolled(db: AsyncSession, class_id: UUID, student_id: UUID) -> bool:
    result = await db.execute(
        select(Enrollment.id).where(Enrollment.class_id == class_id, Enrollment.student_id == student_id)
    )
    return result.scalar_one_or_none() is not None
