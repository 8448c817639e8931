"""
Batch schedule operations. Each call is a single transaction: every item is
flushed as it is built and nothing is committed unless all of them succeed.
"""
import logging
import string
from typing import Dict, List, Set
from uuid import UUID

from fastapi import status
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from eduwise.core.exceptions import ServiceError
from eduwise.core.models import ClassSchedule, Course, SchoolClass, Term

from .batch_schemas import (
    BatchClassCreate,
    BatchClassCreateResponse,
    ScheduleAdjustment,
    ScheduleAdjustmentResponse,
    TermTransitionRequest,
    TermTransitionResponse,
    TransitionSummary,
)
from .service import _class_to_response, _require, find_schedule_conflict

logger = logging.getLogger(__name__)

SECTION_LABELS = string.ascii_uppercase
CLASS_CODE_MAX_LENGTH = 50


def planned_class_count(course_count: int, sections_per_course: int) -> int:
    return course_count * sections_per_course


def transition_code(source_code: str, source_term_code: str, target_term_code: str) -> str:
    """Code of a cloned class: the source term code swapped for the target one, or appended."""
    parts = source_code.split("-")
    if source_term_code in parts:
        return "-".join(target_term_code if p == source_term_code else p for p in parts)
    return f"{source_code}-{target_term_code}"


def transition_summary(payload: TermTransitionRequest) -> TransitionSummary:
    """Human-readable outcome derived from the submitted flags only."""

    def _flag(keep: bool) -> str:
        return "Preserved" if keep else "Reset"

    if payload.adjust_capacity and payload.capacity_adjustment:
        capacity = f"Adjusted by {payload.capacity_adjustment:+d}"
    else:
        capacity = "Unchanged"
    return TransitionSummary(
        teacher_assignments=_flag(payload.keep_teachers),
        room_assignments=_flag(payload.keep_rooms),
        class_schedules=_flag(payload.keep_schedules),
        capacity=capacity,
        students_carried_over=False,
    )


async def create_classes_batch(db: AsyncSession, payload: BatchClassCreate) -> BatchClassCreateResponse:
    """Create sections_per_course classes for every course. All-or-nothing."""
    term = await _require(db, Term, payload.term_id, "Term")
    result = await db.execute(select(Course).where(Course.id.in_(payload.course_ids)))
    courses: Dict[UUID, Course] = {c.id: c for c in result.scalars().all()}
    missing = [str(cid) for cid in payload.course_ids if cid not in courses]
    if missing:
        raise ServiceError(f"Course(s) not found: {', '.join(missing)}", status.HTTP_404_NOT_FOUND)

    created: List[SchoolClass] = []
    index = 0
    try:
        for course_id in payload.course_ids:
            course = courses[course_id]
            for n in range(payload.sections_per_course):
                index += 1
                label = SECTION_LABELS[n]
                obj = SchoolClass(
                    code=f"{course.code}-{term.code}-{label}",
                    name=f"{course.name} ({label})",
                    course_id=course.id,
                    term_id=term.id,
                    section_label=label,
                    room=f"{payload.room_prefix}{index:02d}" if payload.room_prefix else None,
                    building=payload.building_prefix or None,
                    capacity=payload.capacity,
                    enrolled_count=0,
                    waitlist_count=0,
                    status="active",
                )
                db.add(obj)
                await db.flush()
                created.append(obj)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError(
            "One or more generated class codes already exist; no classes were created",
            status.HTTP_409_CONFLICT,
        )
    for obj in created:
        await db.refresh(obj)
    logger.info("Batch-created %d classes in term %s", len(created), term.code)
    return BatchClassCreateResponse(created=len(created), classes=[_class_to_response(c) for c in created])


async def _load_term_classes(db: AsyncSession, term_id: UUID, class_ids: List[UUID]) -> List[SchoolClass]:
    wanted = list(dict.fromkeys(class_ids))
    result = await db.execute(select(SchoolClass).where(SchoolClass.id.in_(wanted)))
    by_id = {c.id: c for c in result.scalars().all()}
    missing = [str(cid) for cid in wanted if cid not in by_id]
    if missing:
        raise ServiceError(f"Class(es) not found: {', '.join(missing)}", status.HTTP_404_NOT_FOUND)
    foreign = [by_id[cid].code for cid in wanted if by_id[cid].term_id != term_id]
    if foreign:
        raise ServiceError(
            f"Class(es) not in the selected term: {', '.join(foreign)}",
            status.HTTP_400_BAD_REQUEST,
        )
    return [by_id[cid] for cid in wanted]


async def _assert_rooms_free(db: AsyncSession, term_id: UUID, classes: List[SchoolClass]) -> None:
    """Every existing meeting of the moved classes must still fit its (possibly new) room."""
    result = await db.execute(
        select(ClassSchedule).where(ClassSchedule.class_id.in_([c.id for c in classes]))
    )
    by_class: Dict[UUID, List[ClassSchedule]] = {}
    for s in result.scalars().all():
        by_class.setdefault(s.class_id, []).append(s)
    for klass in classes:
        own = by_class.get(klass.id, [])
        for s in own:
            conflict = await find_schedule_conflict(
                db,
                term_id,
                s.day_of_week,
                s.start_time,
                s.end_time,
                s.room or klass.room,
                s.building or klass.building,
                exclude_ids=[o.id for o in own],
            )
            if conflict is not None:
                raise ServiceError(
                    f"Schedule for {klass.code} conflicts with existing class in the same room/building",
                    status.HTTP_409_CONFLICT,
                )


async def adjust_schedules_batch(db: AsyncSession, payload: ScheduleAdjustment) -> ScheduleAdjustmentResponse:
    """Move every selected class to a new room/building, or to a single new weekly slot."""
    await _require(db, Term, payload.term_id, "Term")
    classes = await _load_term_classes(db, payload.term_id, payload.class_ids)
    class_ids = [c.id for c in classes]

    try:
        if payload.adjustment_type.value == "room":
            for klass in classes:
                if payload.new_room:
                    klass.room = payload.new_room
                if payload.new_building:
                    klass.building = payload.new_building
            await db.flush()
            await _assert_rooms_free(db, payload.term_id, classes)
        else:
            await db.execute(delete(ClassSchedule).where(ClassSchedule.class_id.in_(class_ids)))
            day = payload.day_of_week.value
            for klass in classes:
                conflict = await find_schedule_conflict(
                    db, payload.term_id, day, payload.start_time, payload.end_time, klass.room, klass.building
                )
                if conflict is not None:
                    raise ServiceError(
                        f"Schedule for {klass.code} conflicts with existing class in the same room/building",
                        status.HTTP_409_CONFLICT,
                    )
                db.add(
                    ClassSchedule(
                        class_id=klass.id,
                        day_of_week=day,
                        start_time=payload.start_time,
                        end_time=payload.end_time,
                    )
                )
                await db.flush()
        await db.commit()
    except ServiceError:
        await db.rollback()
        raise
    for klass in classes:
        await db.refresh(klass)
    logger.info("Adjusted %s for %d classes", payload.adjustment_type.value, len(classes))
    return ScheduleAdjustmentResponse(updated=len(classes), classes=[_class_to_response(c) for c in classes])


async def transition_term(db: AsyncSession, payload: TermTransitionRequest) -> TermTransitionResponse:
    """Clone classes of one term into another. Enrollments are never copied."""
    if payload.term_id == payload.target_term_id:
        raise ServiceError("Source and target terms must differ", status.HTTP_400_BAD_REQUEST)
    source_term = await _require(db, Term, payload.term_id, "Source term")
    target = await _require(db, Term, payload.target_term_id, "Target term")

    if payload.class_ids:
        sources = await _load_term_classes(db, payload.term_id, payload.class_ids)
    else:
        result = await db.execute(
            select(SchoolClass).where(SchoolClass.term_id == payload.term_id).order_by(SchoolClass.code)
        )
        sources = list(result.scalars().all())
    if not sources:
        raise ServiceError("Source term has no classes to transition", status.HTTP_400_BAD_REQUEST)

    schedules: Dict[UUID, List[ClassSchedule]] = {}
    if payload.keep_schedules:
        result = await db.execute(
            select(ClassSchedule).where(ClassSchedule.class_id.in_([c.id for c in sources]))
        )
        for s in result.scalars().all():
            schedules.setdefault(s.class_id, []).append(s)

    delta = payload.capacity_adjustment if payload.adjust_capacity else 0
    created: List[SchoolClass] = []
    used_codes: Set[str] = set()
    try:
        for source in sources:
            code = transition_code(source.code, source_term.code, target.code)
            if code in used_codes:
                code = f"{source.code}-{target.code}"
            used_codes.add(code)
            if len(code) > CLASS_CODE_MAX_LENGTH:
                raise ServiceError(
                    f"Class code {code} is longer than {CLASS_CODE_MAX_LENGTH} characters",
                    status.HTTP_400_BAD_REQUEST,
                )
            obj = SchoolClass(
                code=code,
                name=source.name,
                course_id=source.course_id,
                term_id=target.id,
                section_label=source.section_label,
                teacher_id=source.teacher_id if payload.keep_teachers else None,
                room=source.room if payload.keep_rooms else None,
                building=source.building if payload.keep_rooms else None,
                capacity=max(source.capacity + delta, 1),
                enrolled_count=0,
                waitlist_count=0,
                status="active",
                notes=source.notes,
            )
            db.add(obj)
            await db.flush()
            for s in schedules.get(source.id, []):
                db.add(
                    ClassSchedule(
                        class_id=obj.id,
                        day_of_week=s.day_of_week,
                        start_time=s.start_time,
                        end_time=s.end_time,
                        room=s.room if payload.keep_rooms else None,
                        building=s.building if payload.keep_rooms else None,
                    )
                )
            created.append(obj)
        await db.flush()
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError(
            "One or more classes already exist in the target term; nothing was transitioned",
            status.HTTP_409_CONFLICT,
        )
    except ServiceError:
        await db.rollback()
        raise
    for obj in created:
        await db.refresh(obj)
    logger.info("Transitioned %d classes into term %s", len(created), target.code)
    return TermTransitionResponse(
        created=len(created),
        summary=transition_summary(payload),
        classes=[_class_to_response(c) for c in created],
    )
