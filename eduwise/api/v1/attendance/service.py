import logging
from datetime import date
from typing import Dict, List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from eduwise.api.v1.notifications.service import notify
from eduwise.auth.rbac import ensure_teaches_class
from eduwise.auth.schemas import CurrentUser
from eduwise.core.enums import AttendanceStatus
from eduwise.core.exceptions import ServiceError
from eduwise.core.models import AttendanceRecord, Enrollment, SchoolClass, Student
from eduwise.core.pagination import PageParams, paginate
from eduwise.core.schemas import PaginatedResponse

from .schemas import (
    AttendanceBatchMark,
    AttendanceBatchResponse,
    AttendanceResponse,
    AttendanceStatistics,
    AttendanceUpdate,
)

logger = logging.getLogger(__name__)


def _to_response(r: AttendanceRecord) -> AttendanceResponse:
    return AttendanceResponse(
        id=r.id,
        student_id=r.student_id,
        class_id=r.class_id,
        date=r.date,
        status=r.status,
        notes=r.notes,
        recorded_by=r.recorded_by,
        created_at=r.created_at,
        updated_at=r.updated_at,
    )


async def _get_class(db: AsyncSession, class_id: UUID) -> SchoolClass:
    result = await db.execute(select(SchoolClass).where(SchoolClass.id == class_id))
    klass = result.scalar_one_or_none()
    if not klass:
        raise ServiceError("Class not found", status.HTTP_404_NOT_FOUND)
    return klass


async def mark_attendance(
    db: AsyncSession,
    current_user: CurrentUser,
    payload: AttendanceBatchMark,
) -> AttendanceBatchResponse:
    klass = await _get_class(db, payload.class_id)
    await ensure_teaches_class(db, current_user, klass)

    student_ids = [r.student_id for r in payload.records]
    enrolled = await db.execute(
        select(Enrollment.student_id).where(
            Enrollment.class_id == payload.class_id,
            Enrollment.student_id.in_(student_ids),
        )
    )
    enrolled_ids = set(enrolled.scalars().all())
    not_enrolled = [str(sid) for sid in student_ids if sid not in enrolled_ids]
    if not_enrolled:
        raise ServiceError(
            f"Student(s) not enrolled in this class: {', '.join(not_enrolled)}",
            status.HTTP_400_BAD_REQUEST,
        )

    existing_result = await db.execute(
        select(AttendanceRecord).where(
            AttendanceRecord.class_id == payload.class_id,
            AttendanceRecord.date == payload.date,
            AttendanceRecord.student_id.in_(student_ids),
        )
    )
    existing: Dict[UUID, AttendanceRecord] = {r.student_id: r for r in existing_result.scalars().all()}

    saved: List[AttendanceRecord] = []
    newly_absent: List[UUID] = []
    for item in payload.records:
        record = existing.get(item.student_id)
        if record is None:
            record = AttendanceRecord(
                student_id=item.student_id,
                class_id=payload.class_id,
                date=payload.date,
            )
            db.add(record)
        if item.status == AttendanceStatus.absent and record.status != "absent":
            newly_absent.append(item.student_id)
        record.status = item.status.value
        record.notes = item.notes
        record.recorded_by = current_user.id
        saved.append(record)

    if newly_absent:
        students = await db.execute(
            select(Student.user_id, Student.guardian_user_id, Student.first_name).where(Student.id.in_(newly_absent))
        )
        for user_id, guardian_user_id, first_name in students.all():
            await notify(
                db,
                [user_id, guardian_user_id],
                "attendance",
                "Absence recorded",
                f"{first_name} was marked absent in {klass.name} on {payload.date.isoformat()}.",
                related_id=str(klass.id),
            )

    await db.commit()
    for record in saved:
        await db.refresh(record)
    logger.info("Recorded attendance for %d students in %s on %s", len(saved), klass.code, payload.date)
    return AttendanceBatchResponse(recorded=len(saved), records=[_to_response(r) for r in saved])


async def list_attendance(
    db: AsyncSession,
    params: PageParams,
    class_id: Optional[UUID] = None,
    student_id: Optional[UUID] = None,
    on_date: Optional[date] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    status_: Optional[str] = None,
) -> PaginatedResponse[AttendanceResponse]:
    stmt = select(AttendanceRecord)
    if class_id:
        stmt = stmt.where(AttendanceRecord.class_id == class_id)
    if student_id:
        stmt = stmt.where(AttendanceRecord.student_id == student_id)
    if on_date:
        stmt = stmt.where(AttendanceRecord.date == on_date)
    if start_date:
        stmt = stmt.where(AttendanceRecord.date >= start_date)
    if end_date:
        stmt = stmt.where(AttendanceRecord.date <= end_date)
    if status_:
        stmt = stmt.where(AttendanceRecord.status == status_)
    stmt = stmt.order_by(AttendanceRecord.date.desc(), AttendanceRecord.student_id)
    return await paginate(db, stmt, params, _to_response)


async def _get_record(db: AsyncSession, record_id: UUID) -> Optional[AttendanceRecord]:
    result = await db.execute(select(AttendanceRecord).where(AttendanceRecord.id == record_id))
    return result.scalar_one_or_none()


async def get_attendance(db: AsyncSession, record_id: UUID) -> Optional[AttendanceResponse]:
    record = await _get_record(db, record_id)
    return _to_response(record) if record else None


async def update_attendance(
    db: AsyncSession,
    current_user: CurrentUser,
    record_id: UUID,
    payload: AttendanceUpdate,
) -> Optional[AttendanceResponse]:
    record = await _get_record(db, record_id)
    if not record:
        return None
    await ensure_teaches_class(db, current_user, await _get_class(db, record.class_id))
    if payload.status is not None:
        record.status = payload.status.value
    if "notes" in payload.model_fields_set:
        record.notes = payload.notes
    record.recorded_by = current_user.id
    await db.commit()
    await db.refresh(record)
    return _to_response(record)


async def delete_attendance(db: AsyncSession, record_id: UUID) -> bool:
    record = await _get_record(db, record_id)
    if not record:
        return False
    await db.delete(record)
    await db.commit()
    return True


async def student_statistics(
    db: AsyncSession,
    student_id: UUID,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> AttendanceStatistics:
    exists = await db.execute(select(Student.id).where(Student.id == student_id))
    if exists.scalar_one_or_none() is None:
        raise ServiceError("Student not found", status.HTTP_404_NOT_FOUND)
    stmt = (
        select(AttendanceRecord.status, func.count(AttendanceRecord.id))
        .where(AttendanceRecord.student_id == student_id)
        .group_by(AttendanceRecord.status)
    )
    if start_date:
        stmt = stmt.where(AttendanceRecord.date >= start_date)
    if end_date:
        stmt = stmt.where(AttendanceRecord.date <= end_date)
    result = await db.execute(stmt)
    counts = {s: 0 for s in AttendanceStatus}
    for status_value, count in result.all():
        counts[AttendanceStatus(status_value)] = count
    total = sum(counts.values())
    present = counts[AttendanceStatus.present]
    rate = round(present / total * 100, 2) if total else 0.0
    return AttendanceStatistics(student_id=student_id, total=total, counts=counts, attendance_rate=rate)
