import logging
from typing import Dict, List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from eduwise.api.v1.notifications.service import notify
from eduwise.auth.rbac import ensure_teaches_class
from eduwise.auth.schemas import CurrentUser
from eduwise.core.enums import AssignmentType
from eduwise.core.exceptions import ServiceError
from eduwise.core.grading import letter_for_percentage, normalize_grade, percentage, score_band
from eduwise.core.models import Assignment, Enrollment, GradeRecord, SchoolClass, Student
from eduwise.core.pagination import PageParams, fetch_page, page_meta
from eduwise.core.schemas import PaginatedResponse

from .schemas import (
    AssignmentCreate,
    AssignmentResponse,
    AssignmentUpdate,
    CategoryBreakdown,
    GradeBatchRecord,
    GradeBatchResponse,
    GradeResponse,
    GradeStatistics,
    GradeUpdate,
)

logger = logging.getLogger(__name__)


def _assignment_to_response(a: Assignment) -> AssignmentResponse:
    return AssignmentResponse(
        id=a.id,
        class_id=a.class_id,
        title=a.title,
        description=a.description,
        type=a.type,
        max_score=a.max_score,
        weight=a.weight,
        due_date=a.due_date,
        created_at=a.created_at,
        updated_at=a.updated_at,
    )


def _grade_to_response(g: GradeRecord, max_score: float) -> GradeResponse:
    pct = percentage(g.score, max_score)
    return GradeResponse(
        id=g.id,
        student_id=g.student_id,
        assignment_id=g.assignment_id,
        score=g.score,
        max_score=max_score,
        percentage=round(pct, 2) if pct is not None else None,
        status=g.status,
        letter_grade=g.letter_grade,
        band=score_band(g.score, max_score),
        comments=g.comments,
        graded_by=g.graded_by,
        created_at=g.created_at,
        updated_at=g.updated_at,
    )


async def _get_class(db: AsyncSession, class_id: UUID) -> SchoolClass:
    result = await db.execute(select(SchoolClass).where(SchoolClass.id == class_id))
    klass = result.scalar_one_or_none()
    if not klass:
        raise ServiceError("Class not found", status.HTTP_404_NOT_FOUND)
    return klass


async def _get_assignment(db: AsyncSession, assignment_id: UUID) -> Optional[Assignment]:
    result = await db.execute(select(Assignment).where(Assignment.id == assignment_id))
    return result.scalar_one_or_none()


# ----- Assignments -----


async def create_assignment(
    db: AsyncSession, current_user: CurrentUser, payload: AssignmentCreate
) -> AssignmentResponse:
    klass = await _get_class(db, payload.class_id)
    await ensure_teaches_class(db, current_user, klass)
    obj = Assignment(
        class_id=payload.class_id,
        title=payload.title.strip(),
        description=payload.description,
        type=payload.type.value,
        max_score=payload.max_score,
        weight=payload.weight,
        due_date=payload.due_date,
        created_by=current_user.id,
    )
    db.add(obj)
    await db.commit()
    await db.refresh(obj)
    return _assignment_to_response(obj)


async def list_assignments(
    db: AsyncSession, params: PageParams, class_id: Optional[UUID] = None
) -> PaginatedResponse[AssignmentResponse]:
    stmt = select(Assignment)
    if class_id:
        stmt = stmt.where(Assignment.class_id == class_id)
    stmt = stmt.order_by(Assignment.created_at.desc())
    rows, total = await fetch_page(db, stmt, params)
    return PaginatedResponse(
        data=[_assignment_to_response(a) for a in rows],
        meta=page_meta(total, params.page, params.limit),
    )


async def get_assignment(db: AsyncSession, assignment_id: UUID) -> Optional[AssignmentResponse]:
    obj = await _get_assignment(db, assignment_id)
    return _assignment_to_response(obj) if obj else None


async def update_assignment(
    db: AsyncSession, current_user: CurrentUser, assignment_id: UUID, payload: AssignmentUpdate
) -> Optional[AssignmentResponse]:
    obj = await _get_assignment(db, assignment_id)
    if not obj:
        return None
    await ensure_teaches_class(db, current_user, await _get_class(db, obj.class_id))
    data = payload.model_dump(exclude_unset=True)
    if data.get("max_score") is not None:
        result = await db.execute(
            select(GradeRecord.score).where(
                GradeRecord.assignment_id == assignment_id, GradeRecord.score.is_not(None)
            )
        )
        highest = max(result.scalars().all(), default=None)
        if highest is not None and highest > data["max_score"]:
            raise ServiceError(
                f"max_score cannot be lower than an already recorded score ({highest:g})",
                status.HTTP_400_BAD_REQUEST,
            )
    for field, value in data.items():
        if value is None and field in ("title", "type", "max_score", "weight"):
            continue
        if field == "type":
            value = value.value
        setattr(obj, field, value)
    if data.get("max_score") is not None:
        grades = await db.execute(select(GradeRecord).where(GradeRecord.assignment_id == assignment_id))
        for g in grades.scalars().all():
            g.score, g.status, g.letter_grade = normalize_grade(g.score, g.status, obj.max_score)
    await db.commit()
    await db.refresh(obj)
    return _assignment_to_response(obj)


async def delete_assignment(db: AsyncSession, assignment_id: UUID) -> bool:
    obj = await _get_assignment(db, assignment_id)
    if not obj:
        return False
    grades = await db.execute(select(GradeRecord).where(GradeRecord.assignment_id == assignment_id))
    for g in grades.scalars().all():
        await db.delete(g)
    await db.delete(obj)
    await db.commit()
    return True


# ----- Grades -----


async def record_grades(
    db: AsyncSession, current_user: CurrentUser, payload: GradeBatchRecord
) -> GradeBatchResponse:
    """Upsert one grade per student. Nothing is saved if any entry is invalid."""
    assignment = await _get_assignment(db, payload.assignment_id)
    if not assignment:
        raise ServiceError("Assignment not found", status.HTTP_404_NOT_FOUND)
    klass = await _get_class(db, assignment.class_id)
    await ensure_teaches_class(db, current_user, klass)

    student_ids = [r.student_id for r in payload.records]
    enrolled = await db.execute(
        select(Enrollment.student_id).where(
            Enrollment.class_id == assignment.class_id,
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

    normalized = []
    for entry in payload.records:
        try:
            normalized.append((entry, normalize_grade(entry.score, entry.status.value, assignment.max_score)))
        except ValueError as exc:
            raise ServiceError(str(exc), status.HTTP_400_BAD_REQUEST)

    existing_result = await db.execute(
        select(GradeRecord).where(
            GradeRecord.assignment_id == assignment.id,
            GradeRecord.student_id.in_(student_ids),
        )
    )
    existing: Dict[UUID, GradeRecord] = {g.student_id: g for g in existing_result.scalars().all()}

    saved: List[GradeRecord] = []
    graded_students: List[UUID] = []
    for entry, (score, grade_status, letter) in normalized:
        record = existing.get(entry.student_id)
        if record is None:
            record = GradeRecord(student_id=entry.student_id, assignment_id=assignment.id)
            db.add(record)
        if score is not None and score != record.score:
            graded_students.append(entry.student_id)
        record.score = score
        record.status = grade_status
        record.letter_grade = letter
        record.comments = entry.comments
        record.graded_by = current_user.id
        saved.append(record)

    if graded_students:
        students = await db.execute(
            select(Student.user_id, Student.guardian_user_id).where(Student.id.in_(graded_students))
        )
        for user_id, guardian_user_id in students.all():
            await notify(
                db,
                [user_id, guardian_user_id],
                "grade",
                "New grade posted",
                f"A grade was posted for {assignment.title} in {klass.name}.",
                related_id=str(assignment.id),
            )

    await db.commit()
    for record in saved:
        await db.refresh(record)
    logger.info("Recorded %d grades for assignment %s", len(saved), assignment.id)
    return GradeBatchResponse(
        recorded=len(saved),
        records=[_grade_to_response(g, assignment.max_score) for g in saved],
    )


async def list_grades(
    db: AsyncSession,
    params: PageParams,
    assignment_id: Optional[UUID] = None,
    student_id: Optional[UUID] = None,
    class_id: Optional[UUID] = None,
) -> PaginatedResponse[GradeResponse]:
    stmt = select(GradeRecord, Assignment.max_score).join(Assignment, Assignment.id == GradeRecord.assignment_id)
    if assignment_id:
        stmt = stmt.where(GradeRecord.assignment_id == assignment_id)
    if student_id:
        stmt = stmt.where(GradeRecord.student_id == student_id)
    if class_id:
        stmt = stmt.where(Assignment.class_id == class_id)
    count_stmt = select(func.count()).select_from(stmt.subquery())
    total = (await db.execute(count_stmt)).scalar_one()
    offset = (params.page - 1) * params.limit
    stmt = stmt.order_by(GradeRecord.created_at.desc()).offset(offset).limit(params.limit)
    result = await db.execute(stmt)
    return PaginatedResponse(
        data=[_grade_to_response(g, max_score) for g, max_score in result.all()],
        meta=page_meta(total, params.page, params.limit),
    )


async def _get_grade(db: AsyncSession, grade_id: UUID):
    result = await db.execute(
        select(GradeRecord, Assignment)
        .join(Assignment, Assignment.id == GradeRecord.assignment_id)
        .where(GradeRecord.id == grade_id)
    )
    return result.first()


async def get_grade(db: AsyncSession, grade_id: UUID) -> Optional[GradeResponse]:
    row = await _get_grade(db, grade_id)
    if not row:
        return None
    grade, assignment = row
    return _grade_to_response(grade, assignment.max_score)


async def update_grade(
    db: AsyncSession, current_user: CurrentUser, grade_id: UUID, payload: GradeUpdate
) -> Optional[GradeResponse]:
    row = await _get_grade(db, grade_id)
    if not row:
        return None
    grade, assignment = row
    await ensure_teaches_class(db, current_user, await _get_class(db, assignment.class_id))
    fields = payload.model_fields_set
    score = payload.score if "score" in fields else grade.score
    grade_status = payload.status.value if payload.status is not None else grade.status
    if "score" in fields and payload.score is not None and payload.status is None and grade_status in ("missing", "excused"):
        # Entering a score marks the work as submitted.
        grade_status = "submitted"
    try:
        grade.score, grade.status, grade.letter_grade = normalize_grade(score, grade_status, assignment.max_score)
    except ValueError as exc:
        await db.rollback()
        raise ServiceError(str(exc), status.HTTP_400_BAD_REQUEST)
    if "comments" in fields:
        grade.comments = payload.comments
    grade.graded_by = current_user.id
    await db.commit()
    await db.refresh(grade)
    return _grade_to_response(grade, assignment.max_score)


async def delete_grade(db: AsyncSession, grade_id: UUID) -> bool:
    result = await db.execute(select(GradeRecord).where(GradeRecord.id == grade_id))
    grade = result.scalar_one_or_none()
    if not grade:
        return False
    await db.delete(grade)
    await db.commit()
    return True


async def student_class_statistics(db: AsyncSession, student_id: UUID, class_id: UUID) -> GradeStatistics:
    await _get_class(db, class_id)
    exists = await db.execute(select(Student.id).where(Student.id == student_id))
    if exists.scalar_one_or_none() is None:
        raise ServiceError("Student not found", status.HTTP_404_NOT_FOUND)

    assignments = (await db.execute(select(Assignment).where(Assignment.class_id == class_id))).scalars().all()
    grades_result = await db.execute(
        select(GradeRecord).where(
            GradeRecord.student_id == student_id,
            GradeRecord.assignment_id.in_([a.id for a in assignments]),
        )
    )
    grades = {g.assignment_id: g for g in grades_result.scalars().all()}

    percentages: List[float] = []
    weighted_sum = 0.0
    weight_total = 0.0
    by_type: Dict[str, List[float]] = {}
    counts: Dict[str, int] = {}
    for a in assignments:
        counts[a.type] = counts.get(a.type, 0) + 1
        g = grades.get(a.id)
        pct = percentage(g.score, a.max_score) if g else None
        if pct is None:
            continue
        percentages.append(pct)
        by_type.setdefault(a.type, []).append(pct)
        weighted_sum += pct * a.weight
        weight_total += a.weight

    average = round(sum(percentages) / len(percentages), 2) if percentages else None
    weighted = round(weighted_sum / weight_total, 2) if weight_total else None
    overall = weighted if weighted is not None else average
    breakdown = {
        AssignmentType(t): CategoryBreakdown(
            count=counts[t],
            average=round(sum(by_type[t]) / len(by_type[t]), 2) if by_type.get(t) else None,
        )
        for t in counts
    }
    return GradeStatistics(
        student_id=student_id,
        class_id=class_id,
        total_items=len(assignments),
        completed_items=len(percentages),
        average_score=average,
        weighted_average=weighted,
        letter_grade=letter_for_percentage(overall) if overall is not None else None,
        category_breakdown=breakdown,
    )
