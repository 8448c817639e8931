"""
Registration intake and review.

Status flow: pending -> accepted | rejected. Acceptance creates the student,
writes the audit trail and commits in one transaction; the welcome email is
sent after the commit and never rolls the acceptance back.
"""
import logging
from datetime import datetime
from typing import Optional, Tuple
from uuid import UUID

from fastapi import status
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from eduwise.core.config import settings
from eduwise.core.enums import RegistrationStatus, StudentStatus
from eduwise.core.exceptions import MailDeliveryError, ServiceError
from eduwise.core.mailer import Mailer
from eduwise.core.models import Registration, Section, Student
from eduwise.core.pagination import PageParams, paginate
from eduwise.core.schemas import PaginatedResponse

from . import audit_service
from .schemas import RegistrationCreate, RegistrationResponse, RegistrationStatusUpdate

logger = logging.getLogger(__name__)

PENDING = RegistrationStatus.pending.value
ACCEPTED = RegistrationStatus.accepted.value
REJECTED = RegistrationStatus.rejected.value


def _registration_to_response(r: Registration) -> RegistrationResponse:
    return RegistrationResponse(
        id=r.id,
        applicant_name=r.applicant_name,
        dob=r.dob,
        gender=r.gender,
        phone=r.phone,
        email=r.email,
        desired_class=r.desired_class,
        desired_section_id=r.desired_section_id,
        subjects_selected=r.subjects_selected or [],
        report_card_url=r.report_card_url,
        application_letter_url=r.application_letter_url,
        status=r.status,
        admin_note=r.admin_note,
        student_id=r.student_id,
        welcome_email_sent=bool(r.welcome_email_sent),
        reviewed_by=r.reviewed_by,
        reviewed_at=r.reviewed_at,
        submitted_at=r.submitted_at,
        updated_at=r.updated_at,
    )


def split_name(full_name: str) -> Tuple[str, str]:
    """'Jane Roe' -> ('Jane', 'Roe'); 'Cher' -> ('Cher', '')."""
    parts = full_name.strip().split(None, 1)
    if not parts:
        return "", ""
    return parts[0], parts[1] if len(parts) > 1 else ""


async def create_registration(db: AsyncSession, payload: RegistrationCreate) -> RegistrationResponse:
    if payload.desired_section_id is not None:
        found = await db.execute(select(Section.id).where(Section.id == payload.desired_section_id))
        if found.scalar_one_or_none() is None:
            raise ServiceError("Section not found", status.HTTP_404_NOT_FOUND)
    data = payload.model_dump()
    data["gender"] = payload.gender.value if payload.gender else None
    reg = Registration(**data, status=PENDING, welcome_email_sent=False)
    db.add(reg)
    await db.flush()
    await audit_service.log_audit(
        db,
        "registration",
        reg.id,
        "registration_submitted",
        to_status=PENDING,
    )
    await db.commit()
    await db.refresh(reg)
    logger.info("Registration %s submitted for %s", reg.id, reg.desired_class)
    return _registration_to_response(reg)


async def list_registrations(
    db: AsyncSession,
    params: PageParams,
    status_: Optional[str] = None,
    name: Optional[str] = None,
    desired_class: Optional[str] = None,
) -> PaginatedResponse[RegistrationResponse]:
    stmt = select(Registration)
    if status_:
        stmt = stmt.where(Registration.status == status_)
    if name:
        pattern = f"%{name.strip()}%"
        stmt = stmt.where(or_(Registration.applicant_name.ilike(pattern), Registration.email.ilike(pattern)))
    if desired_class:
        stmt = stmt.where(Registration.desired_class == desired_class)
    stmt = stmt.order_by(Registration.submitted_at.desc())
    return await paginate(db, stmt, params, _registration_to_response)


async def get_registration(db: AsyncSession, registration_id: UUID) -> Optional[RegistrationResponse]:
    result = await db.execute(select(Registration).where(Registration.id == registration_id))
    reg = result.scalar_one_or_none()
    return _registration_to_response(reg) if reg else None


async def get_registration_history(db: AsyncSession, registration_id: UUID):
    result = await db.execute(select(Registration.id).where(Registration.id == registration_id))
    if result.scalar_one_or_none() is None:
        return None
    return await audit_service.history(db, "registration", registration_id)


async def _load_for_update(db: AsyncSession, registration_id: UUID) -> Optional[Registration]:
    result = await db.execute(
        select(Registration).where(Registration.id == registration_id).with_for_update()
    )
    return result.scalar_one_or_none()


def _student_from_registration(reg: Registration) -> Student:
    first_name, last_name = split_name(reg.applicant_name)
    return Student(
        first_name=first_name,
        last_name=last_name,
        email=reg.email,
        phone=reg.phone,
        dob=reg.dob,
        gender=reg.gender,
        grade_level=reg.desired_class,
        section_id=reg.desired_section_id,
        status=StudentStatus.ACTIVE.value,
        enrollment_date=datetime.utcnow().date(),
        registration_id=reg.id,
    )


async def update_status(
    db: AsyncSession,
    mailer: Mailer,
    registration_id: UUID,
    payload: RegistrationStatusUpdate,
    performed_by: UUID,
    performed_by_role: str,
) -> RegistrationResponse:
    """
    Move a pending registration to accepted or rejected.

    Repeating the current status is a no-op (the note may change); any
    move out of a terminal status is a 409.
    """
    new_status = payload.status.value

    reg = await _load_for_update(db, registration_id)
    if reg is None:
        raise ServiceError("Registration not found", status.HTTP_404_NOT_FOUND)

    from_status = reg.status
    if from_status == new_status:
        if payload.admin_note is not None:
            reg.admin_note = payload.admin_note
        await db.commit()
        await db.refresh(reg)
        return _registration_to_response(reg)

    if from_status != PENDING:
        await db.commit()
        raise ServiceError(
            f"Invalid status transition: {from_status} registrations cannot become {new_status}",
            status.HTTP_409_CONFLICT,
        )

    reg.status = new_status
    if payload.admin_note is not None:
        reg.admin_note = payload.admin_note
    reg.reviewed_by = performed_by
    reg.reviewed_at = datetime.utcnow()

    student: Optional[Student] = None
    if new_status == ACCEPTED:
        student = _student_from_registration(reg)
        db.add(student)
        await db.flush()
        reg.student_id = student.id
        await audit_service.log_audit(
            db,
            "registration",
            reg.id,
            "registration_accepted",
            from_status=from_status,
            to_status=ACCEPTED,
            performed_by=performed_by,
            performed_by_role=performed_by_role,
            remarks=payload.admin_note,
        )
        await audit_service.log_audit(
            db,
            "student",
            student.id,
            "student_created",
            to_status=student.status,
            performed_by=performed_by,
            performed_by_role=performed_by_role,
            remarks=f"From registration {reg.id}",
        )
    else:
        await audit_service.log_audit(
            db,
            "registration",
            reg.id,
            "registration_rejected",
            from_status=from_status,
            to_status=REJECTED,
            performed_by=performed_by,
            performed_by_role=performed_by_role,
            remarks=payload.admin_note,
        )

    try:
        await db.commit()
    except IntegrityError:
        # Lost a race with a concurrent accept: the other request's student stands.
        await db.rollback()
        result = await db.execute(select(Registration).where(Registration.id == registration_id))
        reg = result.scalar_one()
        if reg.status == new_status:
            return _registration_to_response(reg)
        raise ServiceError("Registration was modified concurrently", status.HTTP_409_CONFLICT)

    await db.refresh(reg)
    logger.info("Registration %s %s by %s", reg.id, new_status, performed_by)

    if student is not None and reg.email:
        await _send_welcome_email(db, mailer, reg, student)
    return _registration_to_response(reg)


async def _send_welcome_email(db: AsyncSession, mailer: Mailer, reg: Registration, student: Student) -> None:
    subject = f"Welcome to {settings.school_name}!"
    text = (
        f"Dear {reg.applicant_name},\n\n"
        f"Your registration for {reg.desired_class} has been accepted.\n"
        f"Your student ID: {student.id}\n\n"
        f"{settings.school_name} Admissions"
    )
    html = (
        f"<p>Dear {reg.applicant_name},</p>"
        f"<p>Your registration for <strong>{reg.desired_class}</strong> has been accepted.</p>"
        f"<p>Your student ID: <code>{student.id}</code></p>"
        f"<p>{settings.school_name} Admissions</p>"
    )
    try:
        sent = await mailer.send(reg.email, subject, text, html)
    except MailDeliveryError:
        logger.exception("Welcome email to %s failed for registration %s", reg.email, reg.id)
        return
    if sent:
        reg.welcome_email_sent = True
        await db.commit()
        await db.refresh(reg)
