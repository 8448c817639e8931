import logging
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from eduwise.core.exceptions import ServiceError
from eduwise.core.models import SchoolClass, Term
from eduwise.core.pagination import PageParams, paginate
from eduwise.core.schemas import PaginatedResponse

from .schemas import TermCreate, TermResponse, TermUpdate

logger = logging.getLogger(__name__)


def _to_response(t: Term) -> TermResponse:
    return TermResponse(
        id=t.id,
        name=t.name,
        code=t.code,
        type=t.type,
        academic_year=t.academic_year,
        start_date=t.start_date,
        end_date=t.end_date,
        registration_start=t.registration_start,
        registration_end=t.registration_end,
        is_active=t.is_active,
        is_current=t.is_current,
        notes=t.notes,
        created_at=t.created_at,
        updated_at=t.updated_at,
    )


def _validate_dates(
    start_date: date,
    end_date: date,
    registration_start: Optional[date],
    registration_end: Optional[date],
) -> None:
    if end_date <= start_date:
        raise ServiceError("end_date must be after start_date", status.HTTP_400_BAD_REQUEST)
    if registration_start and registration_end and registration_end < registration_start:
        raise ServiceError("registration_end must not be before registration_start", status.HTTP_400_BAD_REQUEST)
    if registration_end and registration_end > start_date:
        raise ServiceError("Registration must close on or before the term start date", status.HTTP_400_BAD_REQUEST)
    if registration_start and registration_start > start_date:
        raise ServiceError("Registration must open on or before the term start date", status.HTTP_400_BAD_REQUEST)


async def _clear_current(db: AsyncSession, except_id: Optional[UUID] = None) -> None:
    stmt = update(Term).where(Term.is_current.is_(True))
    if except_id is not None:
        stmt = stmt.where(Term.id != except_id)
    await db.execute(stmt.values(is_current=False))


async def create_term(db: AsyncSession, payload: TermCreate) -> TermResponse:
    """Create term. If is_current=true, unset current on all other terms (same transaction)."""
    _validate_dates(payload.start_date, payload.end_date, payload.registration_start, payload.registration_end)
    try:
        if payload.is_current:
            await _clear_current(db)
        obj = Term(
            name=payload.name.strip(),
            code=payload.code.strip().upper(),
            type=payload.type.value,
            academic_year=payload.academic_year.strip(),
            start_date=payload.start_date,
            end_date=payload.end_date,
            registration_start=payload.registration_start,
            registration_end=payload.registration_end,
            is_active=payload.is_active,
            is_current=payload.is_current,
            notes=payload.notes,
        )
        db.add(obj)
        await db.commit()
        await db.refresh(obj)
        return _to_response(obj)
    except IntegrityError:
        await db.rollback()
        raise ServiceError(f"Term with code {payload.code.strip().upper()} already exists", status.HTTP_409_CONFLICT)


async def list_terms(
    db: AsyncSession,
    params: PageParams,
    search: Optional[str] = None,
    academic_year: Optional[str] = None,
    type_: Optional[str] = None,
    is_active: Optional[bool] = None,
    is_current: Optional[bool] = None,
) -> PaginatedResponse[TermResponse]:
    stmt = select(Term)
    if search:
        term = f"%{search.strip()}%"
        stmt = stmt.where(or_(Term.name.ilike(term), Term.code.ilike(term), Term.notes.ilike(term)))
    if academic_year:
        stmt = stmt.where(Term.academic_year == academic_year)
    if type_:
        stmt = stmt.where(Term.type == type_)
    if is_active is not None:
        stmt = stmt.where(Term.is_active.is_(is_active))
    if is_current is not None:
        stmt = stmt.where(Term.is_current.is_(is_current))
    stmt = stmt.order_by(Term.start_date.desc())
    return await paginate(db, stmt, params, _to_response)


async def get_term_model(db: AsyncSession, term_id: UUID) -> Optional[Term]:
    result = await db.execute(select(Term).where(Term.id == term_id))
    return result.scalar_one_or_none()


async def get_term(db: AsyncSession, term_id: UUID) -> Optional[TermResponse]:
    obj = await get_term_model(db, term_id)
    return _to_response(obj) if obj else None


async def get_current_term(db: AsyncSession) -> Optional[TermResponse]:
    result = await db.execute(select(Term).where(Term.is_current.is_(True)).limit(1))
    obj = result.scalar_one_or_none()
    return _to_response(obj) if obj else None


async def update_term(db: AsyncSession, term_id: UUID, payload: TermUpdate) -> Optional[TermResponse]:
    obj = await get_term_model(db, term_id)
    if not obj:
        return None
    data = payload.model_dump(exclude_unset=True)
    if data.get("code"):
        data["code"] = data["code"].strip().upper()
    if data.get("type") is not None:
        data["type"] = data["type"].value
    for field, value in data.items():
        if value is None and field not in ("registration_start", "registration_end", "notes"):
            continue
        setattr(obj, field, value)
    try:
        _validate_dates(obj.start_date, obj.end_date, obj.registration_start, obj.registration_end)
    except ServiceError:
        await db.rollback()
        raise
    try:
        if data.get("is_current"):
            await _clear_current(db, except_id=obj.id)
        await db.commit()
        await db.refresh(obj)
        return _to_response(obj)
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Term with this code already exists", status.HTTP_409_CONFLICT)


async def set_current_term(db: AsyncSession, term_id: UUID) -> Optional[TermResponse]:
    """Set this term as current. All others become is_current=false (same transaction)."""
    obj = await get_term_model(db, term_id)
    if not obj:
        return None
    await _clear_current(db, except_id=obj.id)
    obj.is_current = True
    await db.commit()
    await db.refresh(obj)
    logger.info("Term %s is now current", obj.code)
    return _to_response(obj)


async def delete_term(db: AsyncSession, term_id: UUID) -> bool:
    obj = await get_term_model(db, term_id)
    if not obj:
        return False
    used = await db.execute(select(SchoolClass.id).where(SchoolClass.term_id == term_id).limit(1))
    if used.scalar_one_or_none() is not None:
        logger.warning("Refused to delete term %s: classes reference it", obj.code)
        raise ServiceError(
            "Cannot delete term with existing classes. Please delete or reassign the classes first.",
            status.HTTP_400_BAD_REQUEST,
        )
    await db.delete(obj)
    await db.commit()
    return True
