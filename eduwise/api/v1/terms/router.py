from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from eduwise.api.v1.classes import batch_service
from eduwise.api.v1.classes.batch_schemas import TermTransitionRequest, TermTransitionResponse
from eduwise.auth.rbac import check_permission
from eduwise.core.enums import TermType
from eduwise.core.exceptions import ServiceError
from eduwise.core.pagination import PageParams
from eduwise.core.schemas import PaginatedResponse
from eduwise.db.session import get_db

from .schemas import TermCreate, TermResponse, TermUpdate
from . import service

router = APIRouter(prefix="/api/v1/terms", tags=["terms"])


@router.post(
    "",
    response_model=TermResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("terms", "create"))],
)
async def create_term(
    payload: TermCreate,
    db: AsyncSession = Depends(get_db),
) -> TermResponse:
    try:
        return await service.create_term(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "",
    response_model=PaginatedResponse[TermResponse],
    dependencies=[Depends(check_permission("terms", "read"))],
)
async def list_terms(
    search: Optional[str] = Query(None),
    academic_year: Optional[str] = Query(None),
    type_filter: Optional[TermType] = Query(None, alias="type"),
    is_active: Optional[bool] = Query(None),
    is_current: Optional[bool] = Query(None),
    params: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    return await service.list_terms(
        db,
        params,
        search=search,
        academic_year=academic_year,
        type_=type_filter.value if type_filter else None,
        is_active=is_active,
        is_current=is_current,
    )


@router.get(
    "/current",
    response_model=TermResponse,
    dependencies=[Depends(check_permission("terms", "read"))],
)
async def get_current_term(
    db: AsyncSession = Depends(get_db),
) -> TermResponse:
    obj = await service.get_current_term(db)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No current term found")
    return obj


@router.post(
    "/transition",
    response_model=TermTransitionResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("classes", "create"))],
)
async def transition_term(
    payload: TermTransitionRequest,
    db: AsyncSession = Depends(get_db),
) -> TermTransitionResponse:
    """Copy classes of one term into another according to the keep_* flags."""
    try:
        return await batch_service.transition_term(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "/{term_id}",
    response_model=TermResponse,
    dependencies=[Depends(check_permission("terms", "read"))],
)
async def get_term(
    term_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> TermResponse:
    obj = await service.get_term(db, term_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Term not found")
    return obj


@router.patch(
    "/{term_id}",
    response_model=TermResponse,
    dependencies=[Depends(check_permission("terms", "update"))],
)
async def update_term(
    term_id: UUID,
    payload: TermUpdate,
    db: AsyncSession = Depends(get_db),
) -> TermResponse:
    try:
        obj = await service.update_term(db, term_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Term not found")
    return obj


@router.post(
    "/{term_id}/set-current",
    response_model=TermResponse,
    dependencies=[Depends(check_permission("terms", "update"))],
)
async def set_current_term(
    term_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> TermResponse:
    obj = await service.set_current_term(db, term_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Term not found")
    return obj


@router.delete(
    "/{term_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(check_permission("terms", "delete"))],
)
async def delete_term(
    term_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> None:
    try:
        deleted = await service.delete_term(db, term_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Term not found")
