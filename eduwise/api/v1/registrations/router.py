from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from eduwise.auth.dependencies import get_current_user
from eduwise.auth.rbac import check_permission
from eduwise.auth.schemas import CurrentUser
from eduwise.core.enums import RegistrationStatus
from eduwise.core.exceptions import ServiceError
from eduwise.core.mailer import Mailer, get_mailer
from eduwise.core.pagination import PageParams
from eduwise.core.schemas import PaginatedResponse
from eduwise.db.session import get_db

from .schemas import AuditEntryResponse, RegistrationCreate, RegistrationResponse, RegistrationStatusUpdate
from . import service

router = APIRouter(prefix="/api/v1/registrations", tags=["registrations"])


@router.post("", response_model=RegistrationResponse, status_code=status.HTTP_201_CREATED)
async def submit_registration(
    payload: RegistrationCreate,
    db: AsyncSession = Depends(get_db),
) -> RegistrationResponse:
    """Public: no token needed."""
    try:
        return await service.create_registration(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "",
    response_model=PaginatedResponse[RegistrationResponse],
    dependencies=[Depends(check_permission("registrations", "read"))],
)
async def list_registrations(
    status_filter: Optional[RegistrationStatus] = Query(None, alias="status"),
    name: Optional[str] = Query(None, description="Matches applicant name or email"),
    desired_class: Optional[str] = Query(None),
    params: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    return await service.list_registrations(
        db,
        params,
        status_=status_filter.value if status_filter else None,
        name=name,
        desired_class=desired_class,
    )


@router.get(
    "/{registration_id}",
    response_model=RegistrationResponse,
    dependencies=[Depends(check_permission("registrations", "read"))],
)
async def get_registration(
    registration_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> RegistrationResponse:
    reg = await service.get_registration(db, registration_id)
    if not reg:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Registration not found")
    return reg


@router.get(
    "/{registration_id}/history",
    response_model=List[AuditEntryResponse],
    dependencies=[Depends(check_permission("registrations", "read"))],
)
async def get_registration_history(
    registration_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    entries = await service.get_registration_history(db, registration_id)
    if entries is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Registration not found")
    return entries


@router.put(
    "/{registration_id}/status",
    response_model=RegistrationResponse,
    dependencies=[Depends(check_permission("registrations", "update"))],
)
async def update_registration_status(
    registration_id: UUID,
    payload: RegistrationStatusUpdate,
    db: AsyncSession = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
    current_user: CurrentUser = Depends(get_current_user),
) -> RegistrationResponse:
    try:
        return await service.update_status(
            db, mailer, registration_id, payload, current_user.id, current_user.role
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
