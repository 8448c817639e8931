from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from eduwise.auth.rbac import check_permission
from eduwise.core.enums import SectionStatus
from eduwise.core.exceptions import ServiceError
from eduwise.core.pagination import PageParams
from eduwise.core.schemas import PaginatedResponse
from eduwise.db.session import get_db

from .schemas import SectionBulkCreate, SectionCreate, SectionResponse, SectionUpdate
from . import service

# Registered before the classes router so /classes/sections is not read as a class id.
router = APIRouter(prefix="/api/v1/classes/sections", tags=["sections"])


@router.post(
    "",
    response_model=SectionResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("sections", "create"))],
)
async def create_section(
    payload: SectionCreate,
    db: AsyncSession = Depends(get_db),
) -> SectionResponse:
    try:
        return await service.create_section(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "/bulk",
    response_model=List[SectionResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("sections", "create"))],
)
async def create_sections_bulk(
    payload: SectionBulkCreate,
    db: AsyncSession = Depends(get_db),
) -> List[SectionResponse]:
    """Create multiple sections for a class. Payload: { "class_id": "...", "sections": [{ "name": "A" }, ...] }"""
    try:
        return await service.create_sections_bulk(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "",
    response_model=PaginatedResponse[SectionResponse],
    dependencies=[Depends(check_permission("sections", "read"))],
)
async def list_sections(
    class_id: Optional[UUID] = Query(None),
    status_filter: Optional[SectionStatus] = Query(None, alias="status"),
    params: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    return await service.list_sections(
        db, params, class_id=class_id, status_=status_filter.value if status_filter else None
    )


@router.get(
    "/{section_id}",
    response_model=SectionResponse,
    dependencies=[Depends(check_permission("sections", "read"))],
)
async def get_section(
    section_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> SectionResponse:
    obj = await service.get_section(db, section_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Section not found")
    return obj


@router.patch(
    "/{section_id}",
    response_model=SectionResponse,
    dependencies=[Depends(check_permission("sections", "update"))],
)
async def update_section(
    section_id: UUID,
    payload: SectionUpdate,
    db: AsyncSession = Depends(get_db),
) -> SectionResponse:
    try:
        obj = await service.update_section(db, section_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Section not found")
    return obj


@router.delete(
    "/{section_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(check_permission("sections", "delete"))],
)
async def delete_section(
    section_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> None:
    try:
        deleted = await service.delete_section(db, section_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Section not found")
