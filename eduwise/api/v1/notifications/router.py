from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from eduwise.auth.dependencies import get_current_user
from eduwise.auth.rbac import check_permission
from eduwise.auth.schemas import CurrentUser
from eduwise.core.config import settings
from eduwise.core.exceptions import ServiceError
from eduwise.core.pagination import PageParams
from eduwise.core.schemas import PaginatedResponse
from eduwise.db.session import get_db

from .schemas import (
    MarkAllReadResponse,
    NotificationCreate,
    NotificationPreferences,
    NotificationPreferencesPatch,
    NotificationResponse,
    UnreadCountResponse,
)
from . import service

router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"])


@router.get("", response_model=PaginatedResponse[NotificationResponse])
async def list_notifications(
    unread_only: bool = Query(False),
    params: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Current user's notifications, newest first."""
    return await service.list_notifications(db, current_user.id, params, unread_only=unread_only)


@router.post(
    "",
    response_model=List[NotificationResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("notifications", "create"))],
)
async def send_notifications(
    payload: NotificationCreate,
    db: AsyncSession = Depends(get_db),
) -> List[NotificationResponse]:
    try:
        return await service.send_notifications(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> UnreadCountResponse:
    count = await service.unread_count(db, current_user.id)
    return UnreadCountResponse(count=count, poll_interval_seconds=settings.notification_poll_seconds)


@router.post("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> MarkAllReadResponse:
    return MarkAllReadResponse(updated=await service.mark_all_read(db, current_user.id))


@router.get("/preferences", response_model=NotificationPreferences)
async def get_preferences(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> NotificationPreferences:
    try:
        return await service.get_preferences(db, current_user.id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put("/preferences", response_model=NotificationPreferences)
async def replace_preferences(
    payload: NotificationPreferences,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> NotificationPreferences:
    try:
        return await service.replace_preferences(db, current_user.id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.patch("/preferences", response_model=NotificationPreferences)
async def update_preferences(
    payload: NotificationPreferencesPatch,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> NotificationPreferences:
    """Partial update; a channel switched off globally is switched off for every type."""
    try:
        return await service.update_preferences(db, current_user.id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> NotificationResponse:
    obj = await service.mark_read(db, current_user.id, notification_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    return obj
