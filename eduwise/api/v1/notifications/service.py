import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from eduwise.auth.models import User
from eduwise.core.exceptions import ServiceError
from eduwise.core.models import Notification
from eduwise.core.pagination import PageParams, paginate
from eduwise.core.schemas import PaginatedResponse

from .preferences import channel_enabled, merge_preferences
from .schemas import (
    NotificationCreate,
    NotificationPreferences,
    NotificationPreferencesPatch,
    NotificationResponse,
)

logger = logging.getLogger(__name__)


def notification_link(n: Notification) -> str:
    """Route the client opens for a notification; grade/attendance pages are per user."""
    if n.type == "announcement" and n.related_id:
        return f"/announcements/{n.related_id}"
    if n.type == "message" and n.related_id:
        return f"/messages/{n.related_id}"
    if n.type == "grade":
        return f"/grades/student/{n.user_id}"
    if n.type == "attendance":
        return f"/attendance/student/{n.user_id}"
    if n.type == "assignment" and n.related_id:
        return f"/assignments/{n.related_id}"
    if n.type == "event" and n.related_id:
        return f"/calendar?event={n.related_id}"
    return "/notifications"


def _to_response(n: Notification) -> NotificationResponse:
    return NotificationResponse(
        id=n.id,
        user_id=n.user_id,
        title=n.title,
        message=n.message,
        type=n.type,
        related_id=n.related_id,
        is_read=n.is_read,
        read_at=n.read_at,
        link=notification_link(n),
        created_at=n.created_at,
    )


async def notify(
    db: AsyncSession,
    user_ids: Iterable[Optional[UUID]],
    type_: str,
    title: str,
    message: str,
    related_id: Optional[str] = None,
) -> List[Notification]:
    """
    Queue in-app notifications for users whose preferences allow this type.
    Caller must commit.
    """
    ids = [uid for uid in dict.fromkeys(user_ids) if uid is not None]
    if not ids:
        return []
    result = await db.execute(select(User.id, User.notification_preferences).where(User.id.in_(ids)))
    created = []
    for user_id, prefs in result.all():
        if not channel_enabled(prefs, type_, "in_app"):
            continue
        n = Notification(
            user_id=user_id,
            title=title,
            message=message,
            type=type_,
            related_id=related_id,
            is_read=False,
            created_at=datetime.utcnow(),
        )
        db.add(n)
        created.append(n)
    return created


async def send_notifications(db: AsyncSession, payload: NotificationCreate) -> List[NotificationResponse]:
    found = await db.execute(select(User.id).where(User.id.in_(payload.user_ids)))
    if len(set(found.scalars().all())) != len(set(payload.user_ids)):
        raise ServiceError("One or more recipients not found", status.HTTP_404_NOT_FOUND)
    created = await notify(
        db, payload.user_ids, payload.type.value, payload.title, payload.message, payload.related_id
    )
    await db.commit()
    for n in created:
        await db.refresh(n)
    logger.info("Sent %r to %d of %d recipients", payload.title, len(created), len(set(payload.user_ids)))
    return [_to_response(n) for n in created]


async def list_notifications(
    db: AsyncSession,
    user_id: UUID,
    params: PageParams,
    unread_only: bool = False,
) -> PaginatedResponse[NotificationResponse]:
    stmt = select(Notification).where(Notification.user_id == user_id)
    if unread_only:
        stmt = stmt.where(Notification.is_read.is_(False))
    stmt = stmt.order_by(Notification.created_at.desc())
    return await paginate(db, stmt, params, _to_response)


async def unread_count(db: AsyncSession, user_id: UUID) -> int:
    result = await db.execute(
        select(func.count(Notification.id)).where(
            Notification.user_id == user_id,
            Notification.is_read.is_(False),
        )
    )
    return result.scalar_one()


async def mark_read(db: AsyncSession, user_id: UUID, notification_id: UUID) -> Optional[NotificationResponse]:
    result = await db.execute(
        select(Notification).where(Notification.id == notification_id, Notification.user_id == user_id)
    )
    n = result.scalar_one_or_none()
    if not n:
        return None
    if not n.is_read:
        n.is_read = True
        n.read_at = datetime.utcnow()
        await db.commit()
        await db.refresh(n)
    return _to_response(n)


async def mark_all_read(db: AsyncSession, user_id: UUID) -> int:
    result = await db.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.is_read.is_(False))
        .values(is_read=True, read_at=datetime.utcnow())
    )
    await db.commit()
    return result.rowcount or 0


async def _get_user(db: AsyncSession, user_id: UUID) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise ServiceError("User not found", status.HTTP_404_NOT_FOUND)
    return user


def _to_preferences(prefs: Dict[str, Any]) -> NotificationPreferences:
    return NotificationPreferences(**prefs)


async def get_preferences(db: AsyncSession, user_id: UUID) -> NotificationPreferences:
    user = await _get_user(db, user_id)
    return _to_preferences(merge_preferences(user.notification_preferences, {}))


async def replace_preferences(
    db: AsyncSession, user_id: UUID, payload: NotificationPreferences
) -> NotificationPreferences:
    user = await _get_user(db, user_id)
    prefs = merge_preferences(None, payload.model_dump(mode="json"))
    user.notification_preferences = prefs
    await db.commit()
    return _to_preferences(prefs)


async def update_preferences(
    db: AsyncSession, user_id: UUID, payload: NotificationPreferencesPatch
) -> NotificationPreferences:
    user = await _get_user(db, user_id)
    prefs = merge_preferences(user.notification_preferences, payload.model_dump(mode="json", exclude_none=True))
    user.notification_preferences = prefs
    await db.commit()
    return _to_preferences(prefs)
