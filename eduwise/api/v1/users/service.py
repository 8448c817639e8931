import logging
from typing import Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from eduwise.auth.models import User
from eduwise.auth.schemas import UserCreate, UserResponse, UserUpdate
from eduwise.auth.security import hash_password
from eduwise.core.enums import UserStatus
from eduwise.core.exceptions import ServiceError
from eduwise.core.pagination import PageParams, paginate
from eduwise.core.schemas import PaginatedResponse

logger = logging.getLogger(__name__)


def _user_to_response(u: User) -> UserResponse:
    return UserResponse(
        id=u.id,
        full_name=u.full_name,
        email=u.email,
        role=u.role,
        status=u.status,
        created_at=u.created_at,
    )


async def _email_taken(db: AsyncSession, email: str) -> bool:
    result = await db.execute(select(User.id).where(func.lower(User.email) == email.lower()))
    return result.scalar_one_or_none() is not None


async def create_user(db: AsyncSession, payload: UserCreate) -> UserResponse:
    email = payload.email.lower()
    if await _email_taken(db, email):
        raise ServiceError("Email already exists", status.HTTP_409_CONFLICT)
    user = User(
        full_name=payload.full_name.strip(),
        email=email,
        password_hash=hash_password(payload.password),
        role=payload.role.value,
        status=UserStatus.ACTIVE.value,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Email already exists", status.HTTP_409_CONFLICT)
    await db.refresh(user)
    logger.info("Created %s user %s", user.role, user.id)
    return _user_to_response(user)


async def list_users(
    db: AsyncSession,
    params: PageParams,
    role: Optional[str] = None,
    status_: Optional[str] = None,
    search: Optional[str] = None,
) -> PaginatedResponse[UserResponse]:
    stmt = select(User)
    if role:
        stmt = stmt.where(User.role == role)
    if status_:
        stmt = stmt.where(User.status == status_)
    if search:
        pattern = f"%{search.strip()}%"
        stmt = stmt.where(or_(User.full_name.ilike(pattern), User.email.ilike(pattern)))
    stmt = stmt.order_by(User.full_name)
    return await paginate(db, stmt, params, _user_to_response)


async def get_user(db: AsyncSession, user_id: UUID) -> Optional[UserResponse]:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    return _user_to_response(user) if user else None


async def update_user(
    db: AsyncSession,
    user_id: UUID,
    payload: UserUpdate,
    acting_user_id: UUID,
) -> Optional[UserResponse]:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        return None
    data = payload.model_dump(exclude_unset=True)
    if user.id == acting_user_id and (
        data.get("status") == UserStatus.INACTIVE or ("role" in data and data["role"] != user.role)
    ):
        raise ServiceError("You cannot deactivate or change the role of your own account", status.HTTP_400_BAD_REQUEST)
    if "full_name" in data and data["full_name"] is not None:
        user.full_name = data["full_name"].strip()
    if data.get("role") is not None:
        user.role = data["role"].value
    if data.get("status") is not None:
        user.status = data["status"].value
    if data.get("password"):
        user.password_hash = hash_password(data["password"])
    await db.commit()
    await db.refresh(user)
    return _user_to_response(user)
