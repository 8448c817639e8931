import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from eduwise.auth.models import User
from eduwise.auth.schemas import LoginRequest, LoginResponse, UserInfo
from eduwise.auth.security import token_for_user, verify_password
from eduwise.core.exceptions import ServiceError

logger = logging.getLogger(__name__)


async def login_user(db: AsyncSession, payload: LoginRequest) -> LoginResponse:
    # 1. Find user by email (case-insensitive)
    user_stmt = select(User).where(func.lower(User.email) == func.lower(payload.email))
    user_result = await db.execute(user_stmt)
    user: Optional[User] = user_result.scalar_one_or_none()
    if not user:
        raise ServiceError("Invalid credentials", status.HTTP_401_UNAUTHORIZED)

    # 2. Verify password hash
    if not verify_password(payload.password, user.password_hash):
        raise ServiceError("Invalid credentials", status.HTTP_401_UNAUTHORIZED)

    # 3. Check user status
    if user.status != "ACTIVE":
        raise ServiceError("User is inactive", status.HTTP_403_FORBIDDEN)

    logger.info("User %s logged in as %s", user.id, user.role)
    return LoginResponse(
        access_token=token_for_user(user),
        user=UserInfo(id=user.id, name=user.full_name, email=user.email, role=user.role),
        issued_at=datetime.now(timezone.utc),
    )


async def get_user_info(db: AsyncSession, user_id) -> Optional[UserInfo]:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        return None
    return UserInfo(id=user.id, name=user.full_name, email=user.email, role=user.role)
