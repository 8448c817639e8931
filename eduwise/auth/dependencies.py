from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eduwise.auth.models import User
from eduwise.auth.schemas import CurrentUser
from eduwise.core.config import settings
from eduwise.core.models import Teacher
from eduwise.db.session import get_db


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login-oauth")


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> CurrentUser:
    """Resolve the authenticated user from the access token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        raise credentials_exception

    user_id_str = payload.get("sub")
    if not user_id_str:
        raise credentials_exception
    try:
        user_id = UUID(user_id_str)
    except ValueError:
        raise credentials_exception

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user or user.status != "ACTIVE":
        raise credentials_exception

    # Role is read from the row, not the token, so role changes apply immediately.
    return CurrentUser(id=user.id, role=user.role, email=user.email, full_name=user.full_name)


async def get_teacher_id_for_user(db: AsyncSession, current_user: CurrentUser) -> Optional[UUID]:
    """Teacher profile linked to the user, if any."""
    result = await db.execute(select(Teacher.id).where(Teacher.user_id == current_user.id))
    return result.scalar_one_or_none()
