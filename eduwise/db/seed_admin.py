"""
Seed the first ADMIN user so the API can be logged into.

Run once after init_db with env set:
  ADMIN_EMAIL=admin@school.example
  ADMIN_PASSWORD=YourSecurePassword

Re-running updates the password and name of the existing account.
"""
import asyncio
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from eduwise.auth.models import User
from eduwise.auth.security import hash_password
from eduwise.core.config import settings
from eduwise.core.enums import UserRole, UserStatus
from eduwise.db.session import AsyncSessionLocal


async def seed_admin(db: AsyncSession) -> Optional[User]:
    if not settings.admin_email or not settings.admin_password:
        print("ADMIN_EMAIL / ADMIN_PASSWORD not set; skipping admin user.")
        return None
    email = settings.admin_email.lower()
    result = await db.execute(select(User).where(func.lower(User.email) == email))
    admin = result.scalar_one_or_none()
    if not admin:
        admin = User(
            full_name=settings.admin_full_name,
            email=email,
            password_hash=hash_password(settings.admin_password),
            role=UserRole.ADMIN.value,
            status=UserStatus.ACTIVE.value,
        )
        db.add(admin)
        print("Created ADMIN user:", email)
    else:
        admin.role = UserRole.ADMIN.value
        admin.status = UserStatus.ACTIVE.value
        admin.full_name = settings.admin_full_name
        admin.password_hash = hash_password(settings.admin_password)
        print("Updated existing user to ADMIN:", email)
    await db.commit()
    await db.refresh(admin)
    return admin


async def main() -> None:
    async with AsyncSessionLocal() as db:
        try:
            await seed_admin(db)
        except Exception as e:
            await db.rollback()
            print("Error:", e)
            raise


if __name__ == "__main__":
    asyncio.run(main())
