import os
from typing import List, Optional

from sqlalchemy import delete, func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from .. import models
from ..security import hash_password

DEFAULT_ADMIN_EMAIL = os.getenv("DEFAULT_ADMIN_EMAIL", "admin@quizform.local")
DEFAULT_ADMIN_PASSWORD = os.getenv("DEFAULT_ADMIN_PASSWORD", "Admin123!")


async def get_user(db: AsyncSession, user_id: int) -> Optional[models.User]:
    return await db.get(models.User, user_id)


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[models.User]:
    result = await db.execute(
        select(models.User).where(models.User.email == email.strip().lower())
    )
    return result.scalar_one_or_none()


async def create_user(
    db: AsyncSession, name: str, email: str, password: str, role: str = models.ROLE_USER
) -> models.User:
    db_user = models.User(
        name=name.strip(),
        email=email.strip().lower(),
        password_hash=hash_password(password),
        role=role,
        is_blocked=False,
    )
    db.add(db_user)
    await db.commit()
    await db.refresh(db_user)
    return db_user


async def list_users(db: AsyncSession) -> List[models.User]:
    result = await db.execute(select(models.User).order_by(models.User.id))
    return list(result.scalars().all())


async def set_role(db: AsyncSession, db_user: models.User, role: str) -> models.User:
    db_user.role = role
    await db.commit()
    await db.refresh(db_user)
    return db_user


async def set_blocked(db: AsyncSession, db_user: models.User, is_blocked: bool) -> models.User:
    db_user.is_blocked = is_blocked
    await db.commit()
    await db.refresh(db_user)
    return db_user


async def delete_user(db: AsyncSession, db_user: models.User) -> None:
    # Likes and comments on other users' templates are not reachable through
    # the User relationships, remove them explicitly. Responses stay, anonymised.
    await db.execute(delete(models.Like).where(models.Like.user_id == db_user.id))
    await db.execute(delete(models.Comment).where(models.Comment.user_id == db_user.id))
    await db.execute(
        update(models.Response)
        .where(models.Response.user_id == db_user.id)
        .values(user_id=None)
    )
    await db.delete(db_user)  # cascades to the user's own templates
    await db.commit()


async def ensure_default_admin(db: AsyncSession) -> None:
    """Creates the default admin account if no admin exists yet."""
    result = await db.execute(
        select(func.count(models.User.id)).where(models.User.role == models.ROLE_ADMIN)
    )
    if result.scalar_one() > 0:
        return
    if await get_user_by_email(db, DEFAULT_ADMIN_EMAIL) is not None:
        return
    await create_user(
        db, "Admin", DEFAULT_ADMIN_EMAIL, DEFAULT_ADMIN_PASSWORD, role=models.ROLE_ADMIN
    )
    print(f"Default admin created: {DEFAULT_ADMIN_EMAIL}")
