from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from .. import models, schemas


async def count_likes(db: AsyncSession, template_id: int) -> int:
    result = await db.execute(
        select(func.count(models.Like.id)).where(models.Like.template_id == template_id)
    )
    return result.scalar_one()


async def toggle_like(db: AsyncSession, template_id: int, user_id: int) -> Tuple[bool, int]:
    """Likes or unlikes the template for the user. Returns (liked, like count)."""
    result = await db.execute(
        select(models.Like).where(
            models.Like.template_id == template_id, models.Like.user_id == user_id
        )
    )
    existing = result.scalar_one_or_none()
    if existing is not None:
        await db.delete(existing)
    else:
        db.add(models.Like(template_id=template_id, user_id=user_id))
    await db.commit()
    return existing is None, await count_likes(db, template_id)


async def add_comment(
    db: AsyncSession, template_id: int, author: models.User, content: str
) -> models.Comment:
    db_comment = models.Comment(template_id=template_id, user_id=author.id, content=content)
    db.add(db_comment)
    await db.commit()
    await db.refresh(db_comment)
    return db_comment


async def list_comments(db: AsyncSession, template_id: int) -> List[models.Comment]:
    result = await db.execute(
        select(models.Comment)
        .options(selectinload(models.Comment.author))
        .where(models.Comment.template_id == template_id)
        .order_by(models.Comment.created_at, models.Comment.id)
    )
    return list(result.scalars().all())


async def get_comment(
    db: AsyncSession, template_id: int, comment_id: int
) -> Optional[models.Comment]:
    result = await db.execute(
        select(models.Comment).where(
            models.Comment.id == comment_id, models.Comment.template_id == template_id
        )
    )
    return result.scalar_one_or_none()


async def delete_comment(db: AsyncSession, db_comment: models.Comment) -> None:
    await db.delete(db_comment)
    await db.commit()


def comment_to_read(db_comment: models.Comment, author_name: Optional[str]) -> schemas.CommentRead:
    return schemas.CommentRead(
        id=db_comment.id,
        template_id=db_comment.template_id,
        user_id=db_comment.user_id,
        author_name=author_name,
        content=db_comment.content,
        created_at=db_comment.created_at,
    )
