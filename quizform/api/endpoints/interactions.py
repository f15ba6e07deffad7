from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from quizform import models, schemas
from quizform.api.endpoints.templates import get_visible_template
from quizform.crud import crud_interaction
from quizform.database import get_db_session
from quizform.exceptions import NotFoundError, PermissionDeniedError
from quizform.security import get_current_user, get_optional_user

router = APIRouter(prefix="/api/templates/{template_id}", tags=["interactions"])


@router.post("/like", response_model=schemas.LikeToggleResponse)
async def toggle_like(
    template_id: int,
    db: AsyncSession = Depends(get_db_session),
    user: models.User = Depends(get_current_user),
):
    await get_visible_template(db, template_id, user)
    liked, likes = await crud_interaction.toggle_like(db, template_id, user.id)
    return schemas.LikeToggleResponse(liked=liked, likes=likes)


@router.get("/comments", response_model=List[schemas.CommentRead])
async def list_comments(
    template_id: int,
    db: AsyncSession = Depends(get_db_session),
    user: Optional[models.User] = Depends(get_optional_user),
):
    await get_visible_template(db, template_id, user)
    db_comments = await crud_interaction.list_comments(db, template_id)
    return [
        crud_interaction.comment_to_read(c, c.author.name if c.author else None)
        for c in db_comments
    ]


@router.post(
    "/comments", response_model=schemas.CommentRead, status_code=status.HTTP_201_CREATED
)
async def add_comment(
    template_id: int,
    comment_in: schemas.CommentCreate,
    db: AsyncSession = Depends(get_db_session),
    user: models.User = Depends(get_current_user),
):
    await get_visible_template(db, template_id, user)
    db_comment = await crud_interaction.add_comment(db, template_id, user, comment_in.content)
    return crud_interaction.comment_to_read(db_comment, user.name)


@router.delete("/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment(
    template_id: int,
    comment_id: int,
    db: AsyncSession = Depends(get_db_session),
    user: models.User = Depends(get_current_user),
):
    db_comment = await crud_interaction.get_comment(db, template_id, comment_id)
    if db_comment is None:
        raise NotFoundError(f"Comment {comment_id} not found")
    if db_comment.user_id != user.id and not user.is_admin:
        raise PermissionDeniedError("Only the author or an admin may delete this comment")
    await crud_interaction.delete_comment(db, db_comment)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
