from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from quizform import models, schemas
from quizform.crud import crud_template, crud_user
from quizform.database import get_db_session
from quizform.exceptions import NotFoundError
from quizform.security import require_admin

router = APIRouter(prefix="/api/admin", tags=["admin"])


async def _get_user_or_404(db: AsyncSession, user_id: int) -> models.User:
    db_user = await crud_user.get_user(db, user_id)
    if db_user is None:
        raise NotFoundError(f"User {user_id} not found")
    return db_user


@router.get("/users", response_model=List[schemas.UserRead])
async def list_users(
    db: AsyncSession = Depends(get_db_session), admin: models.User = Depends(require_admin)
):
    return await crud_user.list_users(db)


@router.put("/users/{user_id}/role", response_model=schemas.UserRead)
async def set_user_role(
    user_id: int,
    role_in: schemas.UserRoleUpdate,
    db: AsyncSession = Depends(get_db_session),
    admin: models.User = Depends(require_admin),
):
    db_user = await _get_user_or_404(db, user_id)
    print(f"Admin {admin.id} sets role of user {user_id} to '{role_in.role}'")
    return await crud_user.set_role(db, db_user, role_in.role)


@router.put("/users/{user_id}/block", response_model=schemas.UserRead)
async def set_user_blocked(
    user_id: int,
    block_in: schemas.UserBlockUpdate,
    db: AsyncSession = Depends(get_db_session),
    admin: models.User = Depends(require_admin),
):
    if user_id == admin.id and block_in.is_blocked:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Admins cannot block themselves")
    db_user = await _get_user_or_404(db, user_id)
    print(f"Admin {admin.id} sets blocked={block_in.is_blocked} for user {user_id}")
    return await crud_user.set_blocked(db, db_user, block_in.is_blocked)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    db: AsyncSession = Depends(get_db_session),
    admin: models.User = Depends(require_admin),
):
    if user_id == admin.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Admins cannot delete themselves")
    db_user = await _get_user_or_404(db, user_id)
    print(f"WARNING: Admin {admin.id} deletes user {user_id} and all of their templates")
    await crud_user.delete_user(db, db_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/templates", response_model=List[schemas.TemplateListItem])
async def list_all_templates(
    status_filter: Optional[Literal["pending", "active"]] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db_session),
    admin: models.User = Depends(require_admin),
):
    """All templates in any state, optionally filtered (e.g. the approval queue)."""
    db_templates = await crud_template.list_all_templates(db, status_filter)
    return await crud_template.to_list_items(db, db_templates)
