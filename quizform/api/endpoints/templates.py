from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from quizform import models, schemas
from quizform.crud import crud_interaction, crud_template
from quizform.database import get_db_session
from quizform.exceptions import NotFoundError, PermissionDeniedError
from quizform.question_types import describe_question_types
from quizform.security import get_current_user, get_optional_user, require_admin

router = APIRouter(prefix="/api", tags=["templates"])


def can_manage(db_template: models.Template, user: Optional[models.User]) -> bool:
    return user is not None and (user.is_admin or db_template.user_id == user.id)


def is_visible(db_template: models.Template, user: Optional[models.User]) -> bool:
    if db_template.is_active and db_template.is_public:
        return True
    return can_manage(db_template, user)


async def get_visible_template(
    db: AsyncSession, template_id: int, user: Optional[models.User]
) -> models.Template:
    db_template = await crud_template.get_template(db, template_id)
    # Hidden templates are reported as missing rather than forbidden
    if db_template is None or not is_visible(db_template, user):
        raise NotFoundError(f"Template {template_id} not found")
    return db_template


async def get_managed_template(
    db: AsyncSession, template_id: int, user: models.User
) -> models.Template:
    db_template = await crud_template.get_template(db, template_id)
    if db_template is None:
        raise NotFoundError(f"Template {template_id} not found")
    if not can_manage(db_template, user):
        raise PermissionDeniedError("Only the owner or an admin may change this template")
    return db_template


async def _to_read(db: AsyncSession, db_template: models.Template) -> schemas.TemplateRead:
    return crud_template.to_read(
        db_template,
        likes=await crud_interaction.count_likes(db, db_template.id),
        comments=await crud_template.comment_count(db, db_template.id),
    )


@router.get("/question-types", response_model=List[schemas.QuestionTypeInfo])
async def list_question_types():
    """The question type registry, for picking an input widget per type."""
    return describe_question_types()


@router.get("/templates", response_model=schemas.TemplatePage)
async def list_templates(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db_session),
):
    db_templates, total = await crud_template.list_public_templates(db, page, page_size)
    return schemas.TemplatePage(
        items=await crud_template.to_list_items(db, db_templates),
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/templates/popular", response_model=List[schemas.TemplateListItem])
async def list_popular_templates(
    limit: int = Query(5, ge=1, le=50), db: AsyncSession = Depends(get_db_session)
):
    db_templates = await crud_template.popular_templates(db, limit)
    return await crud_template.to_list_items(db, db_templates)


@router.get("/templates/{template_id}", response_model=schemas.TemplateRead)
async def get_template(
    template_id: int,
    db: AsyncSession = Depends(get_db_session),
    user: Optional[models.User] = Depends(get_optional_user),
):
    db_template = await get_visible_template(db, template_id, user)
    return await _to_read(db, db_template)


@router.post(
    "/templates", response_model=schemas.TemplateRead, status_code=status.HTTP_201_CREATED
)
async def create_template(
    template_in: schemas.TemplateCreate,
    db: AsyncSession = Depends(get_db_session),
    user: models.User = Depends(get_current_user),
):
    print(f"User {user.id} creates template '{template_in.title}'")
    db_template = await crud_template.create_template(db, user, template_in)
    print(f"Template created with ID {db_template.id} ({len(db_template.questions)} questions)")
    return await _to_read(db, db_template)


@router.put("/templates/{template_id}", response_model=schemas.TemplateRead)
async def update_template(
    template_id: int,
    template_in: schemas.TemplateUpdate,
    db: AsyncSession = Depends(get_db_session),
    user: models.User = Depends(get_current_user),
):
    db_template = await get_managed_template(db, template_id, user)
    print(f"User {user.id} updates template {template_id}")
    db_template = await crud_template.update_template(db, db_template, template_in)
    return await _to_read(db, db_template)


@router.delete("/templates/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_template(
    template_id: int,
    db: AsyncSession = Depends(get_db_session),
    user: models.User = Depends(get_current_user),
):
    db_template = await get_managed_template(db, template_id, user)
    print(f"User {user.id} deletes template {template_id}")
    await crud_template.delete_template(db, db_template)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/templates/{template_id}/approve", response_model=schemas.TemplateRead)
async def approve_template(
    template_id: int,
    db: AsyncSession = Depends(get_db_session),
    admin: models.User = Depends(require_admin),
):
    db_template = await crud_template.get_template(db, template_id)
    if db_template is None:
        raise NotFoundError(f"Template {template_id} not found")
    print(f"Admin {admin.id} approves template {template_id}")
    db_template = await crud_template.set_status(db, db_template, models.TEMPLATE_STATUS_ACTIVE)
    return await _to_read(db, db_template)


@router.get("/users/me/templates", response_model=List[schemas.TemplateListItem])
async def list_my_templates(
    db: AsyncSession = Depends(get_db_session),
    user: models.User = Depends(get_current_user),
):
    db_templates = await crud_template.list_user_templates(db, user.id)
    return await crud_template.to_list_items(db, db_templates)
