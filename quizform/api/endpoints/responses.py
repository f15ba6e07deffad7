from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from quizform import models, schemas
from quizform.api.endpoints.templates import can_manage, get_visible_template
from quizform.crud import crud_response, crud_template
from quizform.database import get_db_session
from quizform.exceptions import NotFoundError, PermissionDeniedError
from quizform.security import get_current_user, get_optional_user
from quizform.submission import check_answers, submit_response

router = APIRouter(prefix="/api", tags=["responses"])


@router.post(
    "/templates/{template_id}/responses",
    response_model=schemas.ResponseRead,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": schemas.ErrorBody},
        404: {"model": schemas.ErrorBody},
        500: {"model": schemas.ErrorBody},
    },
)
async def create_response(
    template_id: int,
    response_in: schemas.ResponseSubmit,
    db: AsyncSession = Depends(get_db_session),
    user: Optional[models.User] = Depends(get_optional_user),
):
    """Validates the answers against the template and stores them."""
    return await submit_response(
        db, template_id, response_in.answers, submitter_id=user.id if user else None
    )


@router.post(
    "/templates/{template_id}/responses/validate",
    response_model=schemas.ValidationResult,
)
async def validate_response(
    template_id: int,
    response_in: schemas.ResponseSubmit,
    db: AsyncSession = Depends(get_db_session),
    user: Optional[models.User] = Depends(get_optional_user),
):
    """Dry run of the submission checks for inline errors, nothing is stored."""
    await get_visible_template(db, template_id, user)
    errors = await check_answers(db, template_id, response_in.answers)
    return schemas.ValidationResult(valid=not errors, errors=errors)


@router.get("/templates/{template_id}/responses", response_model=List[schemas.ResponseRead])
async def list_responses(
    template_id: int,
    db: AsyncSession = Depends(get_db_session),
    user: models.User = Depends(get_current_user),
):
    db_template = await crud_template.get_template(db, template_id)
    if db_template is None:
        raise NotFoundError(f"Template {template_id} not found")
    if not can_manage(db_template, user):
        raise PermissionDeniedError("Only the owner or an admin may view responses")
    return await crud_response.get_responses_for_template(db, template_id)


@router.get("/responses/{response_id}", response_model=schemas.ResponseRead)
async def get_response(
    response_id: int,
    db: AsyncSession = Depends(get_db_session),
    user: models.User = Depends(get_current_user),
):
    db_response = await crud_response.get_response(db, response_id)
    if db_response is None:
        raise NotFoundError(f"Response {response_id} not found")
    if db_response.user_id != user.id:
        db_template = await crud_template.get_template(db, db_response.template_id)
        if not can_manage(db_template, user):
            raise PermissionDeniedError("Not allowed to view this response")
    return db_response
