"""
Response submission pipeline.

The client-side check is only a convenience, this module is the authority:
the template is loaded, its state checked, every answer re-validated, and
only then is a single immutable response row written.
"""

from typing import Any, Dict, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from . import models
from .crud import crud_response, crud_template
from .exceptions import (
    NotFoundError,
    PersistenceError,
    ResponseValidationError,
    TemplateInactiveError,
)
from .validation import collect_errors, is_acceptable, validate_answers


async def load_active_template(db: AsyncSession, template_id: int) -> models.Template:
    db_template = await crud_template.get_template(db, template_id)
    if db_template is None:
        raise NotFoundError(f"Template {template_id} not found")
    if not db_template.is_active:
        raise TemplateInactiveError(f"Template {template_id} is not active")
    return db_template


async def check_answers(
    db: AsyncSession, template_id: int, answers: Mapping[str, Any]
) -> Dict[str, str]:
    """Runs the submission checks without writing. Returns the field errors."""
    db_template = await load_active_template(db, template_id)
    return collect_errors(validate_answers(db_template.questions, answers))


async def submit_response(
    db: AsyncSession,
    template_id: int,
    answers: Mapping[str, Any],
    submitter_id: Optional[int] = None,
) -> models.Response:
    db_template = await load_active_template(db, template_id)

    verdicts = validate_answers(db_template.questions, answers)
    if not is_acceptable(verdicts):
        errors = collect_errors(verdicts)
        print(f"Response to template {template_id} rejected: {errors}")
        raise ResponseValidationError(errors)

    try:
        db_response = await crud_response.create_response(
            db, template_id, submitter_id, answers
        )
    except SQLAlchemyError as e:
        await db.rollback()
        print(f"ERROR: storing response for template {template_id} failed: {e}")
        raise PersistenceError("Failed to store response") from e

    print(
        f"Response {db_response.id} stored for template {template_id} "
        f"(user {submitter_id if submitter_id is not None else 'anonymous'})."
    )
    return db_response
