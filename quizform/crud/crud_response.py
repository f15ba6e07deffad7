from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from .. import models


async def create_response(
    db: AsyncSession, template_id: int, user_id: Optional[int], answers: Dict[str, Any]
) -> models.Response:
    db_response = models.Response(
        template_id=template_id,
        user_id=user_id,
        answers=dict(answers),
    )
    db.add(db_response)
    await db.commit()
    await db.refresh(db_response)
    return db_response


async def get_response(db: AsyncSession, response_id: int) -> Optional[models.Response]:
    return await db.get(models.Response, response_id)


async def get_responses_for_template(db: AsyncSession, template_id: int) -> List[models.Response]:
    result = await db.execute(
        select(models.Response)
        .where(models.Response.template_id == template_id)
        .order_by(models.Response.created_at.desc(), models.Response.id.desc())
    )
    return list(result.scalars().all())
