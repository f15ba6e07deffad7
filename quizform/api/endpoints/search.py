from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from quizform import schemas
from quizform.crud import crud_template
from quizform.database import get_db_session

router = APIRouter(prefix="/api", tags=["search"])


@router.get("/search/templates", response_model=schemas.TemplatePage)
async def search_templates(
    q: Optional[str] = Query(None, max_length=200),
    topic: Optional[Literal["Education", "Quiz", "Other"]] = None,
    tag: Optional[str] = None,
    author: Optional[int] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db_session),
):
    """Full text match on title/description of public, active templates."""
    db_templates, total = await crud_template.search_templates(
        db, q=q, topic=topic, tag=tag, author=author, page=page, page_size=page_size
    )
    return schemas.TemplatePage(
        items=await crud_template.to_list_items(db, db_templates),
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/tags", response_model=List[schemas.TagCount])
async def list_tags(db: AsyncSession = Depends(get_db_session)):
    return [
        schemas.TagCount(name=name, template_count=count)
        for name, count in await crud_template.list_tags(db)
    ]
