from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from .. import models, schemas


def _load_options():
    return (
        selectinload(models.Template.questions),
        selectinload(models.Template.tags),
        selectinload(models.Template.owner),
    )


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


async def get_template(db: AsyncSession, template_id: int) -> Optional[models.Template]:
    result = await db.execute(
        select(models.Template)
        .options(*_load_options())
        .where(models.Template.id == template_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_or_create_tags(db: AsyncSession, names: Iterable[str]) -> List[models.Tag]:
    names = list(names)
    if not names:
        return []
    result = await db.execute(select(models.Tag).where(models.Tag.name.in_(names)))
    existing = {tag.name: tag for tag in result.scalars().all()}
    tags = []
    for name in names:
        tag = existing.get(name)
        if tag is None:
            tag = models.Tag(name=name)
            db.add(tag)
        tags.append(tag)
    return tags


def _build_questions(questions_in: List[schemas.QuestionCreate]) -> List[models.Question]:
    return [
        models.Question(**question_in.model_dump(), position=position)
        for position, question_in in enumerate(questions_in)
    ]


async def create_template(
    db: AsyncSession, owner: models.User, template_in: schemas.TemplateCreate
) -> models.Template:
    db_template = models.Template(
        title=template_in.title,
        description=template_in.description,
        topic=template_in.topic,
        is_public=template_in.is_public,
        status=models.TEMPLATE_STATUS_PENDING,
        user_id=owner.id,
        tags=await get_or_create_tags(db, template_in.tags),
        questions=_build_questions(template_in.questions),
    )
    db.add(db_template)
    await db.commit()
    return await get_template(db, db_template.id)


async def update_template(
    db: AsyncSession, db_template: models.Template, template_in: schemas.TemplateUpdate
) -> models.Template:
    db_template.title = template_in.title
    db_template.description = template_in.description
    db_template.topic = template_in.topic
    db_template.is_public = template_in.is_public
    db_template.tags = await get_or_create_tags(db, template_in.tags)
    # Old questions are replaced; stored responses keep their answer maps.
    db_template.questions = _build_questions(template_in.questions)
    db_template.updated_at = func.now()
    await db.commit()
    return await get_template(db, db_template.id)


async def delete_template(db: AsyncSession, db_template: models.Template) -> None:
    await db.delete(db_template)
    await db.commit()


async def set_status(db: AsyncSession, db_template: models.Template, status: str) -> models.Template:
    db_template.status = status
    await db.commit()
    return await get_template(db, db_template.id)


def _public_active():
    return (
        models.Template.status == models.TEMPLATE_STATUS_ACTIVE,
        models.Template.is_public.is_(True),
    )


async def _paginate(
    db: AsyncSession, stmt, page: int, page_size: int
) -> Tuple[List[models.Template], int]:
    count_result = await db.execute(select(func.count()).select_from(stmt.subquery()))
    total = count_result.scalar_one()
    result = await db.execute(
        stmt.options(*_load_options())
        .order_by(models.Template.created_at.desc(), models.Template.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return list(result.scalars().all()), total


async def list_public_templates(
    db: AsyncSession, page: int, page_size: int
) -> Tuple[List[models.Template], int]:
    stmt = select(models.Template).where(*_public_active())
    return await _paginate(db, stmt, page, page_size)


async def search_templates(
    db: AsyncSession,
    q: Optional[str] = None,
    topic: Optional[str] = None,
    tag: Optional[str] = None,
    author: Optional[int] = None,
    page: int = 1,
    page_size: int = 20,
) -> Tuple[List[models.Template], int]:
    stmt = select(models.Template).where(*_public_active())
    if q and q.strip():
        pattern = f"%{_escape_like(q.strip())}%"
        stmt = stmt.where(
            or_(
                models.Template.title.ilike(pattern, escape="\\"),
                models.Template.description.ilike(pattern, escape="\\"),
            )
        )
    if topic:
        stmt = stmt.where(models.Template.topic == topic)
    if tag:
        stmt = stmt.where(models.Template.tags.any(models.Tag.name == tag.strip().lower()))
    if author is not None:
        stmt = stmt.where(models.Template.user_id == author)
    return await _paginate(db, stmt, page, page_size)


async def list_user_templates(db: AsyncSession, user_id: int) -> List[models.Template]:
    result = await db.execute(
        select(models.Template)
        .options(*_load_options())
        .where(models.Template.user_id == user_id)
        .order_by(models.Template.created_at.desc(), models.Template.id.desc())
    )
    return list(result.scalars().all())


async def list_all_templates(
    db: AsyncSession, status: Optional[str] = None
) -> List[models.Template]:
    stmt = select(models.Template).options(*_load_options())
    if status:
        stmt = stmt.where(models.Template.status == status)
    result = await db.execute(
        stmt.order_by(models.Template.created_at.desc(), models.Template.id.desc())
    )
    return list(result.scalars().all())


async def popular_templates(db: AsyncSession, limit: int) -> List[models.Template]:
    like_count = func.count(models.Like.id)
    result = await db.execute(
        select(models.Template)
        .outerjoin(models.Like, models.Like.template_id == models.Template.id)
        .where(*_public_active())
        .group_by(models.Template.id)
        .order_by(
            like_count.desc(), models.Template.created_at.desc(), models.Template.id.desc()
        )
        .limit(limit)
        .options(*_load_options())
    )
    return list(result.scalars().all())


async def list_tags(db: AsyncSession) -> List[Tuple[str, int]]:
    template_count = func.count(models.template_tags.c.template_id)
    result = await db.execute(
        select(models.Tag.name, template_count)
        .outerjoin(models.template_tags, models.template_tags.c.tag_id == models.Tag.id)
        .group_by(models.Tag.id, models.Tag.name)
        .order_by(template_count.desc(), models.Tag.name)
    )
    return [(name, count) for name, count in result.all()]


async def like_counts(db: AsyncSession, template_ids: List[int]) -> Dict[int, int]:
    if not template_ids:
        return {}
    result = await db.execute(
        select(models.Like.template_id, func.count(models.Like.id))
        .where(models.Like.template_id.in_(template_ids))
        .group_by(models.Like.template_id)
    )
    return dict(result.all())


async def comment_count(db: AsyncSession, template_id: int) -> int:
    result = await db.execute(
        select(func.count(models.Comment.id)).where(models.Comment.template_id == template_id)
    )
    return result.scalar_one()


# --- Serialisation helpers ---


def to_read(db_template: models.Template, likes: int = 0, comments: int = 0) -> schemas.TemplateRead:
    return schemas.TemplateRead(
        id=db_template.id,
        title=db_template.title,
        description=db_template.description,
        topic=db_template.topic,
        is_public=db_template.is_public,
        tags=[tag.name for tag in db_template.tags],
        status=db_template.status,
        user_id=db_template.user_id,
        author_name=db_template.owner.name if db_template.owner else None,
        created_at=db_template.created_at,
        updated_at=db_template.updated_at,
        questions=[schemas.QuestionRead.model_validate(q) for q in db_template.questions],
        likes=likes,
        comments=comments,
    )


async def to_list_items(
    db: AsyncSession, db_templates: List[models.Template]
) -> List[schemas.TemplateListItem]:
    likes = await like_counts(db, [t.id for t in db_templates])
    return [
        schemas.TemplateListItem(
            id=t.id,
            title=t.title,
            description=t.description,
            topic=t.topic,
            tags=[tag.name for tag in t.tags],
            status=t.status,
            is_public=t.is_public,
            user_id=t.user_id,
            author_name=t.owner.name if t.owner else None,
            created_at=t.created_at,
            question_count=len(t.questions),
            likes=likes.get(t.id, 0),
        )
        for t in db_templates
    ]
