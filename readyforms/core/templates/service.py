import logging
from typing import Iterable, Optional
from uuid import UUID

from sqlalchemy import delete, func, or_, select
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from readyforms.core.access import can_view_template, is_owner_or_admin
from readyforms.core.locking import optimistic_delete, optimistic_update
from readyforms.core.questions import STATE_ATTRS, enabled_slots, iter_slots, slot_key, state_attr
from readyforms.db.models.comment import Comment
from readyforms.db.models.form_response import FormResponse
from readyforms.db.models.like import Like
from readyforms.db.models.tag import Tag, TemplateTag
from readyforms.db.models.template import Template
from readyforms.db.models.topic import Topic
from readyforms.db.models.user import User
from readyforms.schemas.template import TemplateCreateRequest, TemplateDetail, TemplateUpdateRequest
from readyforms.utils.exceptions import BadRequestException, ForbiddenException, NotFoundException
from readyforms.utils.observability import log_duration

logger = logging.getLogger(__name__)

SORT_OPTIONS = ("newest", "oldest", "popular")


def _detail_options():
    return (
        selectinload(Template.owner),
        selectinload(Template.topic),
        selectinload(Template.tags),
    )


def _nullable_columns(model) -> set[str]:
    return {attr.key for attr in sa_inspect(model).column_attrs if attr.columns[0].nullable}


class TemplateService:
    def __init__(self, session: AsyncSession):
        self.session = session

    # Reads

    async def get(self, template_id: UUID) -> Template:
        template = await self.session.get(Template, template_id)
        if template is None:
            raise NotFoundException("Template not found")
        return template

    async def get_loaded(self, template_id: UUID) -> Template:
        result = await self.session.execute(
            select(Template)
            .where(Template.id == template_id)
            .options(*_detail_options())
            .execution_options(populate_existing=True)
        )
        template = result.scalar_one_or_none()
        if template is None:
            raise NotFoundException("Template not found")
        return template

    async def get_for_viewer(self, template_id: UUID, viewer: Optional[User]) -> TemplateDetail:
        template = await self.get_loaded(template_id)
        if not can_view_template(template, viewer):
            raise ForbiddenException("You don't have access to this template")
        return (await self.to_details([template]))[0]

    async def counts(self, template_ids: Iterable[UUID]) -> dict[UUID, tuple[int, int]]:
        ids = list(template_ids)
        if not ids:
            return {}
        likes = await self.session.execute(
            select(Like.template_id, func.count(Like.id)).where(Like.template_id.in_(ids)).group_by(Like.template_id)
        )
        responses = await self.session.execute(
            select(FormResponse.template_id, func.count(FormResponse.id))
            .where(FormResponse.template_id.in_(ids))
            .group_by(FormResponse.template_id)
        )
        like_counts = dict(likes.all())
        response_counts = dict(responses.all())
        return {tid: (int(like_counts.get(tid, 0)), int(response_counts.get(tid, 0))) for tid in ids}

    async def to_details(self, templates: list[Template]) -> list[TemplateDetail]:
        counts = await self.counts(t.id for t in templates)
        out: list[TemplateDetail] = []
        for t in templates:
            likes_count, responses_count = counts.get(t.id, (0, 0))
            detail = TemplateDetail.model_validate(t)
            out.append(detail.model_copy(update={"likes_count": likes_count, "responses_count": responses_count}))
        return out

    async def list_templates(
        self,
        *,
        public_only: bool = True,
        query: Optional[str] = None,
        topic_id: Optional[UUID] = None,
        tag: Optional[str] = None,
        owner_id: Optional[UUID] = None,
        sort: str = "newest",
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[Template], int]:
        if sort not in SORT_OPTIONS:
            raise BadRequestException(f"Invalid sort: {sort}", details={"allowed": list(SORT_OPTIONS)})

        conditions = []
        if public_only:
            conditions.append(Template.is_public.is_(True))
        if owner_id is not None:
            conditions.append(Template.user_id == owner_id)
        if topic_id is not None:
            conditions.append(Template.topic_id == topic_id)
        if query:
            pattern = f"%{query.strip()}%"
            conditions.append(or_(Template.title.ilike(pattern), Template.description.ilike(pattern)))
        if tag:
            tagged = (
                select(TemplateTag.template_id)
                .join(Tag, Tag.id == TemplateTag.tag_id)
                .where(func.lower(Tag.name) == tag.strip().lower())
            )
            conditions.append(Template.id.in_(tagged))

        with log_duration(logger, "templates.list", sort=sort, page=page, limit=limit):
            total = (await self.session.execute(select(func.count(Template.id)).where(*conditions))).scalar_one()
            items = await self._page(conditions, sort, page, limit)
        return items, int(total or 0)

    async def _page(self, conditions: list, sort: str, page: int, limit: int) -> list[Template]:
        stmt = select(Template).where(*conditions).options(*_detail_options())
        if sort == "oldest":
            stmt = stmt.order_by(Template.created_at.asc(), Template.id)
        elif sort == "popular":
            like_counts = (
                select(Like.template_id, func.count(Like.id).label("likes"))
                .group_by(Like.template_id)
                .subquery()
            )
            stmt = stmt.outerjoin(like_counts, like_counts.c.template_id == Template.id).order_by(
                func.coalesce(like_counts.c.likes, 0).desc(), Template.created_at.desc()
            )
        else:
            stmt = stmt.order_by(Template.created_at.desc(), Template.id)

        stmt = stmt.offset((page - 1) * limit).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    # Writes

    async def _require_topic(self, topic_id: UUID) -> None:
        if await self.session.get(Topic, topic_id) is None:
            raise BadRequestException("Topic not found", details={"topic_id": str(topic_id)})

    async def _tags_by_name(self, names: list[str]) -> list[Tag]:
        if not names:
            return []
        lowered = [n.lower() for n in names]
        result = await self.session.execute(select(Tag).where(func.lower(Tag.name).in_(lowered)))
        existing = {t.name.lower(): t for t in result.scalars().all()}
        tags: list[Tag] = []
        for name in names:
            tag = existing.get(name.lower())
            if tag is None:
                tag = Tag(name=name)
                self.session.add(tag)
                existing[name.lower()] = tag
            tags.append(tag)
        await self.session.flush()
        return tags

    async def _sync_tags(self, template_id: UUID, names: list[str]) -> None:
        tags = await self._tags_by_name(names)
        await self.session.execute(delete(TemplateTag).where(TemplateTag.template_id == template_id))
        for tag in tags:
            self.session.add(TemplateTag(template_id=template_id, tag_id=tag.id))
        await self.session.flush()

    async def create(self, owner: User, data: TemplateCreateRequest) -> Template:
        values = data.model_dump(exclude={"tags"}, exclude_none=True)
        if not any(values.get(attr) for attr in STATE_ATTRS):
            raise BadRequestException("At least one question must be enabled")
        await self._require_topic(data.topic_id)

        values.setdefault("description", "")
        template = Template(user_id=owner.id, **values)
        if not template.question_order:
            template.question_order = [slot_key(k, n) for k, n in enabled_slots(template)]

        try:
            self.session.add(template)
            await self.session.flush()
            if data.tags:
                await self._sync_tags(template.id, data.tags)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info("template.create id=%s owner=%s quiz=%s", template.id, owner.id, template.is_quiz)
        return await self.get_loaded(template.id)

    async def update(self, template_id: UUID, actor: User, data: TemplateUpdateRequest) -> Template:
        template = await self.get(template_id)
        if not is_owner_or_admin(actor, template.user_id):
            raise ForbiddenException("Not authorized to update this template")

        nullable = _nullable_columns(Template)
        patch = {
            k: v
            for k, v in data.model_dump(exclude_unset=True, exclude={"version", "tags"}).items()
            if v is not None or k in nullable
        }

        states = {state_attr(k, n): patch.get(state_attr(k, n), getattr(template, state_attr(k, n))) for k, n in iter_slots()}
        if not any(states.values()):
            raise BadRequestException("At least one question must be enabled")
        if "topic_id" in patch and patch["topic_id"] != template.topic_id:
            await self._require_topic(patch["topic_id"])

        try:
            await optimistic_update(self.session, Template, template_id, data.version, patch)
            if data.tags is not None:
                await self._sync_tags(template_id, data.tags)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info("template.update id=%s actor=%s version=%s", template_id, actor.id, data.version + 1)
        return await self.get_loaded(template_id)

    async def delete(self, template_id: UUID, actor: User, version: int) -> None:
        template = await self.get(template_id)
        if not is_owner_or_admin(actor, template.user_id):
            raise ForbiddenException("Not authorized to delete this template")

        # Dependents and the template go in one transaction; a stale version
        # rolls every statement back.
        try:
            await self.session.execute(delete(Comment).where(Comment.template_id == template_id))
            await self.session.execute(delete(Like).where(Like.template_id == template_id))
            await self.session.execute(delete(FormResponse).where(FormResponse.template_id == template_id))
            await self.session.execute(delete(TemplateTag).where(TemplateTag.template_id == template_id))
            await optimistic_delete(self.session, Template, template_id, version)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info("template.delete id=%s actor=%s", template_id, actor.id)
