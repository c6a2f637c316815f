import logging
from typing import List
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from readyforms.core.locking import optimistic_delete, optimistic_update
from readyforms.db.models.tag import Tag, TemplateTag
from readyforms.db.models.user import User
from readyforms.schemas.tag import TagCreateRequest, TagUpdateRequest
from readyforms.utils.exceptions import ConflictException, NotFoundException

logger = logging.getLogger(__name__)


class TagService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list(self) -> List[Tag]:
        result = await self.session.execute(select(Tag).order_by(Tag.name))
        return list(result.scalars().all())

    async def get(self, tag_id: UUID) -> Tag:
        tag = await self.session.get(Tag, tag_id)
        if tag is None:
            raise NotFoundException("Tag not found")
        return tag

    async def _ensure_name_free(self, name: str, *, exclude_id: UUID | None = None) -> None:
        stmt = select(Tag.id).where(func.lower(Tag.name) == name.lower())
        if exclude_id is not None:
            stmt = stmt.where(Tag.id != exclude_id)
        if (await self.session.execute(stmt)).first() is not None:
            raise ConflictException("Tag with this name already exists")

    async def create(self, actor: User, data: TagCreateRequest) -> Tag:
        name = data.name
        await self._ensure_name_free(name)
        tag = Tag(name=name, description=data.description)
        self.session.add(tag)
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise ConflictException("Tag with this name already exists")
        await self.session.refresh(tag)
        logger.info("tag.create id=%s actor=%s", tag.id, actor.id)
        return tag

    async def update(self, tag_id: UUID, actor: User, data: TagUpdateRequest) -> Tag:
        await self.get(tag_id)
        name = data.name
        await self._ensure_name_free(name, exclude_id=tag_id)

        patch = {"name": name}
        if data.description is not None:
            patch["description"] = data.description
        try:
            tag = await optimistic_update(self.session, Tag, tag_id, data.version, patch)
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise ConflictException("Tag with this name already exists")
        except Exception:
            await self.session.rollback()
            raise
        logger.info("tag.update id=%s actor=%s version=%s", tag_id, actor.id, tag.version)
        return tag

    async def delete(self, tag_id: UUID, actor: User, version: int) -> None:
        await self.get(tag_id)
        try:
            await self.session.execute(delete(TemplateTag).where(TemplateTag.tag_id == tag_id))
            await optimistic_delete(self.session, Tag, tag_id, version)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        logger.info("tag.delete id=%s actor=%s", tag_id, actor.id)
