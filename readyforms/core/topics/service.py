import logging
from typing import List
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from readyforms.core.locking import optimistic_delete, optimistic_update
from readyforms.db.models.template import Template
from readyforms.db.models.topic import Topic
from readyforms.db.models.user import User
from readyforms.schemas.topic import TopicCreateRequest, TopicUpdateRequest
from readyforms.utils.exceptions import BadRequestException, ConflictException, NotFoundException

logger = logging.getLogger(__name__)


class TopicService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list(self) -> List[Topic]:
        result = await self.session.execute(select(Topic).order_by(Topic.name))
        return list(result.scalars().all())

    async def get(self, topic_id: UUID) -> Topic:
        topic = await self.session.get(Topic, topic_id)
        if topic is None:
            raise NotFoundException("Topic not found")
        return topic

    async def _ensure_name_free(self, name: str, *, exclude_id: UUID | None = None) -> None:
        stmt = select(Topic.id).where(func.lower(Topic.name) == name.lower())
        if exclude_id is not None:
            stmt = stmt.where(Topic.id != exclude_id)
        if (await self.session.execute(stmt)).first() is not None:
            raise ConflictException("Topic with this name already exists")

    async def create(self, actor: User, data: TopicCreateRequest) -> Topic:
        name = data.name
        await self._ensure_name_free(name)
        topic = Topic(name=name, description=data.description or "")
        self.session.add(topic)
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise ConflictException("Topic with this name already exists")
        await self.session.refresh(topic)
        logger.info("topic.create id=%s actor=%s", topic.id, actor.id)
        return topic

    async def update(self, topic_id: UUID, actor: User, data: TopicUpdateRequest) -> Topic:
        await self.get(topic_id)
        name = data.name
        await self._ensure_name_free(name, exclude_id=topic_id)

        patch = {"name": name}
        if data.description is not None:
            patch["description"] = data.description
        try:
            topic = await optimistic_update(self.session, Topic, topic_id, data.version, patch)
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise ConflictException("Topic with this name already exists")
        except Exception:
            await self.session.rollback()
            raise
        logger.info("topic.update id=%s actor=%s version=%s", topic_id, actor.id, topic.version)
        return topic

    async def delete(self, topic_id: UUID, actor: User, version: int) -> None:
        await self.get(topic_id)
        in_use = (
            await self.session.execute(select(func.count(Template.id)).where(Template.topic_id == topic_id))
        ).scalar_one()
        if in_use:
            raise BadRequestException(
                "Cannot delete topic that is used by templates",
                details={"templates": int(in_use)},
            )
        try:
            await optimistic_delete(self.session, Topic, topic_id, version)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        logger.info("topic.delete id=%s actor=%s", topic_id, actor.id)
