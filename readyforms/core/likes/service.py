import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from readyforms.core.access import can_view_template
from readyforms.core.locking import optimistic_delete
from readyforms.db.models.like import Like
from readyforms.db.models.template import Template
from readyforms.db.models.user import User
from readyforms.utils.exceptions import ConflictException, ForbiddenException, NotFoundException

logger = logging.getLogger(__name__)


class LikeService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def visible_template(self, template_id: UUID, viewer: Optional[User]) -> Template:
        template = await self.session.get(Template, template_id)
        if template is None:
            raise NotFoundException("Template not found")
        if not can_view_template(template, viewer):
            raise ForbiddenException("You don't have access to this template")
        return template

    async def count(self, template_id: UUID) -> int:
        result = await self.session.execute(select(func.count(Like.id)).where(Like.template_id == template_id))
        return int(result.scalar_one() or 0)

    async def find(self, template_id: UUID, user_id: UUID) -> Optional[Like]:
        result = await self.session.execute(
            select(Like).where(Like.template_id == template_id, Like.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def toggle(self, template_id: UUID, user: User) -> tuple[bool, int]:
        """Like or unlike ``template_id``; returns ``(liked, count)``."""
        await self.visible_template(template_id, user)
        existing = await self.find(template_id, user.id)
        try:
            if existing is not None:
                await optimistic_delete(self.session, Like, existing.id, existing.version)
                liked = False
            else:
                self.session.add(Like(template_id=template_id, user_id=user.id))
                await self.session.flush()
                liked = True
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise ConflictException("Like state changed concurrently, please retry")
        except Exception:
            await self.session.rollback()
            raise
        logger.info("like.toggle template=%s user=%s liked=%s", template_id, user.id, liked)
        return liked, await self.count(template_id)

    async def list_for_template(self, template_id: UUID, viewer: Optional[User]) -> List[Like]:
        await self.visible_template(template_id, viewer)
        result = await self.session.execute(
            select(Like).where(Like.template_id == template_id).order_by(Like.created_at.desc(), Like.id)
        )
        return list(result.scalars().all())

    async def check(self, template_id: UUID, user: User) -> bool:
        await self.visible_template(template_id, user)
        return await self.find(template_id, user.id) is not None
