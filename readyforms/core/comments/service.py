import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from readyforms.core.access import can_view_template, is_admin
from readyforms.core.locking import optimistic_delete, optimistic_update
from readyforms.db.models.comment import Comment
from readyforms.db.models.template import Template
from readyforms.db.models.user import User
from readyforms.schemas.comment import CommentCreateRequest, CommentUpdateRequest
from readyforms.utils.exceptions import ForbiddenException, NotFoundException

logger = logging.getLogger(__name__)


class CommentService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _visible_template(self, template_id: UUID, viewer: Optional[User]) -> Template:
        template = await self.session.get(Template, template_id)
        if template is None:
            raise NotFoundException("Template not found")
        if not can_view_template(template, viewer):
            raise ForbiddenException("You don't have access to this template")
        return template

    async def _loaded(self, comment_id: UUID) -> Comment:
        result = await self.session.execute(
            select(Comment)
            .where(Comment.id == comment_id)
            .options(selectinload(Comment.user))
            .execution_options(populate_existing=True)
        )
        comment = result.scalar_one_or_none()
        if comment is None:
            raise NotFoundException("Comment not found")
        return comment

    async def list_for_template(self, template_id: UUID, viewer: Optional[User]) -> List[Comment]:
        await self._visible_template(template_id, viewer)
        result = await self.session.execute(
            select(Comment)
            .where(Comment.template_id == template_id)
            .options(selectinload(Comment.user))
            .order_by(Comment.created_at.asc(), Comment.id)
        )
        return list(result.scalars().all())

    async def create(self, author: User, data: CommentCreateRequest) -> Comment:
        await self._visible_template(data.template_id, author)
        comment = Comment(template_id=data.template_id, user_id=author.id, content=data.content)
        self.session.add(comment)
        await self.session.commit()
        logger.info("comment.create id=%s template=%s author=%s", comment.id, data.template_id, author.id)
        return await self._loaded(comment.id)

    async def update(self, comment_id: UUID, actor: User, data: CommentUpdateRequest) -> Comment:
        comment = await self.session.get(Comment, comment_id)
        if comment is None:
            raise NotFoundException("Comment not found")
        if comment.user_id != actor.id:
            raise ForbiddenException("Only the author can edit this comment")
        try:
            await optimistic_update(self.session, Comment, comment_id, data.version, {"content": data.content})
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        logger.info("comment.update id=%s actor=%s", comment_id, actor.id)
        return await self._loaded(comment_id)

    async def delete(self, comment_id: UUID, actor: User, version: int) -> None:
        comment = await self.session.get(Comment, comment_id)
        if comment is None:
            raise NotFoundException("Comment not found")
        if comment.user_id != actor.id and not is_admin(actor):
            template = await self.session.get(Template, comment.template_id)
            if template is None or template.user_id != actor.id:
                raise ForbiddenException("Not authorized to delete this comment")
        try:
            await optimistic_delete(self.session, Comment, comment_id, version)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        logger.info("comment.delete id=%s actor=%s", comment_id, actor.id)
