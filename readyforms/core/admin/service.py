import logging
from datetime import datetime, timedelta, timezone
from typing import List
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from readyforms.core.locking import optimistic_update
from readyforms.db.models.comment import Comment
from readyforms.db.models.form_response import FormResponse
from readyforms.db.models.like import Like
from readyforms.db.models.tag import Tag
from readyforms.db.models.template import Template
from readyforms.db.models.topic import Topic
from readyforms.db.models.user import User
from readyforms.schemas.admin import ActivityItem, AdminStats
from readyforms.schemas.user import UsersCount
from readyforms.utils.exceptions import BadRequestException, NotFoundException

logger = logging.getLogger(__name__)

ACTIVE_USER_WINDOW = timedelta(days=30)


class AdminService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _count(self, stmt) -> int:
        return int((await self.session.execute(stmt)).scalar_one() or 0)

    async def list_users(self, *, page: int = 1, limit: int = 20) -> tuple[List[User], int]:
        total = await self._count(select(func.count(User.id)))
        result = await self.session.execute(
            select(User).order_by(User.created_at.desc(), User.id).offset((page - 1) * limit).limit(limit)
        )
        return list(result.scalars().all()), total

    async def get_user(self, user_id: UUID) -> User:
        user = await self.session.get(User, user_id)
        if user is None:
            raise NotFoundException("User not found")
        return user

    async def _toggle(self, user_id: UUID, actor: User, version: int, field: str) -> User:
        target = await self.get_user(user_id)
        if target.id == actor.id:
            raise BadRequestException(f"Cannot change {field} on your own account")
        new_value = not bool(getattr(target, field))
        try:
            updated = await optimistic_update(self.session, User, user_id, version, {field: new_value})
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        logger.info("admin.user_%s target=%s actor=%s value=%s", field, user_id, actor.id, new_value)
        return updated

    async def toggle_block(self, user_id: UUID, actor: User, version: int) -> User:
        return await self._toggle(user_id, actor, version, "blocked")

    async def toggle_admin(self, user_id: UUID, actor: User, version: int) -> User:
        return await self._toggle(user_id, actor, version, "is_admin")

    async def users_count(self) -> UsersCount:
        return UsersCount(
            total=await self._count(select(func.count(User.id))),
            admins=await self._count(select(func.count(User.id)).where(User.is_admin.is_(True))),
            blocked=await self._count(select(func.count(User.id)).where(User.blocked.is_(True))),
        )

    async def stats(self) -> AdminStats:
        since = datetime.now(timezone.utc) - ACTIVE_USER_WINDOW
        users = await self.users_count()
        return AdminStats(
            users=users.total,
            admins=users.admins,
            blocked_users=users.blocked,
            templates=await self._count(select(func.count(Template.id))),
            responses=await self._count(select(func.count(FormResponse.id))),
            likes=await self._count(select(func.count(Like.id))),
            comments=await self._count(select(func.count(Comment.id))),
            topics=await self._count(select(func.count(Topic.id))),
            tags=await self._count(select(func.count(Tag.id))),
            active_users=await self._count(select(func.count(User.id)).where(User.last_login_at >= since)),
        )

    async def system_activity(self, *, limit: int = 20) -> List[ActivityItem]:
        """Most recent template creations, submissions and sign-ups, newest first."""
        templates = await self.session.execute(
            select(Template).options(selectinload(Template.owner)).order_by(Template.created_at.desc()).limit(limit)
        )
        responses = await self.session.execute(
            select(FormResponse)
            .options(selectinload(FormResponse.user), selectinload(FormResponse.template))
            .order_by(FormResponse.created_at.desc())
            .limit(limit)
        )
        users = await self.session.execute(select(User).order_by(User.created_at.desc()).limit(limit))

        items: list[ActivityItem] = []
        for t in templates.scalars().all():
            items.append(
                ActivityItem(
                    id=t.id,
                    type="template",
                    action="created",
                    title=t.title,
                    user=t.owner.name if t.owner else "",
                    timestamp=t.created_at,
                )
            )
        for r in responses.scalars().all():
            items.append(
                ActivityItem(
                    id=r.id,
                    type="response",
                    action="submitted",
                    title=r.template.title if r.template else "",
                    user=r.user.name if r.user else "",
                    timestamp=r.created_at,
                )
            )
        for u in users.scalars().all():
            items.append(
                ActivityItem(id=u.id, type="user", action="registered", title=u.email, user=u.name, timestamp=u.created_at)
            )

        items.sort(key=lambda item: item.timestamp, reverse=True)
        return items[:limit]
