from typing import List
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from readyforms.db.models.comment import Comment
from readyforms.db.models.form_response import FormResponse
from readyforms.db.models.like import Like
from readyforms.db.models.template import Template
from readyforms.schemas.dashboard import DashboardStats, ResponseCounts, SocialCounts

RECENT_LIMIT = 5


class DashboardService:
    """Per-user overview: the caller's templates and the traffic they receive."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _count(self, stmt) -> int:
        return int((await self.session.execute(stmt)).scalar_one() or 0)

    def _owned_ids(self, user_id: UUID):
        return select(Template.id).where(Template.user_id == user_id)

    async def stats(self, user_id: UUID) -> DashboardStats:
        owned = self._owned_ids(user_id)
        return DashboardStats(
            templates=await self._count(select(func.count(Template.id)).where(Template.user_id == user_id)),
            responses=ResponseCounts(
                submitted=await self._count(
                    select(func.count(FormResponse.id)).where(FormResponse.user_id == user_id)
                ),
                received=await self._count(
                    select(func.count(FormResponse.id)).where(FormResponse.template_id.in_(owned))
                ),
            ),
            social=SocialCounts(
                likes=await self._count(select(func.count(Like.id)).where(Like.template_id.in_(owned))),
                comments=await self._count(select(func.count(Comment.id)).where(Comment.template_id.in_(owned))),
            ),
        )

    async def templates(self, user_id: UUID, *, limit: int | None = None) -> List[Template]:
        stmt = (
            select(Template)
            .where(Template.user_id == user_id)
            .options(selectinload(Template.owner), selectinload(Template.topic), selectinload(Template.tags))
            .order_by(Template.created_at.desc(), Template.id)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return list((await self.session.execute(stmt)).scalars().all())

    async def received_responses(self, user_id: UUID, *, limit: int | None = None) -> List[FormResponse]:
        stmt = (
            select(FormResponse)
            .where(FormResponse.template_id.in_(self._owned_ids(user_id)))
            .options(selectinload(FormResponse.user), selectinload(FormResponse.template))
            .order_by(FormResponse.created_at.desc(), FormResponse.id)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return list((await self.session.execute(stmt)).scalars().all())

    async def submitted_responses(self, user_id: UUID, *, limit: int | None = None) -> List[FormResponse]:
        stmt = (
            select(FormResponse)
            .where(FormResponse.user_id == user_id)
            .options(selectinload(FormResponse.user), selectinload(FormResponse.template))
            .order_by(FormResponse.created_at.desc(), FormResponse.id)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return list((await self.session.execute(stmt)).scalars().all())
