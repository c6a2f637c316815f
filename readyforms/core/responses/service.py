import logging
from collections import Counter
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from readyforms.core.access import can_view_template, is_admin, is_owner_or_admin
from readyforms.core.locking import optimistic_delete, optimistic_update
from readyforms.core.questions import ANSWER_ATTRS, answer_attr, enabled_slots, iter_slots, slot_key
from readyforms.core.responses.scoring import score_answers
from readyforms.db.models.form_response import FormResponse
from readyforms.db.models.template import Template
from readyforms.db.models.user import User
from readyforms.schemas.response import (
    AggregateData,
    FormResponseCreateRequest,
    FormResponseUpdateRequest,
    StringAnswerCount,
)
from readyforms.utils.exceptions import BadRequestException, ForbiddenException, NotFoundException
from readyforms.utils.metrics import FORM_RESPONSES_TOTAL
from readyforms.utils.observability import log_duration

logger = logging.getLogger(__name__)

TOP_STRING_ANSWERS = 5


def _response_options():
    return (selectinload(FormResponse.user), selectinload(FormResponse.template))


def _disabled_answers(template: Template, answers: dict) -> list[str]:
    enabled = {answer_attr(k, n) for k, n in enabled_slots(template)}
    return sorted(k for k, v in answers.items() if v is not None and k not in enabled)


class FormResponseService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _template(self, template_id: UUID) -> Template:
        template = await self.session.get(Template, template_id)
        if template is None:
            raise NotFoundException("Template not found")
        return template

    async def _loaded(self, response_id: UUID) -> FormResponse:
        result = await self.session.execute(
            select(FormResponse)
            .where(FormResponse.id == response_id)
            .options(*_response_options())
            .execution_options(populate_existing=True)
        )
        response = result.scalar_one_or_none()
        if response is None:
            raise NotFoundException("Response not found")
        return response

    async def _list(self, *conditions) -> List[FormResponse]:
        result = await self.session.execute(
            select(FormResponse)
            .where(*conditions)
            .options(*_response_options())
            .order_by(FormResponse.created_at.desc(), FormResponse.id)
        )
        return list(result.scalars().all())

    async def create(self, user: User, data: FormResponseCreateRequest) -> FormResponse:
        template = await self._template(data.template_id)
        if not can_view_template(template, user):
            raise ForbiddenException("You don't have access to this template")

        answers = data.model_dump(include=set(ANSWER_ATTRS))
        disabled = _disabled_answers(template, answers)
        if disabled:
            raise BadRequestException("Answers given for disabled questions", details={"fields": disabled})

        quiz = score_answers(template, answers)
        response = FormResponse(
            template_id=template.id,
            user_id=user.id,
            score=quiz.score if quiz else None,
            total_possible_points=quiz.total_possible_points if quiz else None,
            **answers,
        )
        self.session.add(response)
        await self.session.commit()

        FORM_RESPONSES_TOTAL.labels(quiz=str(bool(template.is_quiz)).lower()).inc()
        logger.info("response.create id=%s template=%s user=%s score=%s", response.id, template.id, user.id, response.score)
        return await self._loaded(response.id)

    async def get(self, response_id: UUID, viewer: User) -> FormResponse:
        response = await self._loaded(response_id)
        if response.user_id != viewer.id and not is_owner_or_admin(viewer, response.template.user_id):
            raise ForbiddenException("Not authorized to view this response")
        return response

    async def list_for_user(self, user_id: UUID, viewer: User) -> List[FormResponse]:
        if user_id != viewer.id and not is_admin(viewer):
            raise ForbiddenException("Not authorized to view these responses")
        return await self._list(FormResponse.user_id == user_id)

    async def list_for_template(self, template_id: UUID, viewer: User) -> List[FormResponse]:
        template = await self._template(template_id)
        if not is_owner_or_admin(viewer, template.user_id):
            raise ForbiddenException("Not authorized to view responses for this template")
        return await self._list(FormResponse.template_id == template_id)

    async def list_all(self, *, limit: int = 100, offset: int = 0) -> List[FormResponse]:
        result = await self.session.execute(
            select(FormResponse)
            .options(*_response_options())
            .order_by(FormResponse.created_at.desc(), FormResponse.id)
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def update(self, response_id: UUID, actor: User, data: FormResponseUpdateRequest) -> FormResponse:
        response = await self.session.get(FormResponse, response_id)
        if response is None:
            raise NotFoundException("Response not found")
        if response.user_id != actor.id:
            raise ForbiddenException("Only the submitter can edit this response")

        template = await self._template(response.template_id)
        patch = data.model_dump(include=set(ANSWER_ATTRS), exclude_unset=True)
        disabled = _disabled_answers(template, patch)
        if disabled:
            raise BadRequestException("Answers given for disabled questions", details={"fields": disabled})

        merged = {attr: patch.get(attr, getattr(response, attr)) for attr in ANSWER_ATTRS}
        quiz = score_answers(template, merged)
        if quiz is not None:
            patch["score"] = quiz.score
            patch["total_possible_points"] = quiz.total_possible_points

        try:
            await optimistic_update(self.session, FormResponse, response_id, data.version, patch)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        logger.info("response.update id=%s actor=%s", response_id, actor.id)
        return await self._loaded(response_id)

    async def mark_score_viewed(self, response_id: UUID, actor: User, version: int) -> FormResponse:
        response = await self.session.get(FormResponse, response_id)
        if response is None:
            raise NotFoundException("Response not found")
        if response.user_id != actor.id:
            raise ForbiddenException("Only the submitter can view this score")
        try:
            await optimistic_update(self.session, FormResponse, response_id, version, {"score_viewed": True})
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return await self._loaded(response_id)

    async def delete(self, response_id: UUID, actor: User, version: int) -> None:
        response = await self.session.get(FormResponse, response_id)
        if response is None:
            raise NotFoundException("Response not found")
        if response.user_id != actor.id:
            template = await self._template(response.template_id)
            if not is_owner_or_admin(actor, template.user_id):
                raise ForbiddenException("Not authorized to delete this response")
        try:
            await optimistic_delete(self.session, FormResponse, response_id, version)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        logger.info("response.delete id=%s actor=%s", response_id, actor.id)

    async def aggregate(self, template_id: UUID, viewer: Optional[User]) -> AggregateData:
        template = await self._template(template_id)
        if not can_view_template(template, viewer):
            raise ForbiddenException("You don't have access to this template")

        with log_duration(logger, "responses.aggregate", template=template_id):
            result = await self.session.execute(select(FormResponse).where(FormResponse.template_id == template_id))
            responses = list(result.scalars().all())

        checkbox_stats: dict[str, int] = {}
        int_stats: dict[str, Optional[float]] = {}
        string_stats: dict[str, list[StringAnswerCount]] = {}
        for kind, n in iter_slots():
            key = slot_key(kind, n)
            values = [getattr(r, answer_attr(kind, n)) for r in responses]
            values = [v for v in values if v is not None]
            if kind == "checkbox":
                checkbox_stats[key] = sum(1 for v in values if v)
            elif kind == "int":
                int_stats[key] = (sum(values) / len(values)) if values else None
            else:
                counts = Counter(str(v).strip() for v in values if str(v).strip())
                string_stats[key] = [
                    StringAnswerCount(answer=answer, count=count)
                    for answer, count in counts.most_common(TOP_STRING_ANSWERS)
                ]

        avg_score = None
        avg_total = None
        if template.is_quiz:
            scored = [r for r in responses if r.score is not None]
            if scored:
                avg_score = sum(r.score for r in scored) / len(scored)
                avg_total = sum(r.total_possible_points or 0 for r in scored) / len(scored)

        return AggregateData(
            template_id=template_id,
            total_responses=len(responses),
            checkbox_stats=checkbox_stats,
            int_stats=int_stats,
            string_stats=string_stats,
            avg_score=avg_score,
            avg_total_points=avg_total,
        )
