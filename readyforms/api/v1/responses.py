from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from readyforms.api import deps
from readyforms.core.responses.service import FormResponseService
from readyforms.db.models.user import User
from readyforms.schemas.common import MessageResponse, VersionedRequest
from readyforms.schemas.response import (
    AggregateData,
    FormResponseCreateRequest,
    FormResponseDetail,
    FormResponsesList,
    FormResponseUpdateRequest,
)

router = APIRouter()


@router.post("", response_model=FormResponseDetail, status_code=status.HTTP_201_CREATED)
async def submit_response(
    data: FormResponseCreateRequest,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
):
    service = FormResponseService(db)
    return await service.create(current_user, data)


@router.get("/user", response_model=FormResponsesList)
async def my_responses(
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
):
    service = FormResponseService(db)
    return FormResponsesList(items=await service.list_for_user(current_user.id, current_user))


@router.get("/user/{user_id}", response_model=FormResponsesList)
async def user_responses(
    user_id: UUID,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
):
    service = FormResponseService(db)
    return FormResponsesList(items=await service.list_for_user(user_id, current_user))


@router.get("/template/{template_id}", response_model=FormResponsesList)
async def template_responses(
    template_id: UUID,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
):
    service = FormResponseService(db)
    return FormResponsesList(items=await service.list_for_template(template_id, current_user))


@router.get("/template/{template_id}/aggregate", response_model=AggregateData)
async def template_aggregate(
    template_id: UUID,
    current_user: Optional[User] = Depends(deps.get_optional_user),
    db: AsyncSession = Depends(deps.get_db),
):
    service = FormResponseService(db)
    return await service.aggregate(template_id, current_user)


@router.get("/{id}", response_model=FormResponseDetail)
async def get_response(
    id: UUID,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
):
    service = FormResponseService(db)
    return await service.get(id, current_user)


@router.put("/{id}", response_model=FormResponseDetail)
async def update_response(
    id: UUID,
    data: FormResponseUpdateRequest,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
):
    service = FormResponseService(db)
    return await service.update(id, current_user, data)


@router.post("/{id}/score-viewed", response_model=FormResponseDetail)
async def mark_score_viewed(
    id: UUID,
    data: VersionedRequest,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
):
    service = FormResponseService(db)
    return await service.mark_score_viewed(id, current_user, data.version)


@router.delete("/{id}", response_model=MessageResponse)
async def delete_response(
    id: UUID,
    data: VersionedRequest,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
):
    service = FormResponseService(db)
    await service.delete(id, current_user, data.version)
    return MessageResponse(message="Response deleted")
