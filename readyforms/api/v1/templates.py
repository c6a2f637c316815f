from typing import Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from readyforms.api import deps
from readyforms.core.templates.service import TemplateService
from readyforms.db.models.user import User
from readyforms.schemas.common import MessageResponse, VersionedRequest
from readyforms.schemas.template import (
    TemplateCreateRequest,
    TemplateDetail,
    TemplatesList,
    TemplateUpdateRequest,
)

router = APIRouter()

SortOption = Literal["newest", "oldest", "popular"]


@router.get("", response_model=TemplatesList)
async def list_templates(
    query: Optional[str] = Query(None, max_length=200),
    topic_id: Optional[UUID] = Query(None),
    tag: Optional[str] = Query(None, max_length=64),
    sort: SortOption = Query("newest"),
    pagination: deps.Pagination = Depends(deps.get_pagination),
    db: AsyncSession = Depends(deps.get_db),
):
    service = TemplateService(db)
    items, total = await service.list_templates(
        query=query, topic_id=topic_id, tag=tag, sort=sort, page=pagination.page, limit=pagination.limit
    )
    return TemplatesList(items=await service.to_details(items), total=total, page=pagination.page, limit=pagination.limit)


@router.get("/search", response_model=TemplatesList)
async def search_templates(
    query: str = Query(..., min_length=1, max_length=200),
    pagination: deps.Pagination = Depends(deps.get_pagination),
    db: AsyncSession = Depends(deps.get_db),
):
    service = TemplateService(db)
    items, total = await service.list_templates(query=query, page=pagination.page, limit=pagination.limit)
    return TemplatesList(items=await service.to_details(items), total=total, page=pagination.page, limit=pagination.limit)


@router.get("/mine", response_model=TemplatesList)
async def my_templates(
    pagination: deps.Pagination = Depends(deps.get_pagination),
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
):
    service = TemplateService(db)
    items, total = await service.list_templates(
        public_only=False, owner_id=current_user.id, page=pagination.page, limit=pagination.limit
    )
    return TemplatesList(items=await service.to_details(items), total=total, page=pagination.page, limit=pagination.limit)


@router.get("/{id}", response_model=TemplateDetail)
async def get_template(
    id: UUID,
    current_user: Optional[User] = Depends(deps.get_optional_user),
    db: AsyncSession = Depends(deps.get_db),
):
    service = TemplateService(db)
    return await service.get_for_viewer(id, current_user)


@router.post("", response_model=TemplateDetail, status_code=status.HTTP_201_CREATED)
async def create_template(
    data: TemplateCreateRequest,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
):
    service = TemplateService(db)
    template = await service.create(current_user, data)
    return (await service.to_details([template]))[0]


@router.put("/{id}", response_model=TemplateDetail)
async def update_template(
    id: UUID,
    data: TemplateUpdateRequest,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
):
    service = TemplateService(db)
    template = await service.update(id, current_user, data)
    return (await service.to_details([template]))[0]


@router.delete("/{id}", response_model=MessageResponse)
async def delete_template(
    id: UUID,
    data: VersionedRequest,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
):
    service = TemplateService(db)
    await service.delete(id, current_user, data.version)
    return MessageResponse(message="Template deleted")
