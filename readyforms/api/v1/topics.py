from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from readyforms.api import deps
from readyforms.core.topics.service import TopicService
from readyforms.db.models.user import User
from readyforms.schemas.common import MessageResponse, VersionedRequest
from readyforms.schemas.topic import Topic, TopicCreateRequest, TopicsList, TopicUpdateRequest

router = APIRouter()


@router.get("", response_model=TopicsList)
async def list_topics(db: AsyncSession = Depends(deps.get_db)):
    service = TopicService(db)
    return TopicsList(items=await service.list())


@router.get("/{id}", response_model=Topic)
async def get_topic(id: UUID, db: AsyncSession = Depends(deps.get_db)):
    service = TopicService(db)
    return await service.get(id)


@router.post("", response_model=Topic, status_code=status.HTTP_201_CREATED)
async def create_topic(
    data: TopicCreateRequest,
    admin: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
):
    service = TopicService(db)
    return await service.create(admin, data)


@router.put("/{id}", response_model=Topic)
async def update_topic(
    id: UUID,
    data: TopicUpdateRequest,
    admin: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
):
    service = TopicService(db)
    return await service.update(id, admin, data)


@router.delete("/{id}", response_model=MessageResponse)
async def delete_topic(
    id: UUID,
    data: VersionedRequest,
    admin: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
):
    service = TopicService(db)
    await service.delete(id, admin, data.version)
    return MessageResponse(message="Topic deleted")
