from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from readyforms.api import deps
from readyforms.core.tags.service import TagService
from readyforms.db.models.user import User
from readyforms.schemas.common import MessageResponse, VersionedRequest
from readyforms.schemas.tag import Tag, TagCreateRequest, TagsList, TagUpdateRequest

router = APIRouter()


@router.get("", response_model=TagsList)
async def list_tags(db: AsyncSession = Depends(deps.get_db)):
    service = TagService(db)
    return TagsList(items=await service.list())


@router.get("/{id}", response_model=Tag)
async def get_tag(id: UUID, db: AsyncSession = Depends(deps.get_db)):
    service = TagService(db)
    return await service.get(id)


@router.post("", response_model=Tag, status_code=status.HTTP_201_CREATED)
async def create_tag(
    data: TagCreateRequest,
    admin: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
):
    service = TagService(db)
    return await service.create(admin, data)


@router.put("/{id}", response_model=Tag)
async def update_tag(
    id: UUID,
    data: TagUpdateRequest,
    admin: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
):
    service = TagService(db)
    return await service.update(id, admin, data)


@router.delete("/{id}", response_model=MessageResponse)
async def delete_tag(
    id: UUID,
    data: VersionedRequest,
    admin: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
):
    service = TagService(db)
    await service.delete(id, admin, data.version)
    return MessageResponse(message="Tag deleted")
