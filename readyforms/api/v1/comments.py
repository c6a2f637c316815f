from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from readyforms.api import deps
from readyforms.core.comments.service import CommentService
from readyforms.db.models.user import User
from readyforms.schemas.comment import Comment, CommentCreateRequest, CommentsList, CommentUpdateRequest
from readyforms.schemas.common import MessageResponse, VersionedRequest

router = APIRouter()


@router.get("/template/{template_id}", response_model=CommentsList)
async def list_comments(
    template_id: UUID,
    current_user: Optional[User] = Depends(deps.get_optional_user),
    db: AsyncSession = Depends(deps.get_db),
):
    service = CommentService(db)
    return CommentsList(items=await service.list_for_template(template_id, current_user))


@router.post("", response_model=Comment, status_code=status.HTTP_201_CREATED)
async def create_comment(
    data: CommentCreateRequest,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
):
    service = CommentService(db)
    return await service.create(current_user, data)


@router.put("/{id}", response_model=Comment)
async def update_comment(
    id: UUID,
    data: CommentUpdateRequest,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
):
    service = CommentService(db)
    return await service.update(id, current_user, data)


@router.delete("/{id}", response_model=MessageResponse)
async def delete_comment(
    id: UUID,
    data: VersionedRequest,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
):
    service = CommentService(db)
    await service.delete(id, current_user, data.version)
    return MessageResponse(message="Comment deleted")
