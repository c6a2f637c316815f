from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from readyforms.api import deps
from readyforms.core.likes.service import LikeService
from readyforms.db.models.user import User
from readyforms.schemas.like import LikeCount, LikeStatus, LikeToggleResponse, TemplateLikes

router = APIRouter()


@router.post(
    "/template/{template_id}",
    response_model=LikeToggleResponse,
    responses={201: {"model": LikeToggleResponse}},
)
async def toggle_like(
    template_id: UUID,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
):
    service = LikeService(db)
    liked, count = await service.toggle(template_id, current_user)
    body = LikeToggleResponse(
        message="Template liked" if liked else "Template unliked",
        liked=liked,
        count=count,
    )
    return JSONResponse(status_code=201 if liked else 200, content=body.model_dump())


@router.get("/template/{template_id}", response_model=TemplateLikes)
async def template_likes(
    template_id: UUID,
    current_user: Optional[User] = Depends(deps.get_optional_user),
    db: AsyncSession = Depends(deps.get_db),
):
    service = LikeService(db)
    items = await service.list_for_template(template_id, current_user)
    return TemplateLikes(template_id=template_id, likes_count=len(items), items=items)


@router.get("/count/{template_id}", response_model=LikeCount)
async def like_count(
    template_id: UUID,
    current_user: Optional[User] = Depends(deps.get_optional_user),
    db: AsyncSession = Depends(deps.get_db),
):
    service = LikeService(db)
    await service.visible_template(template_id, current_user)
    return LikeCount(count=await service.count(template_id))


@router.get("/check/{template_id}", response_model=LikeStatus)
async def check_like(
    template_id: UUID,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
):
    service = LikeService(db)
    return LikeStatus(liked=await service.check(template_id, current_user))
