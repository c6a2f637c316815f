from datetime import datetime
from typing import List
from uuid import UUID

from pydantic import BaseModel
from pydantic.config import ConfigDict


class Like(BaseModel):
    id: UUID
    template_id: UUID
    user_id: UUID
    version: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LikeToggleResponse(BaseModel):
    message: str
    liked: bool
    count: int


class LikeStatus(BaseModel):
    liked: bool


class LikeCount(BaseModel):
    count: int


class TemplateLikes(BaseModel):
    template_id: UUID
    likes_count: int
    items: List[Like]
