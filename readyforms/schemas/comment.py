from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from readyforms.schemas.common import TrimmedStr, VersionedRequest
from readyforms.schemas.user import UserBrief


class Comment(BaseModel):
    id: UUID
    template_id: UUID
    user_id: UUID
    content: str
    version: int
    created_at: datetime
    updated_at: datetime
    user: Optional[UserBrief] = None

    model_config = ConfigDict(from_attributes=True)


class CommentCreateRequest(BaseModel):
    template_id: UUID
    content: TrimmedStr = Field(..., min_length=1, max_length=5000)


class CommentUpdateRequest(VersionedRequest):
    content: TrimmedStr = Field(..., min_length=1, max_length=5000)


class CommentsList(BaseModel):
    items: List[Comment]
