from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from readyforms.schemas.common import TrimmedStr, VersionedRequest


class TopicBrief(BaseModel):
    id: UUID
    name: str

    model_config = ConfigDict(from_attributes=True)


class Topic(TopicBrief):
    description: str
    version: int
    created_at: datetime
    updated_at: datetime


class TopicCreateRequest(BaseModel):
    name: TrimmedStr = Field(..., min_length=1, max_length=255)
    description: str = Field(default="", max_length=5000)


class TopicUpdateRequest(VersionedRequest):
    name: TrimmedStr = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=5000)


class TopicsList(BaseModel):
    items: List[Topic]
