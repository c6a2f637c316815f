from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from readyforms.schemas.common import TrimmedStr, VersionedRequest

TAG_NAME_PATTERN = r"^[\w][\w .+#-]{0,63}$"


class TagBrief(BaseModel):
    id: UUID
    name: str

    model_config = ConfigDict(from_attributes=True)


class Tag(TagBrief):
    description: Optional[str] = None
    version: int
    created_at: datetime
    updated_at: datetime


class TagCreateRequest(BaseModel):
    name: TrimmedStr = Field(..., pattern=TAG_NAME_PATTERN)
    description: Optional[str] = Field(default=None, max_length=2000)


class TagUpdateRequest(VersionedRequest):
    name: TrimmedStr = Field(..., pattern=TAG_NAME_PATTERN)
    description: Optional[str] = Field(default=None, max_length=2000)


class TagsList(BaseModel):
    items: List[Tag]
