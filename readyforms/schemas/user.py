from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from readyforms.schemas.common import VersionedRequest


class UserBrief(BaseModel):
    id: UUID
    name: str

    model_config = ConfigDict(from_attributes=True)


class User(BaseModel):
    id: UUID
    name: str
    email: str
    is_admin: bool
    blocked: bool
    language: str
    theme: str
    last_login_at: Optional[datetime] = None
    version: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UsersList(BaseModel):
    items: List[User]
    total: int


class UsersCount(BaseModel):
    total: int
    admins: int
    blocked: int


class PreferencesUpdateRequest(VersionedRequest):
    language: Optional[str] = Field(default=None, min_length=2, max_length=16)
    theme: Optional[str] = Field(default=None, pattern="^(light|dark|system)$")


class UserActionResponse(BaseModel):
    message: str
    user: User
