from datetime import datetime
from typing import List, Literal
from uuid import UUID

from pydantic import BaseModel


class AdminStats(BaseModel):
    users: int
    admins: int
    blocked_users: int
    templates: int
    responses: int
    likes: int
    comments: int
    topics: int
    tags: int
    active_users: int


class ActivityItem(BaseModel):
    id: UUID
    type: Literal["template", "response", "user"]
    action: str
    title: str
    user: str
    timestamp: datetime


class ActivityList(BaseModel):
    items: List[ActivityItem]
