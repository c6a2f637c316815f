from typing import List

from pydantic import BaseModel

from readyforms.schemas.response import FormResponseDetail
from readyforms.schemas.template import Template


class ResponseCounts(BaseModel):
    submitted: int
    received: int


class SocialCounts(BaseModel):
    likes: int
    comments: int


class DashboardStats(BaseModel):
    templates: int
    responses: ResponseCounts
    social: SocialCounts


class RecentActivity(BaseModel):
    recent_templates: List[Template]
    recent_responses: List[FormResponseDetail]
    recent_submissions: List[FormResponseDetail]
