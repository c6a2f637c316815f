from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from readyforms.schemas.common import VersionedRequest
from readyforms.schemas.template import TemplateSummary
from readyforms.schemas.user import UserBrief


class Answers(BaseModel):
    custom_string1_answer: Optional[str] = Field(default=None, max_length=500)
    custom_string2_answer: Optional[str] = Field(default=None, max_length=500)
    custom_string3_answer: Optional[str] = Field(default=None, max_length=500)
    custom_string4_answer: Optional[str] = Field(default=None, max_length=500)
    custom_text1_answer: Optional[str] = Field(default=None, max_length=20000)
    custom_text2_answer: Optional[str] = Field(default=None, max_length=20000)
    custom_text3_answer: Optional[str] = Field(default=None, max_length=20000)
    custom_text4_answer: Optional[str] = Field(default=None, max_length=20000)
    custom_int1_answer: Optional[int] = None
    custom_int2_answer: Optional[int] = None
    custom_int3_answer: Optional[int] = None
    custom_int4_answer: Optional[int] = None
    custom_checkbox1_answer: Optional[bool] = None
    custom_checkbox2_answer: Optional[bool] = None
    custom_checkbox3_answer: Optional[bool] = None
    custom_checkbox4_answer: Optional[bool] = None


class FormResponseCreateRequest(Answers):
    template_id: UUID


class FormResponseUpdateRequest(VersionedRequest, Answers):
    pass


class FormResponse(Answers):
    id: UUID
    template_id: UUID
    user_id: UUID
    score: Optional[int] = None
    total_possible_points: Optional[int] = None
    score_viewed: bool
    version: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FormResponseDetail(FormResponse):
    user: Optional[UserBrief] = None
    template: Optional[TemplateSummary] = None


class FormResponsesList(BaseModel):
    items: List[FormResponseDetail]


class StringAnswerCount(BaseModel):
    answer: str
    count: int


class AggregateData(BaseModel):
    template_id: UUID
    total_responses: int
    checkbox_stats: Dict[str, int]
    int_stats: Dict[str, Optional[float]]
    string_stats: Dict[str, List[StringAnswerCount]]
    avg_score: Optional[float] = None
    avg_total_points: Optional[float] = None
