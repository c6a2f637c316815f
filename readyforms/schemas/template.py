import re
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict

from readyforms.core.questions import ALL_SLOT_KEYS, parse_slot_key
from readyforms.schemas.common import TrimmedStr, VersionedRequest
from readyforms.schemas.tag import TagBrief, TAG_NAME_PATTERN
from readyforms.schemas.topic import TopicBrief
from readyforms.schemas.user import UserBrief


class ScoringRule(BaseModel):
    answer: Any
    points: int = Field(default=1, ge=0, le=1000)


class QuestionSlots(BaseModel):
    """The sixteen question slots: an enabled flag and a prompt per slot."""

    custom_string1_state: Optional[bool] = None
    custom_string1_question: Optional[str] = Field(default=None, max_length=500)
    custom_string2_state: Optional[bool] = None
    custom_string2_question: Optional[str] = Field(default=None, max_length=500)
    custom_string3_state: Optional[bool] = None
    custom_string3_question: Optional[str] = Field(default=None, max_length=500)
    custom_string4_state: Optional[bool] = None
    custom_string4_question: Optional[str] = Field(default=None, max_length=500)
    custom_text1_state: Optional[bool] = None
    custom_text1_question: Optional[str] = Field(default=None, max_length=500)
    custom_text2_state: Optional[bool] = None
    custom_text2_question: Optional[str] = Field(default=None, max_length=500)
    custom_text3_state: Optional[bool] = None
    custom_text3_question: Optional[str] = Field(default=None, max_length=500)
    custom_text4_state: Optional[bool] = None
    custom_text4_question: Optional[str] = Field(default=None, max_length=500)
    custom_int1_state: Optional[bool] = None
    custom_int1_question: Optional[str] = Field(default=None, max_length=500)
    custom_int2_state: Optional[bool] = None
    custom_int2_question: Optional[str] = Field(default=None, max_length=500)
    custom_int3_state: Optional[bool] = None
    custom_int3_question: Optional[str] = Field(default=None, max_length=500)
    custom_int4_state: Optional[bool] = None
    custom_int4_question: Optional[str] = Field(default=None, max_length=500)
    custom_checkbox1_state: Optional[bool] = None
    custom_checkbox1_question: Optional[str] = Field(default=None, max_length=500)
    custom_checkbox2_state: Optional[bool] = None
    custom_checkbox2_question: Optional[str] = Field(default=None, max_length=500)
    custom_checkbox3_state: Optional[bool] = None
    custom_checkbox3_question: Optional[str] = Field(default=None, max_length=500)
    custom_checkbox4_state: Optional[bool] = None
    custom_checkbox4_question: Optional[str] = Field(default=None, max_length=500)


class TemplateFields(QuestionSlots):
    description: Optional[str] = Field(default=None, max_length=10000)
    is_public: Optional[bool] = None
    is_quiz: Optional[bool] = None
    show_score_immediately: Optional[bool] = None
    scoring_criteria: Optional[Dict[str, ScoringRule]] = None
    allowed_users: Optional[List[str]] = None
    question_order: Optional[List[str]] = None
    tags: Optional[List[str]] = Field(default=None, max_length=20)

    @field_validator("scoring_criteria")
    @classmethod
    def _known_scoring_keys(cls, value):
        if value is None:
            return value
        unknown = [k for k in value if parse_slot_key(k) is None]
        if unknown:
            raise ValueError(f"Unknown question keys in scoring_criteria: {', '.join(sorted(unknown))}")
        return value

    @field_validator("question_order")
    @classmethod
    def _known_order_keys(cls, value):
        if value is None:
            return value
        unknown = [k for k in value if k not in ALL_SLOT_KEYS]
        if unknown:
            raise ValueError(f"Unknown question keys in question_order: {', '.join(sorted(unknown))}")
        if len(set(value)) != len(value):
            raise ValueError("question_order must not repeat a question")
        return value

    @field_validator("tags")
    @classmethod
    def _tag_names(cls, value):
        if value is None:
            return value
        out: list[str] = []
        for raw in value:
            name = (raw or "").strip()
            if not re.fullmatch(TAG_NAME_PATTERN, name):
                raise ValueError(f"Invalid tag name: {raw!r}")
            if name.lower() not in {n.lower() for n in out}:
                out.append(name)
        return out


class TemplateCreateRequest(TemplateFields):
    title: TrimmedStr = Field(..., min_length=1, max_length=255)
    topic_id: UUID


class TemplateUpdateRequest(VersionedRequest, TemplateFields):
    title: Optional[TrimmedStr] = Field(default=None, min_length=1, max_length=255)
    topic_id: Optional[UUID] = None


class Template(BaseModel):
    id: UUID
    title: str
    description: str
    is_public: bool
    user_id: UUID
    topic_id: UUID
    is_quiz: bool
    show_score_immediately: bool
    scoring_criteria: Optional[Dict[str, Any]] = None
    allowed_users: Optional[List[str]] = None
    question_order: Optional[List[str]] = None

    custom_string1_state: bool
    custom_string1_question: Optional[str] = None
    custom_string2_state: bool
    custom_string2_question: Optional[str] = None
    custom_string3_state: bool
    custom_string3_question: Optional[str] = None
    custom_string4_state: bool
    custom_string4_question: Optional[str] = None
    custom_text1_state: bool
    custom_text1_question: Optional[str] = None
    custom_text2_state: bool
    custom_text2_question: Optional[str] = None
    custom_text3_state: bool
    custom_text3_question: Optional[str] = None
    custom_text4_state: bool
    custom_text4_question: Optional[str] = None
    custom_int1_state: bool
    custom_int1_question: Optional[str] = None
    custom_int2_state: bool
    custom_int2_question: Optional[str] = None
    custom_int3_state: bool
    custom_int3_question: Optional[str] = None
    custom_int4_state: bool
    custom_int4_question: Optional[str] = None
    custom_checkbox1_state: bool
    custom_checkbox1_question: Optional[str] = None
    custom_checkbox2_state: bool
    custom_checkbox2_question: Optional[str] = None
    custom_checkbox3_state: bool
    custom_checkbox3_question: Optional[str] = None
    custom_checkbox4_state: bool
    custom_checkbox4_question: Optional[str] = None

    version: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TemplateDetail(Template):
    owner: Optional[UserBrief] = None
    topic: Optional[TopicBrief] = None
    tags: List[TagBrief] = Field(default_factory=list)
    likes_count: int = 0
    responses_count: int = 0


class TemplateSummary(BaseModel):
    id: UUID
    title: str
    description: str

    model_config = ConfigDict(from_attributes=True)


class TemplatesList(BaseModel):
    items: List[TemplateDetail]
    total: int
    page: int
    limit: int
