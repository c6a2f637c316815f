import uuid
from sqlalchemy import Boolean, DateTime, ForeignKey, JSON, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from readyforms.db.base import Base, created_at_column, updated_at_column, version_column

class Template(Base):
    __tablename__ = "templates"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    topic_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("topics.id", ondelete="RESTRICT"), nullable=False, index=True)
    is_quiz: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    show_score_immediately: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    # {"custom_string1": {"answer": "Paris", "points": 2}, ...}
    scoring_criteria: Mapped[dict | None] = mapped_column(JSON, default=dict)
    # User ids or emails allowed to open a private template.
    allowed_users: Mapped[list | None] = mapped_column(JSON, default=list)
    question_order: Mapped[list | None] = mapped_column(JSON, default=list)

    custom_string1_state: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    custom_string1_question: Mapped[str | None] = mapped_column(String(500))
    custom_string2_state: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    custom_string2_question: Mapped[str | None] = mapped_column(String(500))
    custom_string3_state: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    custom_string3_question: Mapped[str | None] = mapped_column(String(500))
    custom_string4_state: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    custom_string4_question: Mapped[str | None] = mapped_column(String(500))
    custom_text1_state: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    custom_text1_question: Mapped[str | None] = mapped_column(String(500))
    custom_text2_state: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    custom_text2_question: Mapped[str | None] = mapped_column(String(500))
    custom_text3_state: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    custom_text3_question: Mapped[str | None] = mapped_column(String(500))
    custom_text4_state: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    custom_text4_question: Mapped[str | None] = mapped_column(String(500))
    custom_int1_state: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    custom_int1_question: Mapped[str | None] = mapped_column(String(500))
    custom_int2_state: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    custom_int2_question: Mapped[str | None] = mapped_column(String(500))
    custom_int3_state: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    custom_int3_question: Mapped[str | None] = mapped_column(String(500))
    custom_int4_state: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    custom_int4_question: Mapped[str | None] = mapped_column(String(500))
    custom_checkbox1_state: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    custom_checkbox1_question: Mapped[str | None] = mapped_column(String(500))
    custom_checkbox2_state: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    custom_checkbox2_question: Mapped[str | None] = mapped_column(String(500))
    custom_checkbox3_state: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    custom_checkbox3_question: Mapped[str | None] = mapped_column(String(500))
    custom_checkbox4_state: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    custom_checkbox4_question: Mapped[str | None] = mapped_column(String(500))

    version: Mapped[int] = version_column()
    created_at: Mapped[DateTime] = created_at_column()
    updated_at: Mapped[DateTime] = updated_at_column()

    owner = relationship("User", foreign_keys=[user_id])
    topic = relationship("Topic")
    tags = relationship("Tag", secondary="template_tags", order_by="Tag.name", passive_deletes=True)

    __mapper_args__ = {"version_id_col": version}
