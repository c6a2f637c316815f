import uuid
from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from readyforms.db.base import Base, created_at_column, updated_at_column, version_column

class FormResponse(Base):
    __tablename__ = "form_responses"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    template_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("templates.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    custom_string1_answer: Mapped[str | None] = mapped_column(String(500))
    custom_string2_answer: Mapped[str | None] = mapped_column(String(500))
    custom_string3_answer: Mapped[str | None] = mapped_column(String(500))
    custom_string4_answer: Mapped[str | None] = mapped_column(String(500))
    custom_text1_answer: Mapped[str | None] = mapped_column(Text)
    custom_text2_answer: Mapped[str | None] = mapped_column(Text)
    custom_text3_answer: Mapped[str | None] = mapped_column(Text)
    custom_text4_answer: Mapped[str | None] = mapped_column(Text)
    custom_int1_answer: Mapped[int | None] = mapped_column(Integer)
    custom_int2_answer: Mapped[int | None] = mapped_column(Integer)
    custom_int3_answer: Mapped[int | None] = mapped_column(Integer)
    custom_int4_answer: Mapped[int | None] = mapped_column(Integer)
    custom_checkbox1_answer: Mapped[bool | None] = mapped_column(Boolean)
    custom_checkbox2_answer: Mapped[bool | None] = mapped_column(Boolean)
    custom_checkbox3_answer: Mapped[bool | None] = mapped_column(Boolean)
    custom_checkbox4_answer: Mapped[bool | None] = mapped_column(Boolean)

    score: Mapped[int | None] = mapped_column(Integer)
    total_possible_points: Mapped[int | None] = mapped_column(Integer)
    score_viewed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    version: Mapped[int] = version_column()
    created_at: Mapped[DateTime] = created_at_column()
    updated_at: Mapped[DateTime] = updated_at_column()

    template = relationship("Template")
    user = relationship("User")

    __mapper_args__ = {"version_id_col": version}
