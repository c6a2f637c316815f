import uuid
from sqlalchemy import DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from readyforms.db.base import Base, created_at_column, updated_at_column, version_column

class Like(Base):
    __tablename__ = "likes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    template_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("templates.id", ondelete="CASCADE"), nullable=False, index=True)
    version: Mapped[int] = version_column()
    created_at: Mapped[DateTime] = created_at_column()
    updated_at: Mapped[DateTime] = updated_at_column()

    __table_args__ = (
        UniqueConstraint("user_id", "template_id", name="uq_likes_user_template"),
    )

    __mapper_args__ = {"version_id_col": version}
