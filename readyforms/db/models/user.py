import uuid
from sqlalchemy import Boolean, DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from readyforms.db.base import Base, created_at_column, updated_at_column, version_column

class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    blocked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    language: Mapped[str] = mapped_column(String(16), nullable=False, default="en")
    theme: Mapped[str] = mapped_column(String(16), nullable=False, default="light")
    last_login_at: Mapped[DateTime | None] = mapped_column(DateTime(timezone=True))
    version: Mapped[int] = version_column()
    created_at: Mapped[DateTime] = created_at_column()
    updated_at: Mapped[DateTime] = updated_at_column()

    __mapper_args__ = {"version_id_col": version}
