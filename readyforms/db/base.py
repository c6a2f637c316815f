from sqlalchemy import DateTime, Integer, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


def version_column() -> Mapped[int]:
    """Row version used as the optimistic-lock token.

    Each model passes the column to ``__mapper_args__["version_id_col"]`` so
    the ORM issues ``UPDATE``/``DELETE`` statements matching both primary key
    and version and bumps the counter in the same statement. Inserts start
    at 1.
    """
    return mapped_column(Integer, nullable=False, server_default="1")


def created_at_column() -> Mapped[DateTime]:
    return mapped_column(DateTime(timezone=True), server_default=func.now(), index=True)


def updated_at_column() -> Mapped[DateTime]:
    return mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
