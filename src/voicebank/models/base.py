"""Base model with common fields for all database models."""
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def new_id(prefix: str) -> str:
    """Generate a prefixed opaque id, e.g. ``acc_3f2a9c1b7d4e``."""
    return f"{prefix}_{uuid4().hex[:12]}"


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class BaseModel(Base):
    """Abstract base model with common fields.

    Subclasses set ``id_prefix``; ids stay strings so seeded rows can use
    readable ids like ``acc_chk_01``.
    """

    __abstract__ = True

    id_prefix = "obj"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def __init__(self, **kwargs):
        kwargs.setdefault("id", new_id(self.id_prefix))
        super().__init__(**kwargs)
