"""User model owning accounts (and, through them, cards and transactions)."""
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from voicebank.models.base import BaseModel


class User(BaseModel):
    """Registered bank customer."""

    __tablename__ = "users"

    id_prefix = "usr"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)

    accounts: Mapped[list["Account"]] = relationship(
        "Account", back_populates="user", lazy="selectin", order_by="Account.created_at"
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"
