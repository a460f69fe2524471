"""Card model linked to an account."""
import enum

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from voicebank.models.base import BaseModel


class CardStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Card(BaseModel):
    """Debit/credit card. Only ``status`` changes after creation."""

    __tablename__ = "cards"

    id_prefix = "crd"

    account_id: Mapped[str] = mapped_column(ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    label: Mapped[str] = mapped_column(String(100), nullable=False)
    last_four: Mapped[str] = mapped_column(String(4), nullable=False)
    status: Mapped[str] = mapped_column(String(10), default=CardStatus.ACTIVE.value, nullable=False)

    # Relationships
    account: Mapped["Account"] = relationship("Account", back_populates="cards")

    def __repr__(self) -> str:
        return f"<Card(id={self.id}, label={self.label}, last_four={self.last_four})>"
