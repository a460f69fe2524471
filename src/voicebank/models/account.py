"""Account model holding a balance in currency minor units."""
from sqlalchemy import BigInteger, Boolean, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from voicebank.models.base import BaseModel


class Account(BaseModel):
    """Bank account.

    ``external`` marks an outbound-only transfer target: credits to it are
    not applied locally.
    """

    __tablename__ = "accounts"

    id_prefix = "acc"

    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    account_type: Mapped[str] = mapped_column(String(100), nullable=False)
    # Minor units (cents)
    balance: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    number: Mapped[str] = mapped_column(String(20), nullable=False)
    external: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="accounts")
    cards: Mapped[list["Card"]] = relationship("Card", back_populates="account", lazy="selectin")

    def __repr__(self) -> str:
        return f"<Account(id={self.id}, type={self.account_type}, external={self.external})>"
