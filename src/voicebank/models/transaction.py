"""Transaction model: append-only ledger entries posted against an account."""
from datetime import date

from sqlalchemy import BigInteger, Date, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from voicebank.models.base import BaseModel


class Transaction(BaseModel):
    """Ledger entry. Negative ``amount`` is a debit, positive a credit."""

    __tablename__ = "transactions"

    id_prefix = "tx"

    account_id: Mapped[str] = mapped_column(ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    txn_date: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    # Minor units (cents), signed
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)

    __table_args__ = (
        Index("ix_transactions_account_id_txn_date", "account_id", "txn_date"),
    )

    def __repr__(self) -> str:
        return f"<Transaction(id={self.id}, account_id={self.account_id}, amount={self.amount})>"
