"""Transaction repository: append and history queries."""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from voicebank.models.account import Account
from voicebank.models.transaction import Transaction
from voicebank.repositories.base import BaseRepository


class TransactionRepository(BaseRepository[Transaction]):
    """Repository for Transaction model. Rows are never updated or deleted."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Transaction)

    async def get_by_account(self, account_id: str, limit: int = 3) -> list[Transaction]:
        """Newest-first transactions for one account."""
        result = await self.db.execute(
            select(Transaction)
            .where(Transaction.account_id == account_id)
            .order_by(Transaction.txn_date.desc(), Transaction.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_by_user(
        self, user_id: str, skip: int = 0, limit: int = 100
    ) -> list[Transaction]:
        """Get all transactions across a user's accounts with pagination."""
        result = await self.db.execute(
            select(Transaction)
            .join(Account, Transaction.account_id == Account.id)
            .where(Account.user_id == user_id)
            .order_by(Transaction.txn_date.desc(), Transaction.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())
