"""Account repository with user-scoped lookups and guarded balance updates."""
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from voicebank.models.account import Account
from voicebank.repositories.base import BaseRepository


class AccountRepository(BaseRepository[Account]):
    """Repository for Account model.

    Balance changes are single UPDATE statements with the precondition in
    the WHERE clause, never a read followed by a write.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(db, Account)

    async def get_by_user(self, user_id: str, account_id: str) -> Account | None:
        """Get account only if it belongs to the specified user."""
        result = await self.db.execute(
            select(Account).where(Account.id == account_id, Account.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_all_by_user(self, user_id: str) -> list[Account]:
        """Get all accounts for a user in creation order."""
        result = await self.db.execute(
            select(Account)
            .where(Account.user_id == user_id)
            .order_by(Account.created_at, Account.id)
        )
        return list(result.scalars().all())

    async def find_by_type(self, user_id: str, fragment: str) -> Account | None:
        """First account whose type contains ``fragment`` (case-insensitive)."""
        result = await self.db.execute(
            select(Account)
            .where(
                Account.user_id == user_id,
                Account.account_type.icontains(fragment, autoescape=True),
            )
            .order_by(Account.created_at, Account.id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def withdraw(self, account_id: str, amount: int) -> bool:
        """
        Deduct ``amount`` only if the balance covers it.

        Returns:
            True if the row was updated, False if funds were insufficient
        """
        result = await self.db.execute(
            update(Account)
            .where(Account.id == account_id, Account.balance >= amount)
            .values(balance=Account.balance - amount)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def deposit(self, account_id: str, amount: int) -> bool:
        """
        Add ``amount`` to a non-external account.

        Returns:
            True if the row was updated, False if the account is external or gone
        """
        result = await self.db.execute(
            update(Account)
            .where(Account.id == account_id, Account.external.is_(False))
            .values(balance=Account.balance + amount)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
