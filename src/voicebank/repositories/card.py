"""Card repository with user-scoped queries."""
from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from voicebank.models.account import Account
from voicebank.models.card import Card
from voicebank.repositories.base import BaseRepository


class CardRepository(BaseRepository[Card]):
    """Repository for Card model. Ownership goes through the linked account."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Card)

    async def get_all_by_user(self, user_id: str) -> list[Card]:
        """Get all cards linked to the user's accounts."""
        result = await self.db.execute(
            select(Card)
            .join(Account, Card.account_id == Account.id)
            .where(Account.user_id == user_id)
            .order_by(Card.created_at, Card.id)
        )
        return list(result.scalars().all())

    async def find_by_selector(self, user_id: str, selector: str) -> Card | None:
        """
        First card whose last four digits equal ``selector`` or whose label
        contains it (case-insensitive).
        """
        result = await self.db.execute(
            select(Card)
            .join(Account, Card.account_id == Account.id)
            .where(
                Account.user_id == user_id,
                or_(
                    Card.last_four == selector,
                    Card.label.icontains(selector, autoescape=True),
                ),
            )
            .order_by(Card.created_at, Card.id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def set_status(self, card_id: str, status: str) -> bool:
        """Set card status in a single statement."""
        result = await self.db.execute(
            update(Card)
            .where(Card.id == card_id)
            .values(status=status)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
