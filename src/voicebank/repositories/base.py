"""Base repository shared by the ledger repositories."""
from typing import Generic, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from voicebank.models.base import BaseModel

T = TypeVar("T", bound=BaseModel)


class BaseRepository(Generic[T]):
    """Generic lookups and staging for one model.

    Repositories never commit. Services own the transaction so a ledger
    operation can span several repositories and still roll back as one.
    """

    def __init__(self, db: AsyncSession, model: Type[T]):
        self.db = db
        self.model = model

    async def get_by_id(self, id: str) -> T | None:
        result = await self.db.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def count(self) -> int:
        result = await self.db.execute(select(func.count()).select_from(self.model))
        return result.scalar_one()

    def add(self, obj: T) -> T:
        """Stage a new row in the current transaction."""
        self.db.add(obj)
        return obj
