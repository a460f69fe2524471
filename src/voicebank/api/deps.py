"""FastAPI dependency injection for database sessions and services."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from voicebank.db.session import AsyncSessionLocal, get_db
from voicebank.services.user import UserService


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """
    Process-wide session factory.

    Relay sessions outlive any single request, so they take the factory and
    open one session per tool call instead of holding a request session.
    """
    return AsyncSessionLocal


async def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    """
    Get user service instance.

    Args:
        db: Database session

    Returns:
        UserService instance
    """
    return UserService(db)
