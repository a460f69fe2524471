from sqlalchemy import event
from sqlalchemy.engine.url import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from voicebank.config import settings


def create_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create the process-wide async engine for ``database_url``.

    SQLite connections start every transaction with BEGIN IMMEDIATE so two
    concurrent writers queue on the database lock instead of failing on a
    SHARED -> RESERVED upgrade.
    """
    engine = create_async_engine(database_url, echo=echo, future=True)

    if make_url(database_url).get_backend_name() == "sqlite":

        @event.listens_for(engine.sync_engine, "connect")
        def _disable_pysqlite_begin(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(engine.sync_engine, "begin")
        def _begin_immediate(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


# Do not log SQL statement parameters outside development (they carry amounts
# and email addresses).
async_engine = create_engine(
    settings.database_url,
    echo=(settings.db_echo if settings.app_env.lower() == "development" else False),
)

AsyncSessionLocal = create_session_factory(async_engine)


async def get_db() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session
