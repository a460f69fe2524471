import asyncio
import sys
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.websockets import WebSocketState

sys.path.append(str(Path(__file__).parents[1] / "src"))

from voicebank.api.deps import get_session_factory
from voicebank.db.seed import DEMO_USER_ID, create_tables, seed_demo_data
from voicebank.db.session import create_engine, create_session_factory, get_db
from voicebank.main import app
from voicebank.models.account import Account
from voicebank.repositories.transaction import TransactionRepository
from voicebank.services.ledger import LedgerService


@pytest.fixture
async def engine(tmp_path):
    """File-backed SQLite engine per test; concurrent sessions need a real file."""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'test_bank.db'}")
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
async def seeded(session_factory):
    """Demo user with Checking, Savings, External (Mom), two cards and three transactions."""
    async with session_factory() as db:
        await seed_demo_data(db)


@pytest.fixture
async def db_session(session_factory, seeded):
    """Provide a session on the seeded database.

    SQLite serialises transactions, so a test must not hold this session
    inside a transaction while another session writes.
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def ledger(db_session: AsyncSession) -> LedgerService:
    return LedgerService(db_session, DEMO_USER_ID)


@pytest.fixture
async def client(session_factory, seeded):
    """Provide test client with database override."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def balance_of(session_factory):
    """Read a stored balance (minor units) through a fresh session."""

    async def read(account_id: str) -> int:
        async with session_factory() as db:
            account = await db.get(Account, account_id)
            return account.balance

    return read


@pytest.fixture
def transactions_of(session_factory):
    async def read(account_id: str) -> list:
        async with session_factory() as db:
            return await TransactionRepository(db).get_by_account(account_id, limit=100)

    return read


class FakeClientSocket:
    """Browser side of the relay.

    ``receive`` returns the queued ASGI messages in order, then blocks
    until the socket is closed.
    """

    def __init__(self, messages=()):
        self._messages = list(messages)
        self._closed = asyncio.Event()
        self.sent: list = []
        self.client_state = WebSocketState.CONNECTED
        self.close_code = None

    @staticmethod
    def text(data: str) -> dict:
        return {"type": "websocket.receive", "text": data}

    @staticmethod
    def binary(data: bytes) -> dict:
        return {"type": "websocket.receive", "bytes": data}

    @staticmethod
    def disconnect() -> dict:
        return {"type": "websocket.disconnect", "code": 1000}

    async def receive(self) -> dict:
        if self._messages:
            message = self._messages.pop(0)
            if message["type"] == "websocket.disconnect":
                self.client_state = WebSocketState.DISCONNECTED
            return message
        await self._closed.wait()
        return self.disconnect()

    async def send_text(self, data: str) -> None:
        self.sent.append(data)

    async def send_bytes(self, data: bytes) -> None:
        self.sent.append(data)

    async def close(self, code: int = 1000) -> None:
        self.close_code = code
        self.client_state = WebSocketState.DISCONNECTED
        self._closed.set()


class FakeUpstream:
    """Realtime endpoint side of the relay.

    Iteration yields ``frames`` and anything pushed later; once drained it
    ends when ``end`` is true, otherwise it waits for more until closed.
    """

    def __init__(self, frames=(), end: bool = True):
        self._frames = list(frames)
        self._end = end
        self._wake = asyncio.Event()
        self.sent: list = []
        self.closed = False

    async def send(self, data) -> None:
        self.sent.append(data)

    def push(self, frame) -> None:
        self._frames.append(frame)
        self._wake.set()

    def __aiter__(self):
        return self

    async def __anext__(self):
        await asyncio.sleep(0)
        while not self._frames:
            if self._end or self.closed:
                raise StopAsyncIteration
            self._wake.clear()
            await self._wake.wait()
        return self._frames.pop(0)

    async def close(self) -> None:
        self.closed = True
        self._wake.set()

    def connector(self):
        async def connect():
            return self

        return connect


@pytest.fixture
def make_client_socket():
    return FakeClientSocket


@pytest.fixture
def make_upstream():
    return FakeUpstream
