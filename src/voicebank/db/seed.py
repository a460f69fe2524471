"""Demo data inserted into an empty ledger."""
import logging
from datetime import date
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from voicebank.core.money import to_minor_units
from voicebank.models.account import Account
from voicebank.models.base import Base
from voicebank.models.card import Card, CardStatus
from voicebank.models.transaction import Transaction
from voicebank.models.user import User
from voicebank.repositories.account import AccountRepository

logger = logging.getLogger(__name__)

DEMO_USER_ID = "usr_000"

DEMO_USER = {"id": DEMO_USER_ID, "name": "Demo User", "email": "demo@novabank.example"}

DEMO_ACCOUNTS = [
    {"id": "acc_chk_01", "account_type": "Checking", "balance": Decimal("5420.50"), "number": "**** 4421", "external": False},
    {"id": "acc_sav_01", "account_type": "Savings", "balance": Decimal("12500.00"), "number": "**** 9928", "external": False},
    {"id": "acc_ext_02", "account_type": "External (Mom)", "balance": Decimal("0"), "number": "**** 1122", "external": True},
]

DEMO_CARDS = [
    {"id": "crd_001", "label": "Visa Platinum", "last_four": "4242", "status": CardStatus.ACTIVE, "account_id": "acc_chk_01"},
    {"id": "crd_002", "label": "Mastercard Gold", "last_four": "8811", "status": CardStatus.INACTIVE, "account_id": "acc_sav_01"},
]

DEMO_TRANSACTIONS = [
    {"id": "tx_1", "txn_date": date(2023, 10, 24), "description": "Grocery Store", "amount": Decimal("-150.25"), "account_id": "acc_chk_01"},
    {"id": "tx_2", "txn_date": date(2023, 10, 23), "description": "Salary Deposit", "amount": Decimal("3200.00"), "account_id": "acc_chk_01"},
    {"id": "tx_3", "txn_date": date(2023, 10, 20), "description": "Netflix", "amount": Decimal("-15.99"), "account_id": "acc_chk_01"},
]


def _signed_minor(amount: Decimal) -> int:
    minor = to_minor_units(abs(amount)) if amount else 0
    return -minor if amount < 0 else minor


async def create_tables(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed_demo_data(db: AsyncSession) -> bool:
    """
    Insert the demo user, accounts, cards and transactions.

    Returns:
        False if the ledger already had accounts and nothing was inserted
    """
    if await AccountRepository(db).count() > 0:
        return False

    db.add(User(**DEMO_USER))
    await db.flush()
    for row in DEMO_ACCOUNTS:
        db.add(Account(user_id=DEMO_USER_ID, **{**row, "balance": _signed_minor(row["balance"])}))
    await db.flush()
    for row in DEMO_CARDS:
        db.add(Card(**{**row, "status": row["status"].value}))
    await db.flush()
    for row in DEMO_TRANSACTIONS:
        db.add(Transaction(**{**row, "amount": _signed_minor(row["amount"])}))
    await db.commit()

    logger.info("Populated initial demo data")
    return True
