"""User service: registration, default provisioning and dashboard lookups."""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from voicebank.config import settings
from voicebank.core.exceptions import EmailAlreadyRegisteredError, UserNotFoundError
from voicebank.core.money import to_minor_units
from voicebank.models.account import Account
from voicebank.models.card import Card, CardStatus
from voicebank.models.transaction import Transaction
from voicebank.models.base import new_id
from voicebank.models.user import User
from voicebank.repositories.account import AccountRepository
from voicebank.repositories.card import CardRepository
from voicebank.repositories.transaction import TransactionRepository
from voicebank.repositories.user import UserRepository

logger = logging.getLogger(__name__)

# (label, status, linked account type) for the cards every new user receives
DEFAULT_CARDS = [
    ("Visa Platinum", CardStatus.ACTIVE, "Checking"),
    ("Mastercard Gold", CardStatus.INACTIVE, "Savings"),
]


def display_digits(email: str, entity_id: str) -> str:
    """
    Derive four cosmetic digits from ``email + entity_id``.

    A 32-bit rolling string hash (``h * 31 + c``) folded into 1000..9999.
    Deterministic per user and entity; not a security mechanism.
    """
    h = 0
    for ch in email + entity_id:
        h = ((h << 5) - h + ord(ch)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return str(abs(h) % 9000 + 1000)


def account_display_number(email: str, account_id: str) -> str:
    return f"**** {display_digits(email, account_id)}"


class UserService:
    """Service layer for user registration and lookups."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.user_repo = UserRepository(db)
        self.account_repo = AccountRepository(db)
        self.card_repo = CardRepository(db)
        self.txn_repo = TransactionRepository(db)

    async def register(self, name: str, email: str) -> User:
        """
        Register a user and provision default accounts and cards.

        Every new user gets one Checking and one Savings account with the
        configured opening balances, and two cards. No transactions.

        Raises:
            EmailAlreadyRegisteredError: If email already exists
        """
        if await self.user_repo.email_exists(email):
            raise EmailAlreadyRegisteredError(details={"operation": "register"})

        user = self.user_repo.add(User(name=name, email=email))
        await self.db.flush()
        accounts: dict[str, Account] = {}
        for account_type, opening in settings.new_account_balances.items():
            account_id = new_id("acc")
            accounts[account_type] = self.account_repo.add(
                Account(
                    id=account_id,
                    user_id=user.id,
                    account_type=account_type,
                    balance=to_minor_units(opening),
                    number=account_display_number(email, account_id),
                )
            )

        await self.db.flush()

        for label, status, account_type in DEFAULT_CARDS:
            account = accounts.get(account_type)
            if account is None:
                continue
            card_id = new_id("crd")
            self.card_repo.add(
                Card(
                    id=card_id,
                    account_id=account.id,
                    label=label,
                    last_four=display_digits(email, card_id),
                    status=status.value,
                )
            )

        await self.db.commit()
        logger.info("User registered", extra={"user_id": user.id})
        return user

    async def get_by_email(self, email: str) -> User:
        """
        Raises:
            UserNotFoundError: no user with that email
        """
        user = await self.user_repo.get_by_email(email)
        if user is None:
            raise UserNotFoundError()
        return user

    async def get_by_id(self, user_id: str) -> User:
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError()
        return user

    async def list_accounts(self, user_id: str) -> list[Account]:
        return await self.account_repo.get_all_by_user((await self.get_by_id(user_id)).id)

    async def list_cards(self, user_id: str) -> list[Card]:
        return await self.card_repo.get_all_by_user((await self.get_by_id(user_id)).id)

    async def list_transactions(self, user_id: str) -> list[Transaction]:
        """Newest first across all of the user's accounts."""
        return await self.txn_repo.get_by_user((await self.get_by_id(user_id)).id)

    async def get_overview(self, user: User) -> dict:
        """Accounts, cards and transactions for the dashboard."""
        return {
            "user": user,
            "accounts": await self.account_repo.get_all_by_user(user.id),
            "cards": await self.card_repo.get_all_by_user(user.id),
            "transactions": await self.txn_repo.get_by_user(user.id),
        }
