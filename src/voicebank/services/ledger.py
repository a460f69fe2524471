"""Ledger service: balances, debits, transfers, card status and history.

Every operation is scoped to one user. Mutating operations run as a single
database transaction: they commit on success and roll back before raising a
``LedgerError`` subclass, so balances are never left half-applied.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from voicebank.config import settings
from voicebank.core.exceptions import (
    AccountNotFoundError,
    CardNotFoundError,
    InsufficientFundsError,
    InvalidTransferError,
    LedgerError,
    StorageFailureError,
)
from voicebank.core.money import from_minor_units, to_minor_units
from voicebank.models.account import Account
from voicebank.models.card import Card, CardStatus
from voicebank.models.transaction import Transaction
from voicebank.repositories.account import AccountRepository
from voicebank.repositories.card import CardRepository
from voicebank.repositories.transaction import TransactionRepository

logger = logging.getLogger(__name__)

WITHDRAWAL_DESCRIPTION = "ATM Withdrawal"


@dataclass
class BalanceResult:
    account: Account
    balance: Decimal


@dataclass
class DebitResult:
    account: Account
    amount: Decimal
    balance: Decimal
    transaction: Transaction


@dataclass
class TransferResult:
    source: Account
    destination: Account
    amount: Decimal
    credited: bool
    source_balance: Decimal
    transaction: Transaction


class LedgerService:
    """Service layer for ledger operations on one user's accounts."""

    def __init__(self, db: AsyncSession, user_id: str):
        """Initialize ledger service.

        Args:
            db: Database session (one unit of work per mutating call)
            user_id: Owner of every account this service may touch
        """
        self.db = db
        self.user_id = user_id
        self.account_repo = AccountRepository(db)
        self.card_repo = CardRepository(db)
        self.txn_repo = TransactionRepository(db)

    @asynccontextmanager
    async def _unit_of_work(self, operation: str):
        try:
            yield
            await self.db.commit()
        except LedgerError:
            await self.db.rollback()
            raise
        except SQLAlchemyError as exc:
            await self.db.rollback()
            # Do not log str(exc): it can include SQL + bound parameters.
            logger.error(
                "Ledger storage failure",
                extra={"operation": operation, "error_type": type(exc).__name__},
            )
            raise StorageFailureError(details={"operation": operation}) from exc

    async def find_account(self, selector: str) -> Account | None:
        """
        Resolve an account by exact id, else by case-insensitive substring
        of its type. The first match wins.

        The loose matching lets spoken phrases like "checking" or "mom"
        resolve; a blank selector matches nothing.
        """
        selector = (selector or "").strip()
        if not selector:
            return None
        account = await self.account_repo.get_by_user(self.user_id, selector)
        if account is not None:
            return account
        return await self.account_repo.find_by_type(self.user_id, selector)

    async def _require_account(self, selector: str) -> Account:
        account = await self.find_account(selector)
        if account is None:
            raise AccountNotFoundError(details={"selector": selector})
        return account

    async def read_balance(self, selector: str) -> BalanceResult:
        """Current balance of the selected account.

        Raises:
            AccountNotFoundError: selector matched nothing
        """
        try:
            account = await self._require_account(selector)
        except SQLAlchemyError as exc:
            raise StorageFailureError(details={"operation": "read_balance"}) from exc
        return BalanceResult(account=account, balance=from_minor_units(account.balance))

    async def debit(
        self, selector: str, amount, description: str = WITHDRAWAL_DESCRIPTION
    ) -> DebitResult:
        """
        Withdraw ``amount`` from the selected account and log it.

        Raises:
            InvalidAmountError: amount is not a positive two-place number
            AccountNotFoundError: selector matched nothing
            InsufficientFundsError: balance does not cover the amount
        """
        minor = to_minor_units(amount)
        async with self._unit_of_work("debit"):
            account = await self._require_account(selector)
            if not await self.account_repo.withdraw(account.id, minor):
                raise InsufficientFundsError(details={"account_id": account.id})
            txn = self.txn_repo.add(
                Transaction(
                    account_id=account.id,
                    txn_date=date.today(),
                    description=description,
                    amount=-minor,
                )
            )
            await self.db.flush()
            await self.db.refresh(account)

        logger.info("Debit committed", extra={"account_id": account.id})
        return DebitResult(
            account=account,
            amount=from_minor_units(minor),
            balance=from_minor_units(account.balance),
            transaction=txn,
        )

    async def transfer(self, amount, from_selector: str, to_selector: str) -> TransferResult:
        """
        Move ``amount`` between two accounts atomically.

        The source is debited with a guarded update. The destination is
        credited unless either side is external. One transaction row is
        logged against the source. All three commit together or not at all.

        Raises:
            InvalidAmountError: amount is not a positive two-place number
            AccountNotFoundError: either selector matched nothing
            InvalidTransferError: both selectors resolved to the same account
            InsufficientFundsError: source balance does not cover the amount
            StorageFailureError: the credit or the log failed (rolled back)
        """
        minor = to_minor_units(amount)
        async with self._unit_of_work("transfer"):
            source = await self._require_account(from_selector)
            destination = await self._require_account(to_selector)
            if source.id == destination.id:
                raise InvalidTransferError(details={"account_id": source.id})

            if not await self.account_repo.withdraw(source.id, minor):
                raise InsufficientFundsError(details={"account_id": source.id})

            credited = not source.external and not destination.external
            if credited and not await self.account_repo.deposit(destination.id, minor):
                raise StorageFailureError(
                    details={"operation": "transfer", "step": "credit"}
                )

            txn = self.txn_repo.add(
                Transaction(
                    account_id=source.id,
                    txn_date=date.today(),
                    description=f"Transfer to {destination.account_type}",
                    amount=-minor,
                )
            )
            await self.db.flush()
            await self.db.refresh(source)
            await self.db.refresh(destination)

        logger.info(
            "Transfer committed",
            extra={"source_id": source.id, "destination_id": destination.id, "credited": credited},
        )
        return TransferResult(
            source=source,
            destination=destination,
            amount=from_minor_units(minor),
            credited=credited,
            source_balance=from_minor_units(source.balance),
            transaction=txn,
        )

    async def find_card(self, selector: str) -> Card | None:
        """Resolve a card by exact last four digits or label substring."""
        selector = (selector or "").strip()
        if not selector:
            return None
        return await self.card_repo.find_by_selector(self.user_id, selector)

    async def set_card_status(self, selector: str, status: CardStatus) -> Card:
        """
        Activate or deactivate the selected card.

        Raises:
            CardNotFoundError: selector matched nothing
        """
        if not isinstance(status, CardStatus):
            status = CardStatus(str(status).lower())
        async with self._unit_of_work("set_card_status"):
            card = await self.find_card(selector)
            if card is None or not await self.card_repo.set_status(card.id, status.value):
                raise CardNotFoundError(details={"selector": selector})
            await self.db.refresh(card)

        logger.info("Card status changed", extra={"card_id": card.id, "status": status.value})
        return card

    async def history(self, selector: str, limit: int | None = None) -> list[Transaction]:
        """
        Most recent transactions for the selected account, newest first.

        Raises:
            AccountNotFoundError: selector matched nothing
        """
        if limit is None:
            limit = settings.history_default_limit
        try:
            account = await self._require_account(selector)
            if limit < 1:
                return []
            return await self.txn_repo.get_by_account(account.id, limit)
        except SQLAlchemyError as exc:
            raise StorageFailureError(details={"operation": "history"}) from exc
