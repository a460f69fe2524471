"""Tool dispatcher: turns one assistant tool call into one ledger call.

``dispatch`` never raises. Every failure, whether bad arguments, ledger
errors, storage errors or timeouts, comes back as an error payload so the
relay can always answer the pending call.
"""

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable

from pydantic import BaseModel, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from voicebank.config import settings
from voicebank.core.errors import get_user_message
from voicebank.core.exceptions import (
    InvalidAmountError,
    ProtocolError,
    StorageFailureError,
    ToolTimeoutError,
    VoiceBankError,
)
from voicebank.core.money import format_amount, from_minor_units
from voicebank.schemas.tools import (
    GetBalanceArgs,
    SetCardStatusArgs,
    TransactionHistoryArgs,
    TransferFundsArgs,
    WithdrawFundsArgs,
)
from voicebank.services.ledger import LedgerService

logger = logging.getLogger(__name__)

ToolHandler = Callable[[LedgerService, Any], Awaitable[dict]]


def error_payload(exc: VoiceBankError) -> dict:
    """Tool result for a failed call; ``error`` is what the assistant reads out."""
    return {
        "success": False,
        "error": get_user_message(exc.error_code),
        "error_code": exc.error_code,
    }


def parse_arguments(arguments: str | dict | None) -> dict:
    """
    Decode the JSON argument payload of a tool call.

    Raises:
        ProtocolError: payload is not valid JSON or not a JSON object
    """
    if arguments is None or arguments == "":
        return {}
    if isinstance(arguments, dict):
        return arguments
    try:
        parsed = json.loads(arguments)
    except (TypeError, ValueError) as exc:
        raise ProtocolError(details={"reason": "arguments are not valid JSON"}) from exc
    if not isinstance(parsed, dict):
        raise ProtocolError(details={"reason": "arguments are not a JSON object"})
    return parsed


def validate_arguments(model: type[BaseModel], raw: dict) -> BaseModel:
    """
    Validate raw arguments against a tool's argument model.

    Raises:
        InvalidAmountError: the amount field is missing a usable value
        ProtocolError: any other field is missing or malformed
    """
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        fields = {str(err["loc"][0]) for err in exc.errors() if err.get("loc")}
        if "amount" in fields and "amount" in raw:
            raise InvalidAmountError(details={"fields": sorted(fields)}) from exc
        raise ProtocolError(details={"fields": sorted(fields)}) from exc


async def _get_balance(ledger: LedgerService, args: GetBalanceArgs) -> dict:
    result = await ledger.read_balance(args.accountType)
    balance = format_amount(result.balance)
    return {
        "success": True,
        "accountType": result.account.account_type,
        "balance": balance,
        "currency": settings.currency,
        "message": f"Your {result.account.account_type} balance is ${balance}.",
    }


async def _transfer_funds(ledger: LedgerService, args: TransferFundsArgs) -> dict:
    result = await ledger.transfer(args.amount, args.fromAccount, args.toAccount)
    amount = format_amount(result.amount)
    return {
        "success": True,
        "amount": amount,
        "fromAccount": result.source.account_type,
        "toAccount": result.destination.account_type,
        "fromBalance": format_amount(result.source_balance),
        "message": (
            f"Successfully transferred ${amount} from {result.source.account_type} "
            f"to {result.destination.account_type}."
        ),
    }


async def _withdraw_funds(ledger: LedgerService, args: WithdrawFundsArgs) -> dict:
    result = await ledger.debit(args.accountType, args.amount)
    amount = format_amount(result.amount)
    return {
        "success": True,
        "amount": amount,
        "accountType": result.account.account_type,
        "balance": format_amount(result.balance),
        "message": f"Withdrawn ${amount} from your {result.account.account_type}.",
    }


async def _get_transaction_history(ledger: LedgerService, args: TransactionHistoryArgs) -> dict:
    transactions = await ledger.history(args.accountType, args.limit)
    items = [
        {
            "date": txn.txn_date.isoformat(),
            "description": txn.description,
            "amount": format_amount(from_minor_units(txn.amount)),
        }
        for txn in transactions
    ]
    if items:
        message = f"Here are the last {len(items)} transactions for {args.accountType}."
    else:
        message = f"No recent transactions found for {args.accountType}."
    return {"success": True, "accountType": args.accountType, "transactions": items, "message": message}


async def _set_card_status(ledger: LedgerService, args: SetCardStatusArgs) -> dict:
    card = await ledger.set_card_status(args.card_selector, args.status)
    return {
        "success": True,
        "card": card.label,
        "last4": card.last_four,
        "status": card.status,
        "message": f"Your {card.label} is now {card.status}.",
    }


TOOL_HANDLERS: dict[str, tuple[type[BaseModel], ToolHandler]] = {
    "get_balance": (GetBalanceArgs, _get_balance),
    "transfer_funds": (TransferFundsArgs, _transfer_funds),
    "withdraw_funds": (WithdrawFundsArgs, _withdraw_funds),
    "get_transaction_history": (TransactionHistoryArgs, _get_transaction_history),
    "set_card_status": (SetCardStatusArgs, _set_card_status),
}


class ToolDispatcher:
    """Dispatches assistant tool calls to the ledger for one user."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        user_id: str,
        timeout_seconds: float | None = None,
    ):
        """
        Args:
            session_factory: Process-wide session factory; one session per call
            user_id: Ledger owner for every call from this dispatcher
            timeout_seconds: Upper bound for one call (defaults to settings)
        """
        self.session_factory = session_factory
        self.user_id = user_id
        self.timeout_seconds = (
            settings.tool_timeout_seconds if timeout_seconds is None else timeout_seconds
        )

    async def _run(self, handler: ToolHandler, args: BaseModel) -> dict:
        async with self.session_factory() as db:
            return await handler(LedgerService(db, self.user_id), args)

    async def dispatch(self, name: str, arguments: str | dict | None) -> dict:
        """
        Run the named tool and return a JSON-serializable result.

        Duplicate calls are not deduplicated; every call is a fresh operation.
        """
        try:
            if name not in TOOL_HANDLERS:
                raise ProtocolError("PROTO_002", details={"tool": name})
            model, handler = TOOL_HANDLERS[name]
            args = validate_arguments(model, parse_arguments(arguments))
            result = await asyncio.wait_for(self._run(handler, args), self.timeout_seconds)
        except VoiceBankError as exc:
            logger.warning(
                "Tool call failed",
                extra={"tool": name, "error_code": exc.error_code, "user_id": self.user_id},
            )
            return error_payload(exc)
        except asyncio.TimeoutError:
            logger.error(
                "Tool call timed out",
                extra={"tool": name, "timeout_seconds": self.timeout_seconds, "user_id": self.user_id},
            )
            return error_payload(ToolTimeoutError())
        except Exception:
            logger.exception("Unexpected error in tool call", extra={"tool": name, "user_id": self.user_id})
            return error_payload(StorageFailureError())

        logger.info("Tool call succeeded", extra={"tool": name, "user_id": self.user_id})
        return result
