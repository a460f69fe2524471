"""Custom exception classes for the ledger and the realtime relay.

Each exception maps to a specific error code defined in errors.py. Ledger
and dispatcher failures are converted to tool-result payloads; the HTTP
layer converts them to JSON error responses.
"""

from typing import Any


class VoiceBankError(Exception):
    """Base exception for all application errors.

    Attributes:
        error_code: Code from the error catalog (e.g., "LEDGER_003")
        details: Additional context about the error (for logging)
        http_status: HTTP status code to return (default: 500)
    """

    default_code = "DB_001"
    default_status = 500

    def __init__(
        self,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
        http_status: int | None = None,
    ):
        self.error_code = error_code or self.default_code
        self.details = details or {}
        self.http_status = http_status or self.default_status
        super().__init__(self.error_code)


class LedgerError(VoiceBankError):
    """Base class for ledger operation failures."""


class AccountNotFoundError(LedgerError):
    """Raised when an account selector matches no account."""

    default_code = "LEDGER_001"
    default_status = 404


class CardNotFoundError(LedgerError):
    """Raised when a card selector matches no card."""

    default_code = "LEDGER_002"
    default_status = 404


class InsufficientFundsError(LedgerError):
    """Raised when a guarded debit affects no row."""

    default_code = "LEDGER_003"
    default_status = 409


class InvalidAmountError(LedgerError):
    """Raised for non-numeric, non-positive or over-precise amounts."""

    default_code = "LEDGER_004"
    default_status = 400


class InvalidTransferError(LedgerError):
    """Raised when source and destination resolve to the same account."""

    default_code = "LEDGER_005"
    default_status = 400


class StorageFailureError(LedgerError):
    """Raised when the underlying database fails mid-operation.

    The operation is rolled back before this is raised.
    """

    default_code = "DB_001"
    default_status = 500


class ProtocolError(VoiceBankError):
    """Raised for malformed upstream events or tool arguments.

    Uses PROTO_001 by default, PROTO_002 for unknown tool names.
    """

    default_code = "PROTO_001"
    default_status = 400


class ToolTimeoutError(VoiceBankError):
    """Raised when a tool dispatch exceeds the configured timeout."""

    default_code = "TOOL_001"
    default_status = 504


class UserNotFoundError(VoiceBankError):
    default_code = "API_001"
    default_status = 404


class EmailAlreadyRegisteredError(VoiceBankError):
    default_code = "API_002"
    default_status = 409
