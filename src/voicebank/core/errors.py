"""Error codes and user-friendly messages.

This module defines the error catalog for the ledger, the tool relay and
the HTTP API. Each error has:
- code: Unique identifier
- message: Technical description (for logs)
- user_message: User-friendly explanation (also read back by the assistant)
- suggestion: Actionable guidance for the user
- retry_allowed: Whether the error is retryable
"""


ERROR_CATALOG: dict[str, dict] = {
    "LEDGER_001": {
        "code": "LEDGER_001",
        "message": "Account selector matched no account",
        "user_message": "I couldn't find that account.",
        "suggestion": "Try naming the account type, for example Checking or Savings.",
        "retry_allowed": False,
    },
    "LEDGER_002": {
        "code": "LEDGER_002",
        "message": "Card selector matched no card",
        "user_message": "Card not found.",
        "suggestion": "Try the card name or its last four digits.",
        "retry_allowed": False,
    },
    "LEDGER_003": {
        "code": "LEDGER_003",
        "message": "Debit exceeds available balance",
        "user_message": "Insufficient funds in that account.",
        "suggestion": "Try a smaller amount or another account.",
        "retry_allowed": False,
    },
    "LEDGER_004": {
        "code": "LEDGER_004",
        "message": "Amount is non-numeric, non-positive or has too many decimals",
        "user_message": "That amount isn't valid.",
        "suggestion": "Use a positive amount with at most two decimal places.",
        "retry_allowed": False,
    },
    "LEDGER_005": {
        "code": "LEDGER_005",
        "message": "Transfer source and destination are the same account",
        "user_message": "You can't transfer money to the same account.",
        "suggestion": "Pick two different accounts.",
        "retry_allowed": False,
    },
    "DB_001": {
        "code": "DB_001",
        "message": "Database operation failed",
        "user_message": "A database error occurred.",
        "suggestion": "Please try again in a few moments.",
        "retry_allowed": True,
    },
    "DB_002": {
        "code": "DB_002",
        "message": "Resource already exists",
        "user_message": "This record already exists.",
        "suggestion": "Please check if the record was already created.",
        "retry_allowed": False,
    },
    "PROTO_001": {
        "code": "PROTO_001",
        "message": "Malformed upstream event or unparseable tool arguments",
        "user_message": "I couldn't understand that request.",
        "suggestion": "Please rephrase the request.",
        "retry_allowed": True,
    },
    "PROTO_002": {
        "code": "PROTO_002",
        "message": "Unknown tool name",
        "user_message": "I can't do that yet.",
        "suggestion": "Ask about balances, transfers, withdrawals, history or cards.",
        "retry_allowed": False,
    },
    "TOOL_001": {
        "code": "TOOL_001",
        "message": "Tool dispatch timed out",
        "user_message": "That took too long to complete.",
        "suggestion": "Please check your balance before trying again.",
        "retry_allowed": True,
    },
    "API_001": {
        "code": "API_001",
        "message": "User not found",
        "user_message": "We couldn't find this user.",
        "suggestion": "Please check the email address or register first.",
        "retry_allowed": False,
    },
    "API_002": {
        "code": "API_002",
        "message": "Email already registered",
        "user_message": "This email is already registered.",
        "suggestion": "Sign in with this email instead.",
        "retry_allowed": False,
    },
    "VAL_001": {
        "code": "VAL_001",
        "message": "Request failed validation",
        "user_message": "Invalid input data",
        "suggestion": "Please check your input and try again",
        "retry_allowed": True,
    },
    "SYS_001": {
        "code": "SYS_001",
        "message": "Internal server error",
        "user_message": "An unexpected error occurred",
        "suggestion": "Please try again later or contact support",
        "retry_allowed": True,
    },
}


def get_error(error_code: str) -> dict:
    """Get error definition by code.

    Args:
        error_code: Error code from the catalog

    Returns:
        Dict with error details (a generic entry for unknown codes)
    """
    if error_code not in ERROR_CATALOG:
        return {
            "code": "UNKNOWN",
            "message": f"Unknown error code: {error_code}",
            "user_message": "An unexpected error occurred.",
            "suggestion": "Please try again. Contact support if the problem persists.",
            "retry_allowed": True,
        }
    return ERROR_CATALOG[error_code]


def get_user_message(error_code: str) -> str:
    """Get user-friendly message for an error code."""
    return get_error(error_code)["user_message"]
