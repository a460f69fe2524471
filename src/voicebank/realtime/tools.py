"""Function-calling tool declarations sent to the realtime endpoint.

One entry per tool the dispatcher understands; enums are what the assistant
may put in each field.
"""

ACCOUNT_TYPES = ["Checking", "Savings"]
CARD_STATUSES = ["Active", "Inactive"]

TOOL_DEFINITIONS: list[dict] = [
    {
        "type": "function",
        "name": "get_balance",
        "description": "Get the balance of a specific account type",
        "parameters": {
            "type": "object",
            "properties": {
                "accountType": {"type": "string", "enum": ACCOUNT_TYPES},
            },
            "required": ["accountType"],
        },
    },
    {
        "type": "function",
        "name": "transfer_funds",
        "description": "Transfer money between accounts, or to an external account",
        "parameters": {
            "type": "object",
            "properties": {
                "amount": {"type": "number"},
                "fromAccount": {"type": "string"},
                "toAccount": {"type": "string"},
            },
            "required": ["amount", "fromAccount", "toAccount"],
        },
    },
    {
        "type": "function",
        "name": "withdraw_funds",
        "description": "Withdraw money from an account (e.g. ATM or external)",
        "parameters": {
            "type": "object",
            "properties": {
                "amount": {"type": "number"},
                "accountType": {"type": "string", "enum": ACCOUNT_TYPES},
            },
            "required": ["amount", "accountType"],
        },
    },
    {
        "type": "function",
        "name": "get_transaction_history",
        "description": "Get the recent transaction history for an account",
        "parameters": {
            "type": "object",
            "properties": {
                "accountType": {"type": "string", "enum": ACCOUNT_TYPES},
                "limit": {"type": "number", "description": "Number of transactions to fetch"},
            },
            "required": ["accountType"],
        },
    },
    {
        "type": "function",
        "name": "set_card_status",
        "description": "Lock or unlock a debit/credit card",
        "parameters": {
            "type": "object",
            "properties": {
                "cardLast4": {"type": "string"},
                "cardType": {"type": "string", "description": "Card name, e.g. Visa or Mastercard"},
                "status": {"type": "string", "enum": CARD_STATUSES},
            },
            "required": ["status"],
        },
    },
]
