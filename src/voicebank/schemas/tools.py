"""Argument models for the realtime assistant's tool calls.

Field names follow the camelCase the tool schemas declare upstream.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from voicebank.config import settings
from voicebank.models.card import CardStatus


class ToolArguments(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)


class GetBalanceArgs(ToolArguments):
    accountType: str = Field(..., min_length=1)


class TransferFundsArgs(ToolArguments):
    amount: Decimal = Field(..., gt=0, decimal_places=2, allow_inf_nan=False)
    fromAccount: str = Field(..., min_length=1)
    toAccount: str = Field(..., min_length=1)


class WithdrawFundsArgs(ToolArguments):
    amount: Decimal = Field(..., gt=0, decimal_places=2, allow_inf_nan=False)
    accountType: str = Field(..., min_length=1)


class TransactionHistoryArgs(ToolArguments):
    accountType: str = Field(..., min_length=1)
    limit: int = settings.history_default_limit

    @field_validator("limit", mode="before")
    @classmethod
    def default_missing_limit(cls, v):
        return settings.history_default_limit if v is None else v

    @field_validator("limit")
    @classmethod
    def clamp_limit(cls, v: int) -> int:
        """Zero or negative means "use the default"; large values are capped."""
        if v < 1:
            return settings.history_default_limit
        return min(v, settings.history_max_limit)


class SetCardStatusArgs(ToolArguments):
    cardLast4: str | None = None
    cardType: str | None = None
    status: CardStatus

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v):
        """Accept "Active"/"Inactive" as declared upstream, in any case."""
        return v.strip().lower() if isinstance(v, str) else v

    @model_validator(mode="after")
    def require_card_selector(self) -> "SetCardStatusArgs":
        if not (self.cardLast4 or self.cardType):
            raise ValueError("cardLast4 or cardType is required")
        return self

    @property
    def card_selector(self) -> str:
        return self.cardLast4 or self.cardType
