"""Pydantic schemas for account, card and transaction API responses."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from voicebank.core.money import from_minor_units


class AccountResponse(BaseModel):
    """Account data for API responses."""

    id: str
    account_type: str = Field(description="Account label, e.g. Checking")
    balance: Decimal = Field(description="Current balance in currency units")
    number: str = Field(description="Masked display number")
    external: bool = Field(description="Outbound-only transfer target")
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("balance", mode="before")
    @classmethod
    def minor_to_decimal(cls, v):
        return from_minor_units(v) if isinstance(v, int) else v


class CardResponse(BaseModel):
    """Card data for API responses."""

    id: str
    account_id: str = Field(description="Linked account")
    label: str = Field(description="Card product label")
    last_four: str = Field(description="Last 4 digits of card number")
    status: str = Field(description="active or inactive")

    model_config = ConfigDict(from_attributes=True)


class TransactionResponse(BaseModel):
    """Ledger entry for API responses."""

    id: str
    account_id: str
    txn_date: date
    description: str
    amount: Decimal = Field(description="Negative for debits, positive for credits")

    model_config = ConfigDict(from_attributes=True)

    @field_validator("amount", mode="before")
    @classmethod
    def minor_to_decimal(cls, v):
        return from_minor_units(v) if isinstance(v, int) else v
