"""Pydantic schemas for user endpoints."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from voicebank.schemas.account import AccountResponse, CardResponse, TransactionResponse


class UserRegister(BaseModel):
    """Request model for user registration."""

    name: str = Field(..., min_length=1, max_length=255, description="User's full name")
    email: EmailStr = Field(..., description="User email address")


class UserResponse(BaseModel):
    id: str
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class UserOverview(BaseModel):
    """User with everything the dashboard renders."""

    user: UserResponse
    accounts: list[AccountResponse]
    cards: list[CardResponse]
    transactions: list[TransactionResponse]
