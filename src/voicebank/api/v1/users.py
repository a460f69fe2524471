"""User lookup, registration and dashboard data endpoints."""

from fastapi import APIRouter, Depends, Query, status

from voicebank.api.deps import get_user_service
from voicebank.schemas.account import AccountResponse, CardResponse, TransactionResponse
from voicebank.schemas.user import UserOverview, UserRegister, UserResponse
from voicebank.services.user import UserService

router = APIRouter(prefix="/users", tags=["users"])


def _to_overview(overview: dict) -> UserOverview:
    return UserOverview(
        user=UserResponse.model_validate(overview["user"]),
        accounts=[AccountResponse.model_validate(a) for a in overview["accounts"]],
        cards=[CardResponse.model_validate(c) for c in overview["cards"]],
        transactions=[TransactionResponse.model_validate(t) for t in overview["transactions"]],
    )


@router.get(
    "",
    response_model=UserOverview,
    summary="Look up a user by email",
    description="""
    Return the user with everything the dashboard shows:
    - Accounts with balances
    - Cards with their status
    - Transactions, newest first
    """,
    responses={404: {"description": "User not found"}},
)
async def get_user_by_email(
    email: str = Query(..., min_length=3, description="Registered email address"),
    user_service: UserService = Depends(get_user_service),
) -> UserOverview:
    user = await user_service.get_by_email(email)
    return _to_overview(await user_service.get_overview(user))


@router.post(
    "/register",
    response_model=UserOverview,
    status_code=status.HTTP_201_CREATED,
    summary="Register new user",
    description="Create a user with a Checking and a Savings account and two cards.",
    responses={409: {"description": "Email already registered"}},
)
async def register(
    data: UserRegister,
    user_service: UserService = Depends(get_user_service),
) -> UserOverview:
    """
    Register a new user.

    Raises:
        409: Email already registered
        400: Validation error
    """
    user = await user_service.register(name=data.name, email=data.email)
    return _to_overview(await user_service.get_overview(user))


@router.get("/{user_id}/accounts", response_model=list[AccountResponse], summary="List user's accounts")
async def list_accounts(
    user_id: str, user_service: UserService = Depends(get_user_service)
) -> list[AccountResponse]:
    return [AccountResponse.model_validate(a) for a in await user_service.list_accounts(user_id)]


@router.get("/{user_id}/cards", response_model=list[CardResponse], summary="List user's cards")
async def list_cards(
    user_id: str, user_service: UserService = Depends(get_user_service)
) -> list[CardResponse]:
    return [CardResponse.model_validate(c) for c in await user_service.list_cards(user_id)]


@router.get(
    "/{user_id}/transactions",
    response_model=list[TransactionResponse],
    summary="List user's transactions",
    description="Transactions across all of the user's accounts, newest first.",
)
async def list_transactions(
    user_id: str, user_service: UserService = Depends(get_user_service)
) -> list[TransactionResponse]:
    return [TransactionResponse.model_validate(t) for t in await user_service.list_transactions(user_id)]
