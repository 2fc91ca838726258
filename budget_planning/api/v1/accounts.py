"""
Bank account endpoints.

Balance operations act on the caller's own account. Listing and
deleting accounts are administrator operations.
"""

from typing import Annotated, List, Optional

from fastapi import APIRouter, Query

from budget_planning.api.dependencies import AdminUser, CurrentUser, DatabaseSession
from budget_planning.models.base import MAX_INTEGER
from budget_planning.schemas.account import (
    AccountRegistrationRequest,
    AccountUpdateRequest,
    AccountUpdateResponse,
    BankAccountResponse,
    BankHistoryResponse,
)
from budget_planning.schemas.user import MessageResponse
from budget_planning.services.budget_planning import BudgetPlanningService
from budget_planning.services.exceptions import AccountUpdateError

router = APIRouter()


WRONG_ID_MESSAGE = "Wrong id"
ACCOUNT_DELETED_MESSAGE = "Account deleted"


@router.post("/register", response_model=AccountUpdateResponse, summary="Open a bank account")
async def register_account(
    request: AccountRegistrationRequest,
    current_user: CurrentUser,
    db: DatabaseSession,
) -> AccountUpdateResponse:
    """
    Create an account with the given balance and link it to the caller.

    A previous link is replaced; the old account keeps existing.
    """
    service = BudgetPlanningService(db)
    account = await service.register_account(request.balance, current_user)
    return AccountUpdateResponse.from_account(account)


@router.post("/replenish", response_model=AccountUpdateResponse, summary="Add money")
async def replenish_account(
    request: AccountUpdateRequest,
    current_user: CurrentUser,
    db: DatabaseSession,
) -> AccountUpdateResponse:
    service = BudgetPlanningService(db)
    account = await service.replenish_account(request.amount, request.reason, current_user)
    return AccountUpdateResponse.from_account(account)


@router.post("/withdraw", response_model=AccountUpdateResponse, summary="Take money")
async def withdraw_account(
    request: AccountUpdateRequest,
    current_user: CurrentUser,
    db: DatabaseSession,
) -> AccountUpdateResponse:
    """
    Withdraw within the caller's usage limit.

    The resulting balance may reach zero but never go below it.
    """
    service = BudgetPlanningService(db)
    account = await service.withdraw_account(request.amount, request.reason, current_user)
    return AccountUpdateResponse.from_account(account)


@router.get("/history", response_model=List[BankHistoryResponse], summary="Last month of operations")
async def account_history(current_user: CurrentUser, db: DatabaseSession) -> List[BankHistoryResponse]:
    """
    Operations on the caller's account during the trailing calendar month.

    Example response:
        [
            {
                "operation": "replenish",
                "reason": "payday",
                "timestamp": "2024-05-19T09:01:06",
                "amount": 1100,
                "user": {"name": "vova", "email": "vova@gmail.com", "usage_limit": 2147483647}
            }
        ]
    """
    service = BudgetPlanningService(db)
    entries = await service.get_account_history(current_user)
    return [BankHistoryResponse.model_validate(entry) for entry in entries]


@router.get("/all", response_model=List[BankAccountResponse], summary="List all accounts")
async def list_accounts(current_user: AdminUser, db: DatabaseSession) -> List[BankAccountResponse]:
    service = BudgetPlanningService(db)
    accounts = await service.list_accounts()
    return [BankAccountResponse.model_validate(account) for account in accounts]


@router.delete("/delete", response_model=MessageResponse, summary="Delete an account")
async def delete_account(
    current_user: AdminUser,
    db: DatabaseSession,
    id: Annotated[Optional[int], Query(description="Bank account ID")] = None,
) -> MessageResponse:
    """
    Delete an account and its history; linked users lose the link.

    Raises:
        AccountUpdateError: "Wrong id" when no account has this ID
            (IDs outside the Integer column range never match)
    """
    service = BudgetPlanningService(db)
    if id is None or not 1 <= id <= MAX_INTEGER or not await service.delete_account(id):
        raise AccountUpdateError(WRONG_ID_MESSAGE)
    return MessageResponse(message=ACCOUNT_DELETED_MESSAGE)
