"""
User endpoints: self-registration, child usage limits and account links.
"""

from fastapi import APIRouter, status

from budget_planning.api.dependencies import AdminUser, DatabaseSession, ParentOrAdminUser
from budget_planning.schemas.account import UserWithLimitResponse
from budget_planning.schemas.user import (
    LimitUpdateRequest,
    MessageResponse,
    UpdateUserRequest,
    UserRegistrationRequest,
    UserResponse,
)
from budget_planning.services.budget_planning import BudgetPlanningService
from budget_planning.services.registration import RegistrationService

router = APIRouter()


@router.post(
    "/register",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
async def register_user(request: UserRegistrationRequest, db: DatabaseSession) -> MessageResponse:
    """
    Public registration.

    The email becomes the login username. Children start with a usage
    limit of 100, parents and admins are unlimited. An unknown
    `account_id` still registers the user, without an account.
    """
    service = RegistrationService(db)
    _, message = await service.register(
        name=request.name,
        email=request.email,
        password=request.password,
        role=request.role,
        account_id=request.account_id,
    )
    return MessageResponse(message=message)


@router.post(
    "/limit",
    response_model=UserWithLimitResponse,
    summary="Change a child's usage limit",
)
async def update_limit(
    request: LimitUpdateRequest,
    current_user: ParentOrAdminUser,
    db: DatabaseSession,
) -> UserWithLimitResponse:
    """Only children sharing the caller's bank account can be updated."""
    service = BudgetPlanningService(db)
    child = await service.update_limit(request.username, request.usage_limit, current_user)
    return UserWithLimitResponse.model_validate(child)


@router.post(
    "/account",
    response_model=UserResponse,
    summary="Link a user to a bank account",
)
async def link_account(
    request: UpdateUserRequest,
    current_user: AdminUser,
    db: DatabaseSession,
) -> UserResponse:
    service = BudgetPlanningService(db)
    user = await service.link_user_to_account(request.username, request.account_id)
    return UserResponse.from_user(user)
