"""
Pydantic schemas for bank account endpoints.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from budget_planning.models.bank_account import BankAccount
from budget_planning.models.base import MAX_INTEGER


def require_in_range(value: Optional[int], minimum: int, message: str) -> int:
    """Reject None and integers outside `minimum`..MAX_INTEGER."""
    if value is None or not minimum <= value <= MAX_INTEGER:
        raise ValueError(message)
    return value


class AccountRegistrationRequest(BaseModel):
    """
    Request schema for opening a bank account.

    Attributes:
        balance: Initial balance, zero up to MAX_INTEGER
    """
    balance: Optional[int] = Field(default=None, validate_default=True, examples=[10000])

    @field_validator("balance")
    @classmethod
    def validate_balance(cls, v):
        return require_in_range(v, 0, "Write down initial balance of the account!")


class AccountUpdateRequest(BaseModel):
    """
    Request schema for replenish and withdraw operations.

    Attributes:
        amount: Amount to move, 1 up to MAX_INTEGER
        reason: Purpose of the operation, stored in the ledger
    """
    amount: Optional[int] = Field(default=None, validate_default=True, examples=[100])
    reason: Optional[str] = Field(default=None, validate_default=True, examples=["Buy candy"])

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v):
        return require_in_range(v, 1, "Write down with how much money you want to update your account!")

    @field_validator("reason")
    @classmethod
    def validate_reason(cls, v):
        if v is None or not v.strip():
            raise ValueError("Write down purpose of the operation!")
        return v


class AccountUpdateResponse(BaseModel):
    """
    Account state after an operation.

    Attributes:
        account_id: Account primary key
        balance: Balance after the operation
    """
    account_id: int
    balance: int

    model_config = ConfigDict(
        json_schema_extra={"example": {"account_id": 2, "balance": 10000}},
    )

    @classmethod
    def from_account(cls, account: BankAccount) -> "AccountUpdateResponse":
        return cls(account_id=account.id, balance=account.balance)


class BankAccountResponse(BaseModel):
    """Bank account as listed to administrators."""
    id: int
    balance: int

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={"example": {"id": 1, "balance": 1000}},
    )


class UserWithLimitResponse(BaseModel):
    """
    Public user summary with the usage limit.

    Also embedded in history entries as the acting user.
    """
    name: str
    email: str
    usage_limit: int

    model_config = ConfigDict(from_attributes=True)


class BankHistoryResponse(BaseModel):
    """
    Ledger entry as shown to account members.

    Attributes:
        operation: replenish or withdraw
        reason: Purpose of the operation
        timestamp: UTC time of the operation
        amount: Amount moved
        user: Who performed the operation
    """
    operation: str
    reason: str
    timestamp: datetime
    amount: int
    user: UserWithLimitResponse

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "operation": "replenish",
                "reason": "payday",
                "timestamp": "2024-05-19T09:01:06",
                "amount": 1100,
                "user": {"name": "vova", "email": "vova@gmail.com", "usage_limit": 100},
            }
        },
    )
