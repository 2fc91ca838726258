"""
Pydantic schemas for user endpoints.

Request fields are declared optional and validated with explicit messages,
so a missing field and an invalid one produce the same client-facing text.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from budget_planning.models.user import User
from budget_planning.schemas.account import BankAccountResponse, require_in_range


def require_text(value: Optional[str], message: str) -> str:
    """Reject None, empty and whitespace-only strings."""
    if value is None or not value.strip():
        raise ValueError(message)
    return value


class UserRegistrationRequest(BaseModel):
    """
    Request schema for registering a new user.

    Attributes:
        name: Display name
        email: Email, becomes the login username
        password: Plain text password (hashed before storage)
        role: admin, parent or child (case-insensitive)
        account_id: Existing bank account to link (optional)
    """
    name: Optional[str] = Field(default=None, validate_default=True, examples=["vova"])
    email: Optional[str] = Field(default=None, validate_default=True, examples=["vova@gmail.com"])
    password: Optional[str] = Field(default=None, validate_default=True, examples=["1234"])
    role: Optional[str] = Field(default=None, validate_default=True, examples=["parent"])
    account_id: Optional[int] = Field(default=None, description="Existing bank account to link")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return require_text(v, "Write down your name!")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return require_text(v, "Write down your email!")

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        return require_text(v, "Write down your password!")

    @field_validator("role")
    @classmethod
    def validate_role(cls, v):
        return require_text(v, "Write down your role!")

    @field_validator("account_id")
    @classmethod
    def validate_account_id(cls, v):
        if v is None:
            return v
        return require_in_range(v, 0, "Write down correct bank account id!")


class LimitUpdateRequest(BaseModel):
    """
    Request schema for changing a child's usage limit.

    Attributes:
        username: Email of the child
        usage_limit: New maximum single-withdrawal amount
    """
    username: Optional[str] = Field(default=None, validate_default=True, examples=["vova@gmail.com"])
    usage_limit: Optional[int] = Field(default=None, validate_default=True, examples=[10])

    @field_validator("username")
    @classmethod
    def validate_username(cls, v):
        return require_text(v, "Write down username!")

    @field_validator("usage_limit")
    @classmethod
    def validate_usage_limit(cls, v):
        return require_in_range(v, 1, "Write down new limit!")


class UpdateUserRequest(BaseModel):
    """
    Request schema for linking a user to a bank account.

    Attributes:
        username: Email of the user
        account_id: Existing bank account ID
    """
    username: Optional[str] = Field(default=None, validate_default=True, examples=["vova@gmail.com"])
    account_id: Optional[int] = Field(default=None, validate_default=True, examples=[1])

    @field_validator("username")
    @classmethod
    def validate_username(cls, v):
        return require_text(v, "Write down username!")

    @field_validator("account_id")
    @classmethod
    def validate_account_id(cls, v):
        if v is None:
            raise ValueError("Write down bank account id!")
        return require_in_range(v, 1, "Write down correct bank account id!")


class MessageResponse(BaseModel):
    """Plain message returned by registration and deletion endpoints."""
    message: str


class UserResponse(BaseModel):
    """
    Full user representation (without credentials).

    Attributes:
        user_id: Primary key
        name: Display name
        email: Email (login username)
        role: ADMIN, PARENT or CHILD
        usage_limit: Maximum single-withdrawal amount
        bank_account: Linked account, or None
    """
    user_id: int
    name: str
    email: str
    role: str
    usage_limit: int
    bank_account: Optional[BankAccountResponse] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "user_id": 1,
                "name": "vova",
                "email": "vova@gmail.com",
                "role": "PARENT",
                "usage_limit": 100,
                "bank_account": {"id": 1, "balance": 1000},
            }
        },
    )

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        account = user.bank_account if user.bank_account_id is not None else None
        return cls(
            user_id=user.id,
            name=user.name,
            email=user.email,
            role=user.role.value,
            usage_limit=user.usage_limit,
            bank_account=BankAccountResponse.model_validate(account) if account else None,
        )
