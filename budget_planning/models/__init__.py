"""
SQLAlchemy ORM models for the budget planning service.

This module exports all database models and the declarative base.
Import models from this module to ensure they're registered with SQLAlchemy.
"""

from budget_planning.models.base import Base, MAX_INTEGER, TimestampMixin, ModelMixin
from budget_planning.models.user import (
    User,
    Role,
    DEFAULT_CHILD_USAGE_LIMIT,
    UNLIMITED_USAGE_LIMIT,
)
from budget_planning.models.bank_account import BankAccount
from budget_planning.models.bank_history import (
    BankHistory,
    OPERATION_REPLENISH,
    OPERATION_WITHDRAW,
)

# Export all models
__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    "ModelMixin",
    # Models
    "User",
    "Role",
    "BankAccount",
    "BankHistory",
    # Constants
    "MAX_INTEGER",
    "DEFAULT_CHILD_USAGE_LIMIT",
    "UNLIMITED_USAGE_LIMIT",
    "OPERATION_REPLENISH",
    "OPERATION_WITHDRAW",
]
