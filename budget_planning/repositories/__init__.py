"""
Repository layer for data access.

Provides data access abstractions following the Repository pattern,
isolating database access from business logic.
"""

from budget_planning.repositories.user import UserRepository
from budget_planning.repositories.bank_account import BankAccountRepository
from budget_planning.repositories.bank_history import BankHistoryRepository

__all__ = [
    "UserRepository",
    "BankAccountRepository",
    "BankHistoryRepository",
]
