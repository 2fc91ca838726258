"""
Bank account repository.

Provides data access layer for the BankAccount model, including the
row-locking read used before balance changes.
"""

from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from budget_planning.models.bank_account import BankAccount


class BankAccountRepository:
    """
    Repository for bank account data access.

    Attributes:
        session: SQLAlchemy async session for database operations
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_account(self, balance: int) -> BankAccount:
        """
        Create a new bank account.

        Args:
            balance: Initial balance

        Returns:
            Created BankAccount with generated ID
        """
        account = BankAccount(balance=balance)
        self.session.add(account)
        await self.session.flush()
        await self.session.refresh(account)
        return account

    async def get_account(self, account_id: int) -> Optional[BankAccount]:
        """
        Retrieve an account by ID.

        Returns:
            BankAccount if found, None otherwise
        """
        stmt = select(BankAccount).where(BankAccount.id == account_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_for_update(self, account_id: int) -> Optional[BankAccount]:
        """
        Re-read an account with a row lock for a balance change.

        SELECT ... FOR UPDATE serializes concurrent withdrawals on
        PostgreSQL; SQLite ignores the clause and serializes writers itself.
        The identity map entry is refreshed with the locked row.

        Returns:
            BankAccount if found, None otherwise
        """
        stmt = (
            select(BankAccount)
            .where(BankAccount.id == account_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_accounts(self) -> list[BankAccount]:
        """
        Get all bank accounts.

        Returns:
            List of accounts ordered by ID
        """
        stmt = select(BankAccount).order_by(BankAccount.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete_account(self, account_id: int) -> None:
        """
        Delete an account row.

        Callers must first remove the account's history and unlink its
        users, otherwise the foreign keys reject the delete.
        """
        stmt = (
            delete(BankAccount)
            .where(BankAccount.id == account_id)
            .execution_options(synchronize_session="fetch")
        )
        await self.session.execute(stmt)
