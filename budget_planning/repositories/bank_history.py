"""
Bank history repository.

Append-only access to the ledger: rows are added and read, and only
removed in bulk when their account is deleted.
"""

from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from budget_planning.models.bank_history import BankHistory


class BankHistoryRepository:
    """
    Repository for bank history data access.

    Attributes:
        session: SQLAlchemy async session for database operations
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add_entry(
        self,
        operation: str,
        reason: str,
        amount: int,
        user_id: int,
        account_id: int,
        timestamp: datetime,
    ) -> BankHistory:
        """
        Append a ledger row.

        Args:
            operation: "replenish" or "withdraw"
            reason: Purpose supplied by the user
            amount: Amount moved
            user_id: Acting user
            account_id: Affected account
            timestamp: UTC time of the operation

        Returns:
            Persisted BankHistory row
        """
        entry = BankHistory(
            operation=operation,
            reason=reason,
            amount=amount,
            user_id=user_id,
            account_id=account_id,
            timestamp=timestamp,
        )
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def list_for_account_since(
        self,
        account_id: int,
        since: datetime,
    ) -> list[BankHistory]:
        """
        Get ledger rows of an account recorded strictly after a moment.

        Args:
            account_id: Bank account ID
            since: Exclusive lower bound (naive UTC)

        Returns:
            Matching rows, oldest first, with the acting user loaded
        """
        stmt = (
            select(BankHistory)
            .where(
                BankHistory.account_id == account_id,
                BankHistory.timestamp > since,
            )
            .order_by(BankHistory.timestamp, BankHistory.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete_for_account(self, account_id: int) -> int:
        """
        Remove all ledger rows of an account.

        Returns:
            Number of deleted rows
        """
        stmt = (
            delete(BankHistory)
            .where(BankHistory.account_id == account_id)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        return result.rowcount
