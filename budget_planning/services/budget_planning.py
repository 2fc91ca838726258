"""
Budget planning service: account and limit rules.

Every mutating operation is one unit of work on the injected session:
guard clauses run first and raise a BudgetPlanningError subclass before
anything is written, the balance change and its ledger row are flushed
together, and the session is committed only when all checks passed.
"""

import calendar
import logging
from datetime import datetime
from typing import NoReturn, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from budget_planning.models.base import MAX_INTEGER, utc_now
from budget_planning.models.bank_account import BankAccount
from budget_planning.models.bank_history import (
    BankHistory,
    OPERATION_REPLENISH,
    OPERATION_WITHDRAW,
)
from budget_planning.models.user import Role, User
from budget_planning.repositories.bank_account import BankAccountRepository
from budget_planning.repositories.bank_history import BankHistoryRepository
from budget_planning.repositories.user import UserRepository
from budget_planning.services.exceptions import (
    AccountUpdateError,
    BankHistoryError,
    LimitUpdateError,
)

logger = logging.getLogger(__name__)


NO_ACCOUNT_MESSAGE = "You do not have a bank account!"
LIMIT_EXCEEDED_MESSAGE = "Your usage limit does not allow you to perform this operation"
NEGATIVE_BALANCE_MESSAGE = "Balance can not become less than zero after operation"
BALANCE_OVERFLOW_MESSAGE = f"Balance can not become greater than {MAX_INTEGER} after operation"
LIMIT_TARGET_NOT_FOUND_MESSAGE = "No user with such username"
LIMIT_FORBIDDEN_MESSAGE = "You can't change limit of this user"
NO_TRANSACTIONS_MESSAGE = "No transactions have been performed for this account"
LINK_USER_NOT_FOUND_MESSAGE = "There are no users with that username"
LINK_ACCOUNT_NOT_FOUND_MESSAGE = "There are no bank account with that id"


def one_month_before(moment: datetime) -> datetime:
    """
    Step back one calendar month, clamping the day to the target month.

    Example:
        >>> one_month_before(datetime(2024, 3, 31, 12, 0))
        datetime.datetime(2024, 2, 29, 12, 0)
    """
    year, month = moment.year, moment.month - 1
    if month == 0:
        year, month = year - 1, 12
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


class BudgetPlanningService:
    """
    Business rules for accounts, balances, ledger and usage limits.

    Attributes:
        session: SQLAlchemy async session shared with the request
        users: User repository
        accounts: Bank account repository
        history: Bank history repository
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.users = UserRepository(session)
        self.accounts = BankAccountRepository(session)
        self.history = BankHistoryRepository(session)

    async def register_account(self, balance: int, user: User) -> BankAccount:
        """
        Open a new account and link it to the user.

        Any previous link of the user is replaced; the old account itself
        is left untouched for the other users sharing it.

        Args:
            balance: Initial balance (validated non-negative upstream)
            user: Authenticated user

        Returns:
            The created account
        """
        account = await self.accounts.create_account(balance)
        user.bank_account = account
        await self.session.commit()

        logger.info(
            "Bank account registered",
            extra={"user_id": user.id, "account_id": account.id, "balance": balance},
        )
        return account

    async def replenish_account(self, amount: int, reason: str, user: User) -> BankAccount:
        """
        Add money to the user's account and record it in the ledger.

        Raises:
            AccountUpdateError: If the user has no account or the balance
                would leave the Integer column range
        """
        account = await self._locked_account(user)

        new_balance = account.balance + amount
        if new_balance > MAX_INTEGER:
            self._reject(BALANCE_OVERFLOW_MESSAGE, user, amount=amount)

        account.balance = new_balance
        await self._record(OPERATION_REPLENISH, reason, amount, user, account)
        await self.session.commit()

        logger.info(
            "Account replenished",
            extra={"user_id": user.id, "account_id": account.id, "amount": amount},
        )
        return account

    async def withdraw_account(self, amount: int, reason: str, user: User) -> BankAccount:
        """
        Take money from the user's account and record it in the ledger.

        Checks run in this order: usage limit, account presence,
        non-negative resulting balance. A balance of exactly zero is allowed.

        Raises:
            AccountUpdateError: If any of the checks fails
        """
        if amount > user.usage_limit:
            self._reject(LIMIT_EXCEEDED_MESSAGE, user, amount=amount)

        account = await self._locked_account(user)

        new_balance = account.balance - amount
        if new_balance < 0:
            self._reject(NEGATIVE_BALANCE_MESSAGE, user, amount=amount)

        account.balance = new_balance
        await self._record(OPERATION_WITHDRAW, reason, amount, user, account)
        await self.session.commit()

        logger.info(
            "Account withdrawn",
            extra={"user_id": user.id, "account_id": account.id, "amount": amount},
        )
        return account

    async def update_limit(self, email: str, usage_limit: int, user: User) -> User:
        """
        Change the usage limit of a child sharing the caller's account.

        Args:
            email: Email of the child
            usage_limit: New limit (validated positive upstream)
            user: Authenticated parent or admin

        Returns:
            The updated child

        Raises:
            LimitUpdateError: If the child is unknown, is not a child,
                or does not share the caller's account
        """
        child = await self.users.get_by_email(email)
        if child is None:
            raise LimitUpdateError(LIMIT_TARGET_NOT_FOUND_MESSAGE)

        shares_account = (
            child.bank_account_id is not None
            and child.bank_account_id == user.bank_account_id
        )
        if child.role is not Role.CHILD or not shares_account:
            logger.warning(
                "Usage limit change rejected",
                extra={"user_id": user.id, "target_user_id": child.id},
            )
            raise LimitUpdateError(LIMIT_FORBIDDEN_MESSAGE)

        child.usage_limit = usage_limit
        await self.session.commit()

        logger.info(
            "Usage limit updated",
            extra={"user_id": user.id, "target_user_id": child.id, "usage_limit": usage_limit},
        )
        return child

    async def get_account_history(self, user: User, now: Optional[datetime] = None) -> list[BankHistory]:
        """
        Ledger rows of the user's account for the trailing calendar month.

        Args:
            user: Authenticated user
            now: Reference time (naive UTC), defaults to the current time

        Returns:
            Rows recorded strictly after one month before `now`, oldest first

        Raises:
            BankHistoryError: If the user has no account or no rows match
        """
        if user.bank_account_id is None:
            raise BankHistoryError(NO_ACCOUNT_MESSAGE)

        since = one_month_before(now or utc_now())
        entries = await self.history.list_for_account_since(user.bank_account_id, since)
        if not entries:
            raise BankHistoryError(NO_TRANSACTIONS_MESSAGE)

        return entries

    async def link_user_to_account(self, email: str, account_id: int) -> User:
        """
        Point a user at an existing account (admin operation).

        Raises:
            AccountUpdateError: If the user or the account does not exist
        """
        target = await self.users.get_by_email(email)
        if target is None:
            raise AccountUpdateError(LINK_USER_NOT_FOUND_MESSAGE)

        account = await self.accounts.get_account(account_id)
        if account is None:
            raise AccountUpdateError(LINK_ACCOUNT_NOT_FOUND_MESSAGE)

        target.bank_account = account
        await self.session.commit()

        logger.info(
            "User linked to bank account",
            extra={"target_user_id": target.id, "account_id": account.id},
        )
        return target

    async def list_accounts(self) -> list[BankAccount]:
        """All accounts ordered by ID (admin operation)."""
        return await self.accounts.list_accounts()

    async def delete_account(self, account_id: int) -> bool:
        """
        Delete an account together with its ledger (admin operation).

        Linked users keep existing and lose their account reference.

        Returns:
            False if no account has this ID, True once it is deleted
        """
        account = await self.accounts.get_account(account_id)
        if account is None:
            return False

        removed_entries = await self.history.delete_for_account(account_id)
        unlinked_users = await self.users.unlink_account(account_id)
        await self.accounts.delete_account(account_id)
        await self.session.commit()

        logger.info(
            "Bank account deleted",
            extra={
                "account_id": account_id,
                "removed_entries": removed_entries,
                "unlinked_users": unlinked_users,
            },
        )
        return True

    async def _locked_account(self, user: User) -> BankAccount:
        if user.bank_account_id is None:
            self._reject(NO_ACCOUNT_MESSAGE, user)

        account = await self.accounts.get_for_update(user.bank_account_id)
        if account is None:
            self._reject(NO_ACCOUNT_MESSAGE, user)
        return account

    async def _record(
        self,
        operation: str,
        reason: str,
        amount: int,
        user: User,
        account: BankAccount,
    ) -> BankHistory:
        return await self.history.add_entry(
            operation=operation,
            reason=reason,
            amount=amount,
            user_id=user.id,
            account_id=account.id,
            timestamp=utc_now(),
        )

    @staticmethod
    def _reject(message: str, user: User, **extra) -> NoReturn:
        logger.warning(
            f"Account update rejected: {message}",
            extra={"user_id": user.id, "account_id": user.bank_account_id, **extra},
        )
        raise AccountUpdateError(message)
