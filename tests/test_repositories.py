"""
Tests for the repository layer.

Tests cover:
- UserRepository lookups and account unlinking
- BankAccountRepository CRUD and locked reads
- BankHistoryRepository time-window queries and bulk deletes
"""

from datetime import datetime

import pytest
from sqlalchemy.exc import IntegrityError

from budget_planning.models import Role
from budget_planning.repositories import (
    BankAccountRepository,
    BankHistoryRepository,
    UserRepository,
)


@pytest.mark.anyio
class TestUserRepository:

    async def test_create_and_get(self, async_session, password_hash):
        # Arrange
        repo = UserRepository(async_session)

        # Act
        user = await repo.create_user(
            name="vova",
            email="vova@gmail.com",
            hashed_password=password_hash,
            role=Role.PARENT,
            usage_limit=10,
        )

        # Assert
        assert user.id is not None
        assert (await repo.get_by_email("vova@gmail.com")).id == user.id
        assert await repo.email_exists("vova@gmail.com") is True
        assert await repo.email_exists("nobody@gmail.com") is False

    async def test_email_is_unique(self, async_session, password_hash):
        # Arrange
        repo = UserRepository(async_session)
        await repo.create_user("a", "dup@gmail.com", password_hash, Role.CHILD, 100)

        # Act / Assert
        with pytest.raises(IntegrityError):
            await repo.create_user("b", "dup@gmail.com", password_hash, Role.CHILD, 100)
        await async_session.rollback()

    async def test_unlink_account(self, async_session, parent_user, child_user, family_account):
        # Arrange
        repo = UserRepository(async_session)

        # Act
        unlinked = await repo.unlink_account(family_account.id)

        # Assert
        assert unlinked == 2
        assert parent_user.bank_account_id is None
        assert child_user.bank_account_id is None
        assert await repo.unlink_account(family_account.id) == 0


@pytest.mark.anyio
class TestBankAccountRepository:

    async def test_create_get_list_delete(self, async_session):
        # Arrange
        repo = BankAccountRepository(async_session)

        # Act
        first = await repo.create_account(10)
        second = await repo.create_account(0)

        # Assert
        assert (await repo.get_account(first.id)).balance == 10
        assert [a.id for a in await repo.list_accounts()] == [first.id, second.id]

        await repo.delete_account(first.id)
        assert await repo.get_account(first.id) is None
        assert [a.id for a in await repo.list_accounts()] == [second.id]

    async def test_get_for_update_refreshes_identity(self, async_session, family_account):
        # Arrange
        repo = BankAccountRepository(async_session)
        account_id = family_account.id
        family_account.balance = 5  # unflushed local change

        # Act
        await async_session.rollback()
        locked = await repo.get_for_update(account_id)

        # Assert
        assert locked is family_account
        assert locked.balance == 1000

    async def test_get_for_update_missing(self, async_session):
        assert await BankAccountRepository(async_session).get_for_update(404) is None


@pytest.mark.anyio
class TestBankHistoryRepository:

    async def _add(self, repo, user, account, timestamp, amount=1):
        return await repo.add_entry(
            operation="replenish",
            reason="test",
            amount=amount,
            user_id=user.id,
            account_id=account.id,
            timestamp=timestamp,
        )

    async def test_list_since_is_exclusive_and_ordered(self, async_session, parent_user, family_account):
        # Arrange
        repo = BankHistoryRepository(async_session)
        await self._add(repo, parent_user, family_account, datetime(2024, 5, 3), amount=3)
        await self._add(repo, parent_user, family_account, datetime(2024, 5, 1), amount=1)
        await self._add(repo, parent_user, family_account, datetime(2024, 5, 2), amount=2)

        # Act
        entries = await repo.list_for_account_since(family_account.id, datetime(2024, 5, 1))

        # Assert
        assert [e.amount for e in entries] == [2, 3]
        assert [e.amount for e in await repo.list_for_account_since(family_account.id, datetime(2000, 1, 1))] == [1, 2, 3]

    async def test_delete_for_account(self, async_session, parent_user, family_account):
        # Arrange
        repo = BankHistoryRepository(async_session)
        await self._add(repo, parent_user, family_account, datetime(2024, 5, 1))
        await self._add(repo, parent_user, family_account, datetime(2024, 5, 2))

        # Act
        removed = await repo.delete_for_account(family_account.id)

        # Assert
        assert removed == 2
        assert await repo.list_for_account_since(family_account.id, datetime(2000, 1, 1)) == []
