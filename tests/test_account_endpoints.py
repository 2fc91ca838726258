"""
Integration tests for bank account endpoints.

Tests cover:
- POST /api/v1/account/register
- POST /api/v1/account/replenish and /withdraw, with every rejection
- GET /api/v1/account/history
- GET /api/v1/account/all and DELETE /api/v1/account/delete (admin)
"""

from datetime import timedelta

import pytest
from sqlalchemy import select

from budget_planning.core.database import async_session_maker
from budget_planning.models import BankAccount, BankHistory, MAX_INTEGER, Role, User
from budget_planning.models.base import utc_now
from budget_planning.repositories.bank_history import BankHistoryRepository


async def fetch_balance(account_id):
    async with async_session_maker() as session:
        account = await session.get(BankAccount, account_id)
        return account.balance if account else None


async def count_history(account_id):
    async with async_session_maker() as session:
        result = await session.execute(
            select(BankHistory).where(BankHistory.account_id == account_id)
        )
        return len(result.scalars().all())


@pytest.mark.anyio
class TestRegisterAccount:
    """Test POST /account/register."""

    async def test_register_links_new_account(self, client, bearer, make_user):
        # Arrange
        user = await make_user("solo@gmail.com", Role.PARENT)

        # Act
        response = await client.post(
            "/api/v1/account/register",
            json={"balance": 10000},
            headers=bearer(user),
        )

        # Assert
        assert response.status_code == 200
        data = response.json()
        assert data["balance"] == 10000

        me = await client.get("/api/v1/auth/me", headers=bearer(user))
        assert me.json()["bank_account"] == {"id": data["account_id"], "balance": 10000}

    async def test_register_replaces_previous_link(self, client, bearer, parent_user, family_account):
        # Act
        response = await client.post(
            "/api/v1/account/register",
            json={"balance": 0},
            headers=bearer(parent_user),
        )

        # Assert
        assert response.status_code == 200
        assert response.json()["account_id"] != family_account.id
        assert await fetch_balance(family_account.id) == 1000

    async def test_register_negative_balance(self, client, bearer, parent_user):
        # Act
        response = await client.post(
            "/api/v1/account/register",
            json={"balance": -1},
            headers=bearer(parent_user),
        )

        # Assert
        assert response.status_code == 400
        assert response.json() == {"error": "Write down initial balance of the account!"}

    async def test_register_missing_balance(self, client, bearer, parent_user):
        # Act
        response = await client.post(
            "/api/v1/account/register",
            json={},
            headers=bearer(parent_user),
        )

        # Assert
        assert response.status_code == 400
        assert response.json() == {"error": "Write down initial balance of the account!"}

    async def test_register_balance_beyond_integer_range(self, client, bearer, parent_user):
        # Act
        response = await client.post(
            "/api/v1/account/register",
            json={"balance": 10**20},
            headers=bearer(parent_user),
        )

        # Assert
        assert response.status_code == 400
        assert response.json() == {"error": "Write down initial balance of the account!"}

    async def test_register_largest_balance(self, client, bearer, parent_user):
        # Act
        response = await client.post(
            "/api/v1/account/register",
            json={"balance": MAX_INTEGER},
            headers=bearer(parent_user),
        )

        # Assert
        assert response.status_code == 200
        assert response.json()["balance"] == MAX_INTEGER


@pytest.mark.anyio
class TestReplenish:
    """Test POST /account/replenish."""

    async def test_replenish_adds_amount_and_records_history(
        self, client, bearer, parent_user, family_account
    ):
        # Act
        response = await client.post(
            "/api/v1/account/replenish",
            json={"amount": 500, "reason": "payday"},
            headers=bearer(parent_user),
        )

        # Assert
        assert response.status_code == 200
        assert response.json() == {"account_id": family_account.id, "balance": 1500}
        assert await fetch_balance(family_account.id) == 1500
        assert await count_history(family_account.id) == 1

    async def test_replenish_without_account(self, client, bearer, admin_user):
        # Act
        response = await client.post(
            "/api/v1/account/replenish",
            json={"amount": 500, "reason": "payday"},
            headers=bearer(admin_user),
        )

        # Assert
        assert response.status_code == 400
        assert response.json() == {"error": "You do not have a bank account!"}

    async def test_replenish_past_integer_range_rejected(self, client, bearer, parent_user, family_account):
        # Arrange
        first = await client.post(
            "/api/v1/account/replenish",
            json={"amount": 2_000_000_000, "reason": "inheritance"},
            headers=bearer(parent_user),
        )
        assert first.status_code == 200

        # Act
        response = await client.post(
            "/api/v1/account/replenish",
            json={"amount": 2_000_000_000, "reason": "inheritance"},
            headers=bearer(parent_user),
        )

        # Assert
        assert response.status_code == 400
        assert response.json() == {
            "error": f"Balance can not become greater than {MAX_INTEGER} after operation"
        }
        assert await fetch_balance(family_account.id) == 2_000_001_000
        assert await count_history(family_account.id) == 1

    @pytest.mark.parametrize(
        "body, message",
        [
            ({"amount": 0, "reason": "payday"}, "Write down with how much money you want to update your account!"),
            ({"reason": "payday"}, "Write down with how much money you want to update your account!"),
            ({"amount": 10**20, "reason": "lottery"}, "Write down with how much money you want to update your account!"),
            ({"amount": 10, "reason": "   "}, "Write down purpose of the operation!"),
            ({"amount": 10}, "Write down purpose of the operation!"),
        ],
    )
    async def test_replenish_validation(self, client, bearer, parent_user, family_account, body, message):
        # Act
        response = await client.post(
            "/api/v1/account/replenish",
            json=body,
            headers=bearer(parent_user),
        )

        # Assert
        assert response.status_code == 400
        assert response.json() == {"error": message}
        assert await count_history(family_account.id) == 0


@pytest.mark.anyio
class TestWithdraw:
    """Test POST /account/withdraw."""

    async def test_withdraw_subtracts_amount(self, client, bearer, parent_user, family_account):
        # Act
        response = await client.post(
            "/api/v1/account/withdraw",
            json={"amount": 300, "reason": "groceries"},
            headers=bearer(parent_user),
        )

        # Assert
        assert response.status_code == 200
        assert response.json() == {"account_id": family_account.id, "balance": 700}
        assert await count_history(family_account.id) == 1

    async def test_withdraw_to_exactly_zero(self, client, bearer, parent_user, family_account):
        # Act
        response = await client.post(
            "/api/v1/account/withdraw",
            json={"amount": 1000, "reason": "rent"},
            headers=bearer(parent_user),
        )

        # Assert
        assert response.status_code == 200
        assert response.json()["balance"] == 0

    async def test_withdraw_below_zero_rejected(self, client, bearer, parent_user, family_account):
        # Act
        response = await client.post(
            "/api/v1/account/withdraw",
            json={"amount": 1001, "reason": "rent"},
            headers=bearer(parent_user),
        )

        # Assert
        assert response.status_code == 400
        assert response.json() == {"error": "Balance can not become less than zero after operation"}
        assert await fetch_balance(family_account.id) == 1000
        assert await count_history(family_account.id) == 0

    async def test_child_over_limit_rejected(self, client, bearer, child_user, family_account):
        # Act
        response = await client.post(
            "/api/v1/account/withdraw",
            json={"amount": 101, "reason": "candy"},
            headers=bearer(child_user),
        )

        # Assert
        assert response.status_code == 400
        assert response.json() == {"error": "Your usage limit does not allow you to perform this operation"}
        assert await fetch_balance(family_account.id) == 1000

    async def test_child_at_limit_allowed(self, client, bearer, child_user, family_account):
        # Act
        response = await client.post(
            "/api/v1/account/withdraw",
            json={"amount": 100, "reason": "candy"},
            headers=bearer(child_user),
        )

        # Assert
        assert response.status_code == 200
        assert response.json()["balance"] == 900

    async def test_limit_checked_before_account(self, client, bearer, make_user):
        """A child without account over its limit gets the limit message."""
        # Arrange
        orphan = await make_user("orphan@gmail.com", Role.CHILD)

        # Act
        response = await client.post(
            "/api/v1/account/withdraw",
            json={"amount": 500, "reason": "toy"},
            headers=bearer(orphan),
        )

        # Assert
        assert response.status_code == 400
        assert response.json() == {"error": "Your usage limit does not allow you to perform this operation"}

    async def test_withdraw_without_account(self, client, bearer, admin_user):
        # Act
        response = await client.post(
            "/api/v1/account/withdraw",
            json={"amount": 5, "reason": "toy"},
            headers=bearer(admin_user),
        )

        # Assert
        assert response.status_code == 400
        assert response.json() == {"error": "You do not have a bank account!"}


@pytest.mark.anyio
class TestHistory:
    """Test GET /account/history."""

    async def test_history_lists_operations_oldest_first(
        self, client, bearer, parent_user, child_user, family_account
    ):
        # Arrange
        await client.post(
            "/api/v1/account/replenish",
            json={"amount": 1100, "reason": "payday"},
            headers=bearer(parent_user),
        )
        await client.post(
            "/api/v1/account/withdraw",
            json={"amount": 50, "reason": "candy"},
            headers=bearer(child_user),
        )

        # Act
        response = await client.get("/api/v1/account/history", headers=bearer(child_user))

        # Assert
        assert response.status_code == 200
        entries = response.json()
        assert [e["operation"] for e in entries] == ["replenish", "withdraw"]
        assert entries[0]["reason"] == "payday"
        assert entries[0]["amount"] == 1100
        assert entries[0]["user"] == {
            "name": "parent",
            "email": "parent@gmail.com",
            "usage_limit": parent_user.usage_limit,
        }
        assert entries[1]["user"]["email"] == "child@gmail.com"
        assert "timestamp" in entries[1]

    async def test_history_excludes_entries_older_than_a_month(
        self, client, bearer, async_session, parent_user, family_account
    ):
        # Arrange
        history = BankHistoryRepository(async_session)
        await history.add_entry(
            operation="replenish",
            reason="old",
            amount=1,
            user_id=parent_user.id,
            account_id=family_account.id,
            timestamp=utc_now() - timedelta(days=40),
        )
        await history.add_entry(
            operation="replenish",
            reason="recent",
            amount=2,
            user_id=parent_user.id,
            account_id=family_account.id,
            timestamp=utc_now() - timedelta(days=3),
        )
        await async_session.commit()

        # Act
        response = await client.get("/api/v1/account/history", headers=bearer(parent_user))

        # Assert
        assert response.status_code == 200
        assert [e["reason"] for e in response.json()] == ["recent"]

    async def test_history_empty(self, client, bearer, parent_user):
        # Act
        response = await client.get("/api/v1/account/history", headers=bearer(parent_user))

        # Assert
        assert response.status_code == 400
        assert response.json() == {"error": "No transactions have been performed for this account"}

    async def test_history_without_account(self, client, bearer, admin_user):
        # Act
        response = await client.get("/api/v1/account/history", headers=bearer(admin_user))

        # Assert
        assert response.status_code == 400
        assert response.json() == {"error": "You do not have a bank account!"}


@pytest.mark.anyio
class TestAdminAccounts:
    """Test GET /account/all and DELETE /account/delete."""

    async def test_list_accounts(self, client, bearer, admin_user, family_account, async_session):
        # Arrange
        second = BankAccount(balance=5)
        async_session.add(second)
        await async_session.commit()

        # Act
        response = await client.get("/api/v1/account/all", headers=bearer(admin_user))

        # Assert
        assert response.status_code == 200
        assert response.json() == [
            {"id": family_account.id, "balance": 1000},
            {"id": second.id, "balance": 5},
        ]

    async def test_delete_account_unlinks_users_and_removes_history(
        self, client, bearer, admin_user, parent_user, child_user, family_account
    ):
        # Arrange
        await client.post(
            "/api/v1/account/replenish",
            json={"amount": 10, "reason": "gift"},
            headers=bearer(parent_user),
        )

        # Act
        response = await client.delete(
            "/api/v1/account/delete",
            params={"id": family_account.id},
            headers=bearer(admin_user),
        )

        # Assert
        assert response.status_code == 200
        assert response.json() == {"message": "Account deleted"}
        assert await fetch_balance(family_account.id) is None
        assert await count_history(family_account.id) == 0

        async with async_session_maker() as session:
            result = await session.execute(
                select(User).where(User.email.in_(["parent@gmail.com", "child@gmail.com"]))
            )
            assert all(user.bank_account_id is None for user in result.scalars())

    async def test_delete_unknown_account(self, client, bearer, admin_user):
        # Act
        response = await client.delete(
            "/api/v1/account/delete",
            params={"id": 999},
            headers=bearer(admin_user),
        )

        # Assert
        assert response.status_code == 400
        assert response.json() == {"error": "Wrong id"}

    async def test_delete_id_beyond_integer_range(self, client, bearer, admin_user):
        # Act
        response = await client.delete(
            "/api/v1/account/delete",
            params={"id": 10**20},
            headers=bearer(admin_user),
        )

        # Assert
        assert response.status_code == 400
        assert response.json() == {"error": "Wrong id"}

    async def test_delete_requires_admin(self, client, bearer, parent_user, family_account):
        # Act
        response = await client.delete(
            "/api/v1/account/delete",
            params={"id": family_account.id},
            headers=bearer(parent_user),
        )

        # Assert
        assert response.status_code == 403
        assert await fetch_balance(family_account.id) == 1000
