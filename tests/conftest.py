"""
Pytest configuration and shared fixtures.

This module provides:
- Environment variable setup for tests
- An in-memory database recreated for every test
- Users of each role, bearer headers for them, and an HTTP client
"""

import os
import sys
from pathlib import Path

import pytest


# Set test environment variables BEFORE any imports
# This must happen first to ensure settings load with test values
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test_secret_key_at_least_32_characters_long_for_jwt"
os.environ["ACCESS_TOKEN_EXPIRE_MINUTES"] = "60"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_JSON"] = "false"

# Add project root to path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))


TEST_PASSWORD = "1234"


@pytest.fixture
def anyio_backend():
    """
    Configure anyio backend for async tests.

    Returns:
        str: Backend name ("asyncio")
    """
    return "asyncio"


@pytest.fixture(scope="session")
def password_hash():
    """Bcrypt hash of TEST_PASSWORD, computed once per run."""
    from budget_planning.core.security import get_password_hash

    return get_password_hash(TEST_PASSWORD)


@pytest.fixture(scope="function")
async def async_session():
    """
    Provide an async database session.

    Creates tables before test and drops them after.
    """
    from budget_planning.core.database import engine, async_session_maker
    from budget_planning.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_maker() as session:
        yield session
        await session.commit()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def make_user(async_session, password_hash):
    """
    Factory creating and committing a user.

    Example:
        child = await make_user("kid@gmail.com", Role.CHILD, account=account)
    """
    from budget_planning.repositories.user import UserRepository

    async def _make_user(email, role, account=None, usage_limit=None, name=None):
        user = await UserRepository(async_session).create_user(
            name=name or email.split("@")[0],
            email=email,
            hashed_password=password_hash,
            role=role,
            usage_limit=usage_limit if usage_limit is not None else role.default_usage_limit(),
            bank_account=account,
        )
        await async_session.commit()
        return user

    return _make_user


@pytest.fixture
async def family_account(async_session):
    """Bank account with a balance of 1000."""
    from budget_planning.repositories.bank_account import BankAccountRepository

    account = await BankAccountRepository(async_session).create_account(1000)
    await async_session.commit()
    return account


@pytest.fixture
async def parent_user(make_user, family_account):
    from budget_planning.models import Role

    return await make_user("parent@gmail.com", Role.PARENT, account=family_account)


@pytest.fixture
async def child_user(make_user, family_account):
    from budget_planning.models import Role

    return await make_user("child@gmail.com", Role.CHILD, account=family_account)


@pytest.fixture
async def admin_user(make_user):
    from budget_planning.models import Role

    return await make_user("admin@gmail.com", Role.ADMIN)


@pytest.fixture
def bearer():
    """
    Build the Authorization header for a user.

    Example:
        response = await client.get("/api/v1/auth/me", headers=bearer(parent_user))
    """
    from budget_planning.core.security import create_user_token

    def _bearer(user) -> dict:
        return {"Authorization": f"Bearer {create_user_token(user)}"}

    return _bearer


@pytest.fixture
async def client(async_session):
    """HTTP client bound to the application, with tables in place."""
    from httpx import AsyncClient, ASGITransport
    from budget_planning.main import app

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
