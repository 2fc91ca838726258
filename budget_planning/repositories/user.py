"""
User repository for user CRUD operations.

Provides data access layer for the User model: lookups by email,
creation, and bulk unlinking from a bank account.
"""

from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from budget_planning.models.bank_account import BankAccount
from budget_planning.models.user import Role, User


class UserRepository:
    """
    Repository for user data access.

    Attributes:
        session: SQLAlchemy async session for database operations
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def create_user(
        self,
        name: str,
        email: str,
        hashed_password: str,
        role: Role,
        usage_limit: int,
        bank_account: Optional[BankAccount] = None,
    ) -> User:
        """
        Create a new user.

        Args:
            name: Display name
            email: Unique email (login username)
            hashed_password: Bcrypt hash of the password
            role: Authorization role
            usage_limit: Initial usage limit
            bank_account: Account to link, if any

        Returns:
            Created User instance with generated ID

        Note:
            Email uniqueness is checked by the caller via email_exists()
            to return a friendly message; the unique index is the backstop.
        """
        user = User(
            name=name,
            email=email,
            hashed_password=hashed_password,
            role=role,
            usage_limit=usage_limit,
            bank_account=bank_account,
        )

        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)

        return user

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Retrieve a user by email (the login username).

        Args:
            email: Email to look up

        Returns:
            User instance if found, None otherwise

        Example:
            >>> user = await repo.get_by_email("vova@gmail.com")
            >>> print(user.role if user else "Not found")
            Role.PARENT
        """
        stmt = select(User).where(User.email == email)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def email_exists(self, email: str) -> bool:
        """
        Check if an email is already registered.

        Args:
            email: Email to check

        Returns:
            True if a user with this email exists, False otherwise
        """
        return await self.get_by_email(email) is not None

    async def unlink_account(self, account_id: int) -> int:
        """
        Clear the account reference of every user linked to an account.

        Args:
            account_id: Bank account ID

        Returns:
            Number of users that were unlinked
        """
        stmt = (
            update(User)
            .where(User.bank_account_id == account_id)
            .values(bank_account_id=None)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        return result.rowcount
