"""
User registration service.

Creates users with a hashed password, a role-derived usage limit and an
optional link to an existing bank account.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from budget_planning.core.security import get_password_hash
from budget_planning.models.user import Role, User
from budget_planning.repositories.bank_account import BankAccountRepository
from budget_planning.repositories.user import UserRepository
from budget_planning.services.exceptions import RegistrationError

logger = logging.getLogger(__name__)


USER_EXISTS_MESSAGE = "Such a user already exists!"
WRONG_ROLE_MESSAGE = "Wrong role provided"
REGISTERED_MESSAGE = "Successfully registered, your email is your username"
ACCOUNT_NOT_FOUND_SUFFIX = "But bank account not found, ask admin for help or create a new one"


class RegistrationService:
    """
    Service for registering new users.

    Attributes:
        session: SQLAlchemy async session
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.users = UserRepository(session)
        self.accounts = BankAccountRepository(session)

    async def register(
        self,
        name: str,
        email: str,
        password: str,
        role: str,
        account_id: Optional[int] = None,
    ) -> tuple[User, str]:
        """
        Register a new user.

        Args:
            name: Display name
            email: Email, used as the login username
            password: Plain text password (hashed before storage)
            role: Role name, case-insensitive (admin, parent, child)
            account_id: Existing account to link, if any

        Returns:
            Tuple of (created user, message for the client). When the
            account cannot be found the user is still created, unlinked,
            and the message says so.

        Raises:
            RegistrationError: If the email is taken or the role is unknown
        """
        if await self.users.email_exists(email):
            raise RegistrationError(USER_EXISTS_MESSAGE)

        parsed_role = Role.parse(role)
        if parsed_role is None:
            raise RegistrationError(WRONG_ROLE_MESSAGE)

        account = None
        if account_id is not None:
            account = await self.accounts.get_account(account_id)

        user = await self.users.create_user(
            name=name,
            email=email,
            hashed_password=get_password_hash(password),
            role=parsed_role,
            usage_limit=parsed_role.default_usage_limit(),
            bank_account=account,
        )
        await self.session.commit()

        logger.info(
            "User registered",
            extra={
                "user_id": user.id,
                "role": parsed_role.value,
                "account_id": user.bank_account_id,
            },
        )

        if account is None:
            return user, f"{REGISTERED_MESSAGE}. {ACCOUNT_NOT_FOUND_SUFFIX}"
        return user, REGISTERED_MESSAGE
