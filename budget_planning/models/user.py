"""
User model for authentication and spending rules.

Users log in with their email, carry one of three roles and may be
linked to a bank account they share with their family.
"""

import enum

from sqlalchemy import Column, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from budget_planning.models.base import Base, MAX_INTEGER, TimestampMixin, ModelMixin


# Stored for roles without a spending cap
UNLIMITED_USAGE_LIMIT = MAX_INTEGER

DEFAULT_CHILD_USAGE_LIMIT = 100


class Role(str, enum.Enum):
    """Authorization role of a user."""

    ADMIN = "ADMIN"
    PARENT = "PARENT"
    CHILD = "CHILD"

    @classmethod
    def parse(cls, value: str) -> "Role | None":
        """
        Resolve a role name case-insensitively.

        Returns:
            Matching Role, or None if the name is unknown
        """
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None

    def default_usage_limit(self) -> int:
        """Usage limit assigned at registration."""
        if self is Role.CHILD:
            return DEFAULT_CHILD_USAGE_LIMIT
        return UNLIMITED_USAGE_LIMIT


class User(Base, TimestampMixin, ModelMixin):
    """
    Registered user of the budget service.

    Attributes:
        id: Integer primary key
        name: Display name
        email: Unique email, also the login username
        hashed_password: Bcrypt-hashed password (never store plaintext)
        role: ADMIN, PARENT or CHILD
        bank_account_id: Linked bank account (nullable)
        usage_limit: Maximum amount of a single withdrawal
        created_at: Timestamp when user was created (from TimestampMixin)
        updated_at: Timestamp when user was last updated (from TimestampMixin)

    Security considerations:
        - Never log or expose hashed_password
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)

    name = Column(
        String(255),
        nullable=False,
        doc="Display name"
    )

    email = Column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
        doc="Unique email used as the login username"
    )

    hashed_password = Column(
        String,
        nullable=False,
        doc="Bcrypt-hashed password (never store plaintext)"
    )

    role = Column(
        Enum(Role, name="user_role"),
        nullable=False,
        doc="Authorization role"
    )

    bank_account_id = Column(
        Integer,
        ForeignKey("bank_accounts.id"),
        nullable=True,
        index=True,
        doc="Linked bank account (several users may share one)"
    )

    usage_limit = Column(
        Integer,
        nullable=False,
        default=UNLIMITED_USAGE_LIMIT,
        doc="Maximum amount of a single withdrawal"
    )

    # Relationships
    bank_account = relationship("BankAccount", back_populates="users", lazy="selectin")

    def __repr__(self) -> str:
        """
        String representation of User.

        Returns:
            String representation (without sensitive data)
        """
        return f"User(id={self.id!r}, email={self.email!r}, role={self.role!r})"
