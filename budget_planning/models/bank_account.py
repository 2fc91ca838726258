"""
Bank account model.

An account only holds an integer balance; ownership lives on the user
side so that family members can share one account.
"""

from sqlalchemy import Column, Integer
from sqlalchemy.orm import relationship

from budget_planning.models.base import Base, TimestampMixin, ModelMixin


class BankAccount(Base, TimestampMixin, ModelMixin):
    """
    Shared family bank account.

    Attributes:
        id: Integer primary key
        balance: Current balance in whole currency units
        users: Users linked to this account
        history: Ledger rows recorded against this account
    """

    __tablename__ = "bank_accounts"

    id = Column(Integer, primary_key=True, autoincrement=True)

    balance = Column(
        Integer,
        nullable=False,
        default=0,
        doc="Current balance (kept non-negative by withdrawals)"
    )

    # Relationships
    users = relationship("User", back_populates="bank_account", lazy="raise", passive_deletes=True)
    history = relationship("BankHistory", back_populates="bank_account", lazy="raise", passive_deletes=True)
