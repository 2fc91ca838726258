"""
Bank history model.

Append-only ledger of balance-changing operations. Rows are written in the
same transaction as the balance change and removed only together with
their account.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from budget_planning.models.base import Base, ModelMixin, utc_now


OPERATION_REPLENISH = "replenish"
OPERATION_WITHDRAW = "withdraw"


class BankHistory(Base, ModelMixin):
    """
    Ledger entry for a replenish or withdraw operation.

    Attributes:
        id: Integer primary key
        timestamp: UTC time of the operation
        operation: "replenish" or "withdraw"
        reason: Free-text purpose supplied by the user
        amount: Amount moved
        user_id: Acting user
        account_id: Affected account
    """

    __tablename__ = "bank_history"

    id = Column(Integer, primary_key=True, autoincrement=True)

    timestamp = Column(
        DateTime,
        nullable=False,
        default=utc_now,
        doc="UTC time of the operation"
    )

    operation = Column(
        String(32),
        nullable=False,
        doc="Operation kind (replenish, withdraw)"
    )

    reason = Column(
        Text,
        nullable=False,
        doc="Purpose of the operation"
    )

    amount = Column(
        Integer,
        nullable=False,
        doc="Amount moved by the operation"
    )

    user_id = Column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
        doc="User who performed the operation"
    )

    account_id = Column(
        Integer,
        ForeignKey("bank_accounts.id"),
        nullable=False,
        doc="Account the operation was applied to"
    )

    # Relationships
    user = relationship("User", lazy="selectin")
    bank_account = relationship("BankAccount", back_populates="history", lazy="raise")

    # Indexes
    __table_args__ = (
        Index("idx_bank_history_account_timestamp", "account_id", "timestamp"),
    )
