"""Ledger transaction model."""

import enum
import uuid

from sqlalchemy import Column, Date, DateTime, ForeignKey, Index, Numeric, Text
from sqlalchemy import Enum as SQLEnum

from invest_tracker.core.database import Base
from invest_tracker.core.db_types import UUID
from invest_tracker.utils.datetime_utils import utc_now_lambda


class TransactionType(str, enum.Enum):
    """Direction of a ledger entry."""

    BUY = "buy"
    SELL = "sell"


class Transaction(Base):
    """Buy or sell of a quantity of a category's instrument at a unit price."""

    __tablename__ = "transactions"

    id = Column(UUID(), primary_key=True, default=uuid.uuid4)
    category_id = Column(
        UUID(),
        ForeignKey("categories.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type = Column(
        SQLEnum(TransactionType, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    quantity = Column(Numeric(15, 6), nullable=False)
    price = Column(Numeric(15, 4), nullable=False)
    amount = Column(Numeric(15, 2), nullable=False)  # quantity * price
    transaction_date = Column(Date, nullable=False, index=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utc_now_lambda, nullable=False)
    updated_at = Column(DateTime, default=utc_now_lambda, onupdate=utc_now_lambda, nullable=False)

    __table_args__ = (Index("ix_transactions_category_date", "category_id", "transaction_date"),)

    def __repr__(self):
        return (
            f"<Transaction(id={self.id}, type={self.type}, quantity={self.quantity}, "
            f"price={self.price})>"
        )
