"""Monthly expense models."""

import uuid
from decimal import Decimal

from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from invest_tracker.core.database import Base
from invest_tracker.core.db_types import UUID
from invest_tracker.utils.datetime_utils import utc_now_lambda


class MonthlyExpense(Base):
    """Expense sheet for one user and one month (YYYY-MM)."""

    __tablename__ = "monthly_expenses"

    id = Column(UUID(), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        UUID(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    month = Column(String(7), nullable=False)  # YYYY-MM
    total_amount = Column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utc_now_lambda, nullable=False)
    updated_at = Column(DateTime, default=utc_now_lambda, onupdate=utc_now_lambda, nullable=False)

    items = relationship(
        "ExpenseItem",
        back_populates="monthly_expense",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ExpenseItem.created_at",
    )

    __table_args__ = (UniqueConstraint("user_id", "month", name="uq_monthly_expense_user_month"),)


class ExpenseItem(Base):
    """Single line of a monthly expense sheet."""

    __tablename__ = "expense_items"

    id = Column(UUID(), primary_key=True, default=uuid.uuid4)
    monthly_expense_id = Column(
        UUID(),
        ForeignKey("monthly_expenses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(100), nullable=False, index=True)
    amount = Column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utc_now_lambda, nullable=False)
    updated_at = Column(DateTime, default=utc_now_lambda, onupdate=utc_now_lambda, nullable=False)

    monthly_expense = relationship("MonthlyExpense", back_populates="items")
