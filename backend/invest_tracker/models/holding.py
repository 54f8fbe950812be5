"""Holding model: derived position of one category."""

import uuid
from decimal import Decimal

from sqlalchemy import Column, DateTime, ForeignKey, Numeric

from invest_tracker.core.database import Base
from invest_tracker.core.db_types import UUID
from invest_tracker.utils.datetime_utils import utc_now_lambda


class Holding(Base):
    """
    Aggregate position of a category.

    quantity, average_price and total_invested are recomputed from the ledger.
    current_value is the market value; value_as_of records when it was last
    set from outside the ledger (null until then).
    """

    __tablename__ = "holdings"

    id = Column(UUID(), primary_key=True, default=uuid.uuid4)
    category_id = Column(
        UUID(),
        ForeignKey("categories.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    quantity = Column(Numeric(15, 6), nullable=False, default=Decimal("0"))
    average_price = Column(Numeric(15, 4), nullable=False, default=Decimal("0"))
    total_invested = Column(Numeric(15, 2), nullable=False, default=Decimal("0"))

    current_value = Column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    value_as_of = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utc_now_lambda, nullable=False)
    updated_at = Column(DateTime, default=utc_now_lambda, onupdate=utc_now_lambda, nullable=False)

    def __repr__(self):
        return (
            f"<Holding(category_id={self.category_id}, quantity={self.quantity}, "
            f"current_value={self.current_value})>"
        )
