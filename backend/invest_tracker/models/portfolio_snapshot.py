"""Portfolio snapshot model for historical tracking."""

from uuid import uuid4

from sqlalchemy import Column, Date, DateTime, ForeignKey, Numeric, UniqueConstraint

from invest_tracker.core.database import Base
from invest_tracker.core.db_types import UUID
from invest_tracker.utils.datetime_utils import utc_now_lambda


class PortfolioSnapshot(Base):
    """
    Valuation of one category on one calendar day.

    One snapshot per category per day; re-snapshotting overwrites.
    """

    __tablename__ = "portfolio_snapshots"

    id = Column(UUID(), primary_key=True, default=uuid4)
    category_id = Column(
        UUID(),
        ForeignKey("categories.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    snapshot_date = Column(Date, nullable=False, index=True)

    total_value = Column(Numeric(15, 2), nullable=False)
    total_invested = Column(Numeric(15, 2), nullable=False)
    pnl = Column(Numeric(15, 2), nullable=False)
    pnl_percentage = Column(Numeric(15, 4), nullable=False)

    created_at = Column(DateTime, default=utc_now_lambda)

    __table_args__ = (
        UniqueConstraint("category_id", "snapshot_date", name="uq_category_snapshot_date"),
    )

    def __repr__(self):
        return (
            f"<PortfolioSnapshot(category_id={self.category_id}, "
            f"date={self.snapshot_date}, value={self.total_value})>"
        )
