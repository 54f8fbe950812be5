"""
Portfolio snapshot service for historical tracking.

Captures one valuation row per category per day and answers the history
queries behind the dashboard charts.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from invest_tracker.core.metrics import track_snapshots
from invest_tracker.models.category import Category
from invest_tracker.models.holding import Holding
from invest_tracker.models.portfolio_snapshot import PortfolioSnapshot
from invest_tracker.services.holding_service import (
    MONEY_STEP,
    PERCENT_STEP,
    calculate_pnl,
    quantize,
)
from invest_tracker.utils.datetime_utils import utc_today, window_start

logger = logging.getLogger(__name__)

MAX_HISTORY_DAYS = 365


class SnapshotService:
    """Service for managing portfolio snapshots."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _insert(self):
        dialect = self.db.get_bind().dialect.name
        return pg_insert if dialect == "postgresql" else sqlite_insert

    async def upsert_snapshot(
        self,
        category_id: UUID,
        total_value: Decimal,
        total_invested: Decimal,
        snapshot_date: Optional[date] = None,
    ) -> PortfolioSnapshot:
        """
        Write the (category, date) snapshot, overwriting an existing one.

        Uses INSERT ... ON CONFLICT DO UPDATE so concurrent calls for the same
        day still leave exactly one row. Does not commit.
        """
        if snapshot_date is None:
            snapshot_date = utc_today()

        pnl, pnl_percentage = calculate_pnl(total_value, total_invested)
        values = {
            "category_id": category_id,
            "snapshot_date": snapshot_date,
            "total_value": quantize(total_value, MONEY_STEP),
            "total_invested": quantize(total_invested, MONEY_STEP),
            "pnl": pnl,
            "pnl_percentage": pnl_percentage,
        }

        stmt = self._insert()(PortfolioSnapshot).values(**values)
        stmt = (
            stmt.on_conflict_do_update(
                index_elements=["category_id", "snapshot_date"],
                set_={
                    "total_value": stmt.excluded.total_value,
                    "total_invested": stmt.excluded.total_invested,
                    "pnl": stmt.excluded.pnl,
                    "pnl_percentage": stmt.excluded.pnl_percentage,
                },
            )
            .returning(PortfolioSnapshot)
            .execution_options(populate_existing=True)
        )

        result = await self.db.execute(stmt)
        return result.scalar_one()

    async def create_daily_snapshot(
        self, user_id: UUID, snapshot_date: Optional[date] = None
    ) -> List[PortfolioSnapshot]:
        """
        Snapshot every holding of a user for the day.

        Idempotent per calendar day: calling it again overwrites the day's rows.
        """
        result = await self.db.execute(
            select(Holding)
            .join(Category, Category.id == Holding.category_id)
            .where(Category.user_id == user_id)
        )
        holdings = result.scalars().all()

        snapshots = []
        for holding in holdings:
            snapshots.append(
                await self.upsert_snapshot(
                    holding.category_id,
                    holding.current_value,
                    holding.total_invested,
                    snapshot_date,
                )
            )
        await self.db.commit()

        track_snapshots(len(snapshots))
        logger.info(
            "Daily snapshot captured | user=%s | categories=%d | date=%s",
            user_id,
            len(snapshots),
            snapshot_date or utc_today(),
        )
        return snapshots

    def _user_snapshots_since(self, user_id: UUID, start: date):
        return (
            select(PortfolioSnapshot.snapshot_date)
            .join(Category, Category.id == PortfolioSnapshot.category_id)
            .where(
                Category.user_id == user_id,
                PortfolioSnapshot.snapshot_date >= start,
                PortfolioSnapshot.snapshot_date <= utc_today(),
            )
            .group_by(PortfolioSnapshot.snapshot_date)
            .order_by(PortfolioSnapshot.snapshot_date)
        )

    async def get_pnl_last_7_days(self, user_id: UUID) -> List[dict]:
        """Summed PnL per snapshot date over the last 7 days, today included."""
        stmt = self._user_snapshots_since(user_id, window_start(7)).add_columns(
            func.sum(PortfolioSnapshot.pnl).label("daily_pnl")
        )
        result = await self.db.execute(stmt)
        return [
            {"snapshot_date": row.snapshot_date, "daily_pnl": Decimal(str(row.daily_pnl))}
            for row in result.all()
        ]

    async def get_portfolio_history(self, user_id: UUID, days: int = 30) -> List[dict]:
        """
        Portfolio totals per snapshot date over the last N days, today included.

        pnl_percentage is the mean of the per-category percentages for the day.
        """
        days = max(1, min(days, MAX_HISTORY_DAYS))
        stmt = self._user_snapshots_since(user_id, window_start(days)).add_columns(
            func.sum(PortfolioSnapshot.total_value).label("total_value"),
            func.sum(PortfolioSnapshot.total_invested).label("total_invested"),
            func.sum(PortfolioSnapshot.pnl).label("pnl"),
            func.avg(PortfolioSnapshot.pnl_percentage).label("pnl_percentage"),
        )
        result = await self.db.execute(stmt)
        return [
            {
                "snapshot_date": row.snapshot_date,
                "total_value": Decimal(str(row.total_value)),
                "total_invested": Decimal(str(row.total_invested)),
                "pnl": Decimal(str(row.pnl)),
                "pnl_percentage": quantize(Decimal(str(row.pnl_percentage)), PERCENT_STEP),
            }
            for row in result.all()
        ]

    async def get_category_history(self, category_id: UUID, days: int = 30) -> List[PortfolioSnapshot]:
        days = max(1, min(days, MAX_HISTORY_DAYS))
        result = await self.db.execute(
            select(PortfolioSnapshot)
            .where(
                PortfolioSnapshot.category_id == category_id,
                PortfolioSnapshot.snapshot_date >= window_start(days),
            )
            .order_by(PortfolioSnapshot.snapshot_date)
        )
        return list(result.scalars().all())
