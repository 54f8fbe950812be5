"""
Portfolio aggregator.

Read-only views over a user's holdings and snapshots: overview, value
distribution, PnL per category, recent daily PnL, history and the
dashboard that bundles them.
"""

import logging
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from invest_tracker.models.category import Category
from invest_tracker.models.holding import Holding
from invest_tracker.services.holding_service import (
    MONEY_STEP,
    ZERO,
    calculate_pnl,
    quantize,
)
from invest_tracker.services.snapshot_service import SnapshotService

logger = logging.getLogger(__name__)

PERCENT_DISPLAY_STEP = Decimal("0.01")


def summarize(holdings: List[dict]) -> dict:
    """Portfolio totals over a list of holding views."""
    total_invested = sum((h["total_invested"] for h in holdings), ZERO)
    total_value = sum((h["current_value"] for h in holdings), ZERO)
    total_pnl, total_pnl_percentage = calculate_pnl(total_value, total_invested)
    return {
        "total_invested": quantize(total_invested, MONEY_STEP),
        "total_value": quantize(total_value, MONEY_STEP),
        "total_pnl": total_pnl,
        "total_pnl_percentage": total_pnl_percentage,
    }


def distribution(holdings: List[dict]) -> List[dict]:
    """
    Each category's share of total current value.

    Percentages sum to 100 (within rounding) when the total is positive and
    are all 0 otherwise.
    """
    total_value = sum((h["current_value"] for h in holdings), ZERO)
    items = []
    for h in holdings:
        if total_value > 0:
            percentage = quantize(h["current_value"] / total_value * 100, PERCENT_DISPLAY_STEP)
        else:
            percentage = quantize(ZERO, PERCENT_DISPLAY_STEP)
        items.append(
            {
                "category_id": h["category_id"],
                "category_name": h["category_name"],
                "color": h["color"],
                "value": h["current_value"],
                "percentage": percentage,
            }
        )
    return items


def pnl_by_category(holdings: List[dict]) -> List[dict]:
    keys = (
        "category_id",
        "category_name",
        "color",
        "total_invested",
        "current_value",
        "pnl",
        "pnl_percentage",
    )
    return [{k: h[k] for k in keys} for h in holdings]


class PortfolioService:
    """User-scoped portfolio reports."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.snapshots = SnapshotService(db)

    async def get_holdings(self, user_id: UUID) -> List[dict]:
        """Holdings with category display fields and PnL, largest value first."""
        result = await self.db.execute(
            select(Holding, Category.name, Category.color)
            .join(Category, Category.id == Holding.category_id)
            .where(Category.user_id == user_id)
            .order_by(Holding.current_value.desc(), Category.name)
        )

        holdings = []
        for holding, name, color in result.all():
            current_value = Decimal(holding.current_value)
            total_invested = Decimal(holding.total_invested)
            pnl, pnl_percentage = calculate_pnl(current_value, total_invested)
            holdings.append(
                {
                    "category_id": holding.category_id,
                    "category_name": name,
                    "color": color,
                    "quantity": Decimal(holding.quantity),
                    "average_price": Decimal(holding.average_price),
                    "total_invested": total_invested,
                    "current_value": current_value,
                    "pnl": pnl,
                    "pnl_percentage": pnl_percentage,
                    "value_as_of": holding.value_as_of,
                    "updated_at": holding.updated_at,
                }
            )
        return holdings

    async def get_overview(self, user_id: UUID, holdings: Optional[List[dict]] = None) -> dict:
        if holdings is None:
            holdings = await self.get_holdings(user_id)
        return {"holdings": holdings, "summary": summarize(holdings)}

    async def get_distribution(self, user_id: UUID) -> List[dict]:
        return distribution(await self.get_holdings(user_id))

    async def get_pnl_by_category(self, user_id: UUID) -> List[dict]:
        return pnl_by_category(await self.get_holdings(user_id))

    async def get_pnl_last_7_days(self, user_id: UUID) -> List[dict]:
        return await self.snapshots.get_pnl_last_7_days(user_id)

    async def get_history(self, user_id: UUID, days: int = 30) -> List[dict]:
        return await self.snapshots.get_portfolio_history(user_id, days)

    async def get_dashboard(self, user_id: UUID) -> dict:
        """
        Everything the dashboard renders.

        Holdings are read once and reused; the parts run one after another
        because they share a single session.
        """
        holdings = await self.get_holdings(user_id)
        return {
            "overview": summarize(holdings),
            "holdings": holdings,
            "distribution": distribution(holdings),
            "pnl_by_category": pnl_by_category(holdings),
            "pnl_7_days": await self.snapshots.get_pnl_last_7_days(user_id),
            "portfolio_history": await self.snapshots.get_portfolio_history(user_id, 30),
        }
