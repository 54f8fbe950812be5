"""Tests for portfolio aggregation."""

from decimal import Decimal
from uuid import uuid4

import pytest

from invest_tracker.services.holding_service import HoldingService
from invest_tracker.services.portfolio_service import (
    PortfolioService,
    distribution,
    summarize,
)
from invest_tracker.services.snapshot_service import SnapshotService


def _view(current_value, total_invested, name="X"):
    return {
        "category_id": uuid4(),
        "category_name": name,
        "color": "#000000",
        "current_value": Decimal(current_value),
        "total_invested": Decimal(total_invested),
    }


async def _set_holding(db, category, current_value, total_invested):
    holding = await HoldingService(db).get_for_category(category.id)
    holding.current_value = Decimal(current_value)
    holding.total_invested = Decimal(total_invested)
    await db.commit()


class TestDistribution:
    """Test suite for the distribution helper."""

    def test_percentages_sum_to_100(self):
        items = distribution([_view("1", "0"), _view("1", "0"), _view("1", "0")])

        total = sum(i["percentage"] for i in items)
        assert abs(total - Decimal("100")) <= Decimal("0.02")
        assert items[0]["percentage"] == Decimal("33.33")

    def test_zero_total_gives_zero_percentages(self):
        """Should report 0% everywhere instead of dividing by zero."""
        items = distribution([_view("0", "10"), _view("0", "5")])

        assert all(i["percentage"] == 0 for i in items)

    def test_empty(self):
        assert distribution([]) == []


class TestSummarize:
    def test_totals_and_pnl(self):
        summary = summarize([_view("1000", "800"), _view("500", "700")])

        assert summary["total_value"] == Decimal("1500.00")
        assert summary["total_invested"] == Decimal("1500.00")
        assert summary["total_pnl"] == Decimal("0.00")
        assert summary["total_pnl_percentage"] == 0

    def test_empty_portfolio(self):
        summary = summarize([])

        assert summary["total_value"] == 0
        assert summary["total_pnl_percentage"] == 0


class TestPortfolioService:
    """Test suite for user-scoped portfolio reads."""

    @pytest.mark.asyncio
    async def test_holdings_ordered_by_value(self, db, test_user, test_category, other_category):
        await _set_holding(db, test_category, "100", "100")
        await _set_holding(db, other_category, "900", "600")

        holdings = await PortfolioService(db).get_holdings(test_user.id)

        assert [h["category_name"] for h in holdings] == ["Fund", "Gold"]
        assert holdings[0]["pnl"] == Decimal("300.00")
        assert holdings[0]["pnl_percentage"] == Decimal("50.0000")

    @pytest.mark.asyncio
    async def test_overview(self, db, test_user, test_category, other_category):
        await _set_holding(db, test_category, "1000", "800")
        await _set_holding(db, other_category, "0", "0")

        overview = await PortfolioService(db).get_overview(test_user.id)

        assert len(overview["holdings"]) == 2
        assert overview["summary"]["total_pnl"] == Decimal("200.00")
        assert overview["summary"]["total_pnl_percentage"] == Decimal("25.0000")

    @pytest.mark.asyncio
    async def test_scoped_to_user(self, db, second_user, test_category):
        assert await PortfolioService(db).get_holdings(second_user.id) == []

    @pytest.mark.asyncio
    async def test_dashboard_bundles_everything(self, db, test_user, test_category):
        await _set_holding(db, test_category, "1000", "800")
        await SnapshotService(db).create_daily_snapshot(test_user.id)

        dashboard = await PortfolioService(db).get_dashboard(test_user.id)

        assert set(dashboard) == {
            "overview",
            "holdings",
            "distribution",
            "pnl_by_category",
            "pnl_7_days",
            "portfolio_history",
        }
        assert dashboard["distribution"][0]["percentage"] == Decimal("100.00")
        assert dashboard["pnl_7_days"][0]["daily_pnl"] == Decimal("200")
        assert len(dashboard["portfolio_history"]) == 1

    @pytest.mark.asyncio
    async def test_dashboard_empty_portfolio(self, db, test_user):
        dashboard = await PortfolioService(db).get_dashboard(test_user.id)

        assert dashboard["holdings"] == []
        assert dashboard["overview"]["total_value"] == 0
        assert dashboard["pnl_7_days"] == []
