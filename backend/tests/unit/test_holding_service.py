"""Tests for the holdings reconciler."""

from datetime import date
from decimal import Decimal

import pytest

from invest_tracker.models.holding import Holding
from invest_tracker.models.transaction import Transaction, TransactionType
from invest_tracker.services.holding_service import HoldingService, calculate_pnl, quantize, PRICE_STEP
from invest_tracker.utils.datetime_utils import utc_now


def _tx(category_id, type_, quantity, price):
    quantity, price = Decimal(quantity), Decimal(price)
    return Transaction(
        category_id=category_id,
        type=type_,
        quantity=quantity,
        price=price,
        amount=(quantity * price).quantize(Decimal("0.01")),
        transaction_date=date(2024, 1, 15),
    )


class TestCalculatePnl:
    """Test suite for the PnL helper."""

    def test_profit(self):
        """Should return absolute and percentage PnL."""
        pnl, pct = calculate_pnl(Decimal("1000"), Decimal("800"))

        assert pnl == Decimal("200.00")
        assert pct == Decimal("25.0000")

    def test_loss(self):
        pnl, pct = calculate_pnl(Decimal("600"), Decimal("800"))

        assert pnl == Decimal("-200.00")
        assert pct == Decimal("-25.0000")

    def test_zero_invested(self):
        """Should report 0% when nothing is invested."""
        pnl, pct = calculate_pnl(Decimal("150"), Decimal("0"))

        assert pnl == Decimal("150.00")
        assert pct == Decimal("0")

    def test_negative_invested(self):
        """Should report 0% when sells returned more than was paid in."""
        _, pct = calculate_pnl(Decimal("0"), Decimal("-500"))

        assert pct == Decimal("0")


class TestHoldingService:
    """Test suite for holding recalculation."""

    @pytest.mark.asyncio
    async def test_empty_ledger_gives_zeros(self, db, test_category):
        """Should zero everything for a category without transactions."""
        holding = await HoldingService(db).recalculate(test_category.id)

        assert holding.quantity == 0
        assert holding.average_price == 0
        assert holding.total_invested == 0
        assert holding.current_value == 0

    @pytest.mark.asyncio
    async def test_buys_and_sells(self, db, test_category):
        """Should net quantities and amounts and derive the average price."""
        db.add_all(
            [
                _tx(test_category.id, TransactionType.BUY, "10", "100"),
                _tx(test_category.id, TransactionType.BUY, "5", "200"),
            ]
        )
        await db.flush()

        holding = await HoldingService(db).recalculate(test_category.id)

        assert holding.quantity == Decimal("15")
        assert holding.total_invested == Decimal("2000.00")
        assert holding.average_price == Decimal("133.3333")

        db.add(_tx(test_category.id, TransactionType.SELL, "5", "300"))
        await db.flush()

        holding = await HoldingService(db).recalculate(test_category.id)

        assert holding.quantity == Decimal("10")
        assert holding.total_invested == Decimal("500.00")
        assert holding.average_price == Decimal("50.0000")

    @pytest.mark.asyncio
    async def test_average_price_times_quantity_matches_invested(self, db, test_category):
        db.add_all(
            [
                _tx(test_category.id, TransactionType.BUY, "3", "33.33"),
                _tx(test_category.id, TransactionType.BUY, "7", "12.5"),
                _tx(test_category.id, TransactionType.SELL, "4", "20"),
            ]
        )
        await db.flush()

        holding = await HoldingService(db).recalculate(test_category.id)

        assert holding.quantity == Decimal("6")
        assert abs(holding.average_price * holding.quantity - holding.total_invested) < Decimal("0.01")

    @pytest.mark.asyncio
    async def test_full_exit_zeroes_average_price(self, db, test_category):
        """Should report average price 0 once nothing is held."""
        db.add_all(
            [
                _tx(test_category.id, TransactionType.BUY, "2", "100"),
                _tx(test_category.id, TransactionType.SELL, "2", "150"),
            ]
        )
        await db.flush()

        holding = await HoldingService(db).recalculate(test_category.id)

        assert holding.quantity == 0
        assert holding.average_price == 0
        assert holding.total_invested == Decimal("-100.00")

    @pytest.mark.asyncio
    async def test_recalculate_is_idempotent(self, db, test_category):
        db.add(_tx(test_category.id, TransactionType.BUY, "4", "25"))
        await db.flush()
        service = HoldingService(db)

        first = await service.recalculate(test_category.id)
        snapshot = (first.quantity, first.average_price, first.total_invested, first.current_value)
        second = await service.recalculate(test_category.id)

        assert (
            second.quantity,
            second.average_price,
            second.total_invested,
            second.current_value,
        ) == snapshot

    @pytest.mark.asyncio
    async def test_unvalued_holding_tracks_invested(self, db, test_category):
        """Should seed current_value from invested while never valued externally."""
        db.add(_tx(test_category.id, TransactionType.BUY, "4", "25"))
        await db.flush()

        holding = await HoldingService(db).recalculate(test_category.id)

        assert holding.value_as_of is None
        assert holding.current_value == Decimal("100.00")

    @pytest.mark.asyncio
    async def test_valued_holding_keeps_current_value(self, db, test_category):
        """Should leave an externally set current_value in place."""
        service = HoldingService(db)
        holding = await service.get_for_category(test_category.id)
        holding.current_value = Decimal("5000.00")
        holding.value_as_of = utc_now()
        db.add(_tx(test_category.id, TransactionType.BUY, "4", "25"))
        await db.flush()

        holding = await service.recalculate(test_category.id)

        assert holding.total_invested == Decimal("100.00")
        assert holding.current_value == Decimal("5000.00")

    @pytest.mark.asyncio
    async def test_creates_missing_holding(self, db, test_user):
        """Should create the holding row when the category has none."""
        from invest_tracker.models.category import Category

        category = Category(user_id=test_user.id, name="No Holding")
        db.add(category)
        await db.flush()
        db.add(_tx(category.id, TransactionType.BUY, "1", "10"))
        await db.flush()

        holding = await HoldingService(db).recalculate(category.id)

        assert isinstance(holding, Holding)
        assert holding.quantity == Decimal("1")
        assert holding.average_price == quantize(Decimal("10"), PRICE_STEP)

    @pytest.mark.asyncio
    async def test_lock_for_categories_returns_every_id(self, db, test_category, other_category):
        locked = await HoldingService(db).lock_for_categories(
            [other_category.id, test_category.id, test_category.id]
        )

        assert set(locked) == {test_category.id, other_category.id}
        assert all(h is not None for h in locked.values())
