"""Tests for the valuation updater."""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from invest_tracker.core.exceptions import DomainValidationError, NotFoundError, UpstreamError
from invest_tracker.models.transaction import TransactionType
from invest_tracker.schemas.transaction import TransactionCreate
from invest_tracker.services.holding_service import HoldingService
from invest_tracker.services.market_data import PriceQuote, PriceSourceRegistry
from invest_tracker.services.transaction_service import TransactionService
from invest_tracker.services.valuation_service import ValuationService


def _registry(code="GOLD", price="7850000", error=None):
    source = MagicMock()
    source.code = code
    if error is not None:
        source.fetch_quote = AsyncMock(side_effect=error)
    else:
        source.fetch_quote = AsyncMock(
            return_value=PriceQuote(
                code=code, price=Decimal(price), date=date(2024, 3, 8), source="test"
            )
        )
    return PriceSourceRegistry([source])


async def _buy(db, category, quantity, price):
    await TransactionService(db).create_transaction(
        category,
        TransactionCreate(
            category_id=category.id,
            type=TransactionType.BUY,
            quantity=Decimal(quantity),
            price=Decimal(price),
        ),
    )


class TestSetCurrentValue:
    """Test suite for manual revaluation."""

    @pytest.mark.asyncio
    async def test_only_current_value_changes(self, db, test_category):
        """Should never touch quantity, average price or invested capital."""
        await _buy(db, test_category, "10", "100")

        holding = await ValuationService(db, _registry()).set_current_value(
            test_category, Decimal("1234.5")
        )

        assert holding.current_value == Decimal("1234.50")
        assert holding.value_as_of is not None
        assert holding.quantity == Decimal("10")
        assert holding.average_price == Decimal("100.0000")
        assert holding.total_invested == Decimal("1000.00")

    @pytest.mark.asyncio
    async def test_value_survives_later_reconciliation(self, db, test_category):
        await _buy(db, test_category, "10", "100")
        await ValuationService(db, _registry()).set_current_value(test_category, Decimal("1500"))

        await _buy(db, test_category, "1", "100")

        holding = await HoldingService(db).get_for_category(test_category.id)
        assert holding.total_invested == Decimal("1100.00")
        assert holding.current_value == Decimal("1500.00")

    @pytest.mark.asyncio
    async def test_zero_is_allowed(self, db, test_category):
        holding = await ValuationService(db, _registry()).set_current_value(
            test_category, Decimal("0")
        )

        assert holding.current_value == 0

    @pytest.mark.asyncio
    async def test_negative_rejected(self, db, test_category):
        with pytest.raises(DomainValidationError):
            await ValuationService(db, _registry()).set_current_value(
                test_category, Decimal("-1")
            )

    @pytest.mark.asyncio
    async def test_missing_holding(self, db, test_user):
        """Should report a category without a holding row as not found."""
        from invest_tracker.models.category import Category

        category = Category(user_id=test_user.id, name="Bare")
        db.add(category)
        await db.commit()

        with pytest.raises(NotFoundError):
            await ValuationService(db, _registry()).set_current_value(category, Decimal("10"))


class TestRevalueFromSource:
    """Test suite for quote-driven revaluation."""

    @pytest.mark.asyncio
    async def test_prices_held_quantity(self, db, test_category):
        await _buy(db, test_category, "2", "7000000")

        result = await ValuationService(db, _registry()).revalue_from_source(test_category, "SJC")

        assert result["code"] == "GOLD"
        assert result["price"] == Decimal("7850000")
        assert result["current_value"] == Decimal("15700000.00")
        assert result["total_invested"] == Decimal("14000000.00")

    @pytest.mark.asyncio
    async def test_source_failure_leaves_holding(self, db, test_category):
        """Should not write anything when the quote cannot be fetched."""
        await _buy(db, test_category, "2", "100")
        registry = _registry(error=UpstreamError("Failed to fetch GOLD price: timeout"))

        with pytest.raises(UpstreamError):
            await ValuationService(db, registry).revalue_from_source(test_category, "GOLD")

        holding = await HoldingService(db).get_for_category(test_category.id)
        assert holding.current_value == Decimal("200.00")
        assert holding.value_as_of is None

    @pytest.mark.asyncio
    async def test_unknown_code(self, db, test_category):
        with pytest.raises(NotFoundError):
            await ValuationService(db, _registry()).revalue_from_source(test_category, "BTC")
