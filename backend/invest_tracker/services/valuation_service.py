"""
Valuation updater.

Sets a holding's market value independently of its ledger, either from a
client-supplied figure or by pricing the held quantity with an external quote.
"""

import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from invest_tracker.core.exceptions import DomainValidationError, NotFoundError
from invest_tracker.models.category import Category
from invest_tracker.models.holding import Holding
from invest_tracker.services.holding_service import MONEY_STEP, HoldingService, quantize
from invest_tracker.services.market_data import PriceSourceRegistry, get_price_source_registry
from invest_tracker.utils.datetime_utils import utc_now

logger = logging.getLogger(__name__)


class ValuationService:
    """Applies current values to holdings."""

    def __init__(self, db: AsyncSession, price_sources: Optional[PriceSourceRegistry] = None):
        self.db = db
        self.holdings = HoldingService(db)
        self.price_sources = price_sources or get_price_source_registry()

    async def set_current_value(self, category: Category, new_value: Decimal) -> Holding:
        """
        Overwrite current_value only; quantity, average_price and
        total_invested are never touched.

        Raises:
            DomainValidationError: new_value is negative
            NotFoundError: the category has no holding row
        """
        new_value = Decimal(new_value)
        if new_value < 0:
            raise DomainValidationError("Current value must not be negative")

        holding = await self.holdings.get_for_category(category.id, for_update=True)
        if holding is None:
            raise NotFoundError("Holding not found")

        holding.current_value = quantize(new_value, MONEY_STEP)
        holding.value_as_of = utc_now()
        await self.db.commit()

        logger.info(
            "Holding revalued | category=%s | current_value=%s", category.id, holding.current_value
        )
        return holding

    async def revalue_from_source(self, category: Category, code: str) -> dict:
        """
        Price the held quantity with the latest quote from a source.

        The quote is fetched before any write, so a source failure leaves the
        holding untouched.
        """
        source = self.price_sources.get(code)
        quote = await source.fetch_quote()

        holding = await self.holdings.get_for_category(category.id)
        if holding is None:
            raise NotFoundError("Holding not found")

        value = quantize(Decimal(holding.quantity) * quote.price, MONEY_STEP)
        holding = await self.set_current_value(category, value)

        return {
            "category_id": category.id,
            "code": quote.code,
            "price": quote.price,
            "date": quote.date,
            "source": quote.source,
            "quantity": holding.quantity,
            "current_value": holding.current_value,
            "total_invested": holding.total_invested,
        }
