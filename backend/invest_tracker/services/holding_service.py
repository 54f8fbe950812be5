"""
Holdings reconciler.

A category's holding is derived state: it is recomputed from the category's
full transaction ledger after every ledger mutation.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from invest_tracker.core.metrics import track_reconciliation
from invest_tracker.crud.repositories import holding_crud
from invest_tracker.models.holding import Holding
from invest_tracker.models.transaction import Transaction, TransactionType

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
QUANTITY_STEP = Decimal("0.000001")
PRICE_STEP = Decimal("0.0001")
MONEY_STEP = Decimal("0.01")
PERCENT_STEP = Decimal("0.0001")


def quantize(value: Decimal, step: Decimal) -> Decimal:
    return Decimal(value).quantize(step, rounding=ROUND_HALF_UP)


def calculate_pnl(current_value: Decimal, total_invested: Decimal) -> tuple[Decimal, Decimal]:
    """
    Profit/loss and its percentage of invested capital.

    The percentage is 0 when nothing (or a negative amount) is invested.

    Example:
        >>> calculate_pnl(Decimal("1000"), Decimal("800"))
        (Decimal('200.00'), Decimal('25.0000'))
    """
    current_value = Decimal(current_value or 0)
    total_invested = Decimal(total_invested or 0)
    pnl = quantize(current_value - total_invested, MONEY_STEP)
    if total_invested <= 0:
        return pnl, quantize(ZERO, PERCENT_STEP)
    return pnl, quantize(pnl / total_invested * 100, PERCENT_STEP)


class HoldingService:
    """Reads and recomputes per-category holdings."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_for_category(
        self, category_id: UUID, for_update: bool = False
    ) -> Optional[Holding]:
        return await holding_crud.get_where(
            self.db, Holding.category_id == category_id, for_update=for_update
        )

    async def lock_for_categories(self, category_ids: Iterable[UUID]) -> dict[UUID, Optional[Holding]]:
        """
        Row-lock the holdings of several categories.

        Locks are taken in a stable order so two requests touching the same
        pair of categories cannot deadlock.
        """
        locked: dict[UUID, Optional[Holding]] = {}
        for category_id in sorted(set(category_ids), key=str):
            locked[category_id] = await self.get_for_category(category_id, for_update=True)
        return locked

    async def create_empty(self, category_id: UUID) -> Holding:
        """Provision a zeroed holding for a new category."""
        return await holding_crud.create(
            self.db,
            category_id=category_id,
            quantity=ZERO,
            average_price=ZERO,
            total_invested=ZERO,
            current_value=ZERO,
        )

    async def recalculate(self, category_id: UUID) -> Holding:
        """
        Recompute a category's holding from its ledger.

        quantity = sum(buy qty) - sum(sell qty)
        total_invested = sum(buy amount) - sum(sell amount)
        average_price = total_invested / quantity, or 0 when nothing is held

        A holding that has never been valued from a quote keeps current_value
        equal to total_invested; an externally set value is left in place.
        Flushes but does not commit.
        """
        result = await self.db.execute(
            select(
                Transaction.type,
                func.coalesce(func.sum(Transaction.quantity), 0),
                func.coalesce(func.sum(Transaction.amount), 0),
            )
            .where(Transaction.category_id == category_id)
            .group_by(Transaction.type)
        )
        totals = {
            TransactionType(row[0]): (Decimal(str(row[1])), Decimal(str(row[2])))
            for row in result.all()
        }

        buy_quantity, buy_amount = totals.get(TransactionType.BUY, (ZERO, ZERO))
        sell_quantity, sell_amount = totals.get(TransactionType.SELL, (ZERO, ZERO))

        quantity = quantize(buy_quantity - sell_quantity, QUANTITY_STEP)
        total_invested = quantize(buy_amount - sell_amount, MONEY_STEP)
        if quantity > 0:
            average_price = quantize(total_invested / quantity, PRICE_STEP)
        else:
            average_price = quantize(ZERO, PRICE_STEP)

        holding = await self.get_for_category(category_id)
        if holding is None:
            holding = Holding(category_id=category_id, current_value=ZERO)
            self.db.add(holding)

        holding.quantity = quantity
        holding.average_price = average_price
        holding.total_invested = total_invested
        if holding.value_as_of is None:
            holding.current_value = total_invested

        await self.db.flush()
        track_reconciliation()

        logger.debug(
            "Holding reconciled | category=%s | quantity=%s | invested=%s | avg=%s",
            category_id,
            quantity,
            total_invested,
            average_price,
        )
        return holding
