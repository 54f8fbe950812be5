"""
Transaction lifecycle service.

Validates ledger mutations against the current holding, persists them and
reconciles every affected holding inside one database transaction. The
category and transaction handed in are already ownership-verified.
"""

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import InvalidRequestError
from sqlalchemy.ext.asyncio import AsyncSession

from invest_tracker.core.exceptions import (
    DomainValidationError,
    InsufficientHoldingsError,
    NotFoundError,
)
from invest_tracker.core.metrics import track_ledger_mutation, track_ledger_rejection
from invest_tracker.models.category import Category
from invest_tracker.models.holding import Holding
from invest_tracker.models.transaction import Transaction, TransactionType
from invest_tracker.schemas.transaction import TransactionCreate, TransactionUpdate
from invest_tracker.services.holding_service import (
    MONEY_STEP,
    ZERO,
    HoldingService,
    quantize,
)
from invest_tracker.utils.datetime_utils import utc_today

logger = logging.getLogger(__name__)


def _check_inputs(quantity: Decimal, price: Decimal) -> None:
    if quantity is None or quantity <= 0:
        raise DomainValidationError("Quantity must be greater than 0")
    if price is None or price < 0:
        raise DomainValidationError("Price must not be negative")


def _held(holding: Optional[Holding]) -> Decimal:
    return Decimal(holding.quantity) if holding is not None else ZERO


def _fmt(value: Decimal) -> str:
    return format(Decimal(value).normalize(), "f")


class TransactionService:
    """Create, update, delete and list ledger transactions."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.holdings = HoldingService(db)

    # ── reads ────────────────────────────────────────────────────────────────

    def _with_category(self, user_id: UUID):
        return (
            select(Transaction, Category.name, Category.color)
            .join(Category, Category.id == Transaction.category_id)
            .where(Category.user_id == user_id)
        )

    @staticmethod
    def _newest_first(stmt):
        return stmt.order_by(Transaction.transaction_date.desc(), Transaction.created_at.desc())

    async def _rows(self, stmt) -> list[dict]:
        result = await self.db.execute(stmt)
        return [to_response(tx, name, color) for tx, name, color in result.all()]

    async def list_transactions(self, user_id: UUID, limit: int = 100) -> list[dict]:
        return await self._rows(self._newest_first(self._with_category(user_id)).limit(limit))

    async def list_recent(self, user_id: UUID, days: int = 7) -> list[dict]:
        """Transactions dated within the last N days, today included."""
        since = utc_today() - timedelta(days=days)
        stmt = self._with_category(user_id).where(Transaction.transaction_date >= since)
        return await self._rows(self._newest_first(stmt))

    async def list_by_date_range(self, user_id: UUID, start: date, end: date) -> list[dict]:
        if start > end:
            raise DomainValidationError("start_date must be on or before end_date")
        stmt = self._with_category(user_id).where(
            Transaction.transaction_date >= start,
            Transaction.transaction_date <= end,
        )
        return await self._rows(self._newest_first(stmt))

    async def list_by_category(self, category: Category, limit: int = 50) -> list[dict]:
        stmt = self._with_category(category.user_id).where(Transaction.category_id == category.id)
        return await self._rows(self._newest_first(stmt).limit(limit))

    # ── writes ───────────────────────────────────────────────────────────────

    async def _lock_row(self, transaction: Transaction) -> None:
        """
        Re-read the row under FOR UPDATE. A concurrent edit may have committed
        since the route loaded it.
        """
        try:
            await self.db.refresh(transaction, with_for_update=True)
        except InvalidRequestError as e:
            raise NotFoundError("Transaction not found") from e

    async def create_transaction(self, category: Category, data: TransactionCreate) -> Transaction:
        """
        Record a buy or sell and reconcile the category's holding.

        Raises:
            DomainValidationError: quantity <= 0 or price < 0
            InsufficientHoldingsError: a sell larger than the held quantity
        """
        _check_inputs(data.quantity, data.price)

        locked = await self.holdings.lock_for_categories([category.id])
        if data.type == TransactionType.SELL:
            available = _held(locked[category.id])
            if available < data.quantity:
                track_ledger_rejection("create")
                raise InsufficientHoldingsError(
                    f"Insufficient holdings: available {_fmt(available)}, "
                    f"requested {_fmt(data.quantity)}"
                )

        transaction = Transaction(
            category_id=category.id,
            type=data.type,
            quantity=data.quantity,
            price=data.price,
            amount=quantize(data.quantity * data.price, MONEY_STEP),
            transaction_date=data.transaction_date or utc_today(),
            notes=data.notes,
        )
        self.db.add(transaction)
        await self.db.flush()

        await self.holdings.recalculate(category.id)
        await self.db.commit()

        track_ledger_mutation("create", data.type.value)
        logger.info(
            "Transaction created | id=%s | category=%s | type=%s | quantity=%s | price=%s",
            transaction.id,
            category.id,
            data.type.value,
            data.quantity,
            data.price,
        )
        return transaction

    async def update_transaction(
        self,
        transaction: Transaction,
        data: TransactionUpdate,
        target_category: Category,
    ) -> Transaction:
        """
        Apply a partial update, re-validating solvency as if the edit were live.

        Omitted fields fall back to the stored values. When the transaction
        stays in its category, the original row's contribution is backed out
        of the held quantity before checking a sell. The original category
        must also stay non-negative when a buy is shrunk, converted or moved.
        """
        await self._lock_row(transaction)
        original_category_id = transaction.category_id
        original_type = TransactionType(transaction.type)
        original_quantity = Decimal(transaction.quantity)

        new_type = data.type if data.type is not None else original_type
        new_quantity = data.quantity if data.quantity is not None else original_quantity
        new_price = data.price if data.price is not None else Decimal(transaction.price)
        _check_inputs(new_quantity, new_price)

        same_category = target_category.id == original_category_id
        locked = await self.holdings.lock_for_categories([original_category_id, target_category.id])

        if new_type == TransactionType.SELL:
            available = _held(locked[target_category.id])
            if same_category:
                if original_type == TransactionType.SELL:
                    available += original_quantity
                else:
                    available -= original_quantity
            if available < new_quantity:
                track_ledger_rejection("update")
                raise InsufficientHoldingsError(
                    f"Insufficient holdings: available {_fmt(available)}, "
                    f"requested {_fmt(new_quantity)}"
                )

        if original_type == TransactionType.BUY:
            remaining = _held(locked[original_category_id]) - original_quantity
            if same_category:
                remaining += new_quantity if new_type == TransactionType.BUY else -new_quantity
            if remaining < 0:
                track_ledger_rejection("update")
                raise InsufficientHoldingsError(
                    "Insufficient holdings: this change would leave a negative quantity"
                )

        transaction.category_id = target_category.id
        transaction.type = new_type
        transaction.quantity = new_quantity
        transaction.price = new_price
        transaction.amount = quantize(new_quantity * new_price, MONEY_STEP)
        if data.transaction_date is not None:
            transaction.transaction_date = data.transaction_date
        if "notes" in data.model_fields_set:
            transaction.notes = data.notes
        await self.db.flush()

        await self.holdings.recalculate(target_category.id)
        if not same_category:
            await self.holdings.recalculate(original_category_id)
        await self.db.commit()

        track_ledger_mutation("update", new_type.value)
        logger.info(
            "Transaction updated | id=%s | category=%s | moved_from=%s",
            transaction.id,
            target_category.id,
            None if same_category else original_category_id,
        )
        return transaction

    async def delete_transaction(self, transaction: Transaction) -> None:
        """Remove a transaction and reconcile its category."""
        await self._lock_row(transaction)
        transaction_id = transaction.id
        category_id = transaction.category_id
        transaction_type = TransactionType(transaction.type)

        locked = await self.holdings.lock_for_categories([category_id])
        if transaction_type == TransactionType.BUY:
            if _held(locked[category_id]) - Decimal(transaction.quantity) < 0:
                track_ledger_rejection("delete")
                raise InsufficientHoldingsError(
                    "Insufficient holdings: deleting this buy would leave a negative quantity"
                )

        await self.db.delete(transaction)
        await self.db.flush()

        await self.holdings.recalculate(category_id)
        await self.db.commit()

        track_ledger_mutation("delete", transaction_type.value)
        logger.info("Transaction deleted | id=%s | category=%s", transaction_id, category_id)


def to_response(transaction: Transaction, category_name: str, category_color: str) -> dict:
    """Flatten a transaction and its category display fields."""
    return {
        "id": transaction.id,
        "category_id": transaction.category_id,
        "category_name": category_name,
        "category_color": category_color,
        "type": transaction.type,
        "quantity": transaction.quantity,
        "price": transaction.price,
        "amount": transaction.amount,
        "transaction_date": transaction.transaction_date,
        "notes": transaction.notes,
        "created_at": transaction.created_at,
        "updated_at": transaction.updated_at,
    }
