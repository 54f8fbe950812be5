"""
Monthly expense tracking.

Expense sheets are keyed by (user, YYYY-MM); each month's total is derived
from its items and recomputed on every item change.
"""

import logging
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from invest_tracker.core.exceptions import DomainValidationError, NotFoundError
from invest_tracker.crud.repositories import (
    expense_item_crud,
    monthly_expense_crud,
    user_setting_crud,
)
from invest_tracker.models.expense import ExpenseItem, MonthlyExpense
from invest_tracker.models.user_setting import UserSetting
from invest_tracker.schemas.expense import ExpenseItemCreate, ExpenseItemUpdate
from invest_tracker.services.holding_service import MONEY_STEP, ZERO, quantize

logger = logging.getLogger(__name__)

TRACKED_ITEMS_KEY = "expense_tracked_items"


class ExpenseService:
    """Monthly expense sheets, their items, and trend queries."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ── months ───────────────────────────────────────────────────────────────

    async def list_months(self, user_id: UUID) -> List[dict]:
        """All months with their item counts, newest first."""
        result = await self.db.execute(
            select(MonthlyExpense, func.count(ExpenseItem.id).label("item_count"))
            .outerjoin(ExpenseItem, ExpenseItem.monthly_expense_id == MonthlyExpense.id)
            .where(MonthlyExpense.user_id == user_id)
            .group_by(MonthlyExpense.id)
            .order_by(MonthlyExpense.month.desc())
        )
        return [
            {
                "id": month.id,
                "month": month.month,
                "total_amount": month.total_amount,
                "notes": month.notes,
                "item_count": item_count,
                "created_at": month.created_at,
                "updated_at": month.updated_at,
            }
            for month, item_count in result.all()
        ]

    async def _find_month(self, user_id: UUID, month: str, with_items: bool = False):
        stmt = select(MonthlyExpense).where(
            MonthlyExpense.user_id == user_id, MonthlyExpense.month == month
        )
        if with_items:
            stmt = stmt.options(selectinload(MonthlyExpense.items))
        result = await self.db.execute(stmt.execution_options(populate_existing=True))
        return result.scalar_one_or_none()

    async def get_month(self, user_id: UUID, month: str) -> MonthlyExpense:
        """
        A month with its items (oldest first).

        Raises:
            NotFoundError: No sheet for this month
        """
        expense = await self._find_month(user_id, month, with_items=True)
        if expense is None:
            raise NotFoundError(f"No expenses recorded for {month}")
        return expense

    async def get_month_by_id(self, user_id: UUID, monthly_expense_id: UUID) -> MonthlyExpense:
        result = await self.db.execute(
            select(MonthlyExpense)
            .options(selectinload(MonthlyExpense.items))
            .where(MonthlyExpense.id == monthly_expense_id, MonthlyExpense.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        expense = result.scalar_one_or_none()
        if expense is None:
            raise NotFoundError("Monthly expense not found")
        return expense

    async def upsert_month(self, user_id: UUID, month: str, notes: Optional[str] = None) -> MonthlyExpense:
        """Create the month's sheet, or update its notes if it exists."""
        expense = await self._find_month(user_id, month)
        if expense is None:
            expense = await monthly_expense_crud.create(
                self.db, user_id=user_id, month=month, total_amount=ZERO, notes=notes
            )
            logger.info("Expense month created | user=%s | month=%s", user_id, month)
        elif notes:
            expense.notes = notes
        await self.db.commit()
        return await self.get_month_by_id(user_id, expense.id)

    async def delete_month(self, user_id: UUID, month: str) -> None:
        expense = await self._find_month(user_id, month, with_items=True)
        if expense is None:
            raise NotFoundError(f"No expenses recorded for {month}")
        await monthly_expense_crud.delete(self.db, expense)
        await self.db.commit()

    async def copy_month(self, user_id: UUID, source_month: str, target_month: str) -> MonthlyExpense:
        """
        Copy every item of source_month into target_month.

        The target sheet is created when missing; existing target items are kept.
        """
        if source_month == target_month:
            raise DomainValidationError("Source and target month must differ")

        source = await self._find_month(user_id, source_month, with_items=True)
        if source is None:
            raise NotFoundError(f"No expenses recorded for {source_month}")

        target = await self._find_month(user_id, target_month)
        if target is None:
            target = await monthly_expense_crud.create(
                self.db,
                user_id=user_id,
                month=target_month,
                total_amount=ZERO,
                notes=f"Copied from {source_month}",
            )

        for item in source.items:
            self.db.add(
                ExpenseItem(
                    monthly_expense_id=target.id,
                    name=item.name,
                    amount=item.amount,
                    notes=item.notes,
                )
            )
        await self.db.flush()
        await self._refresh_total(target.id)
        await self.db.commit()

        logger.info(
            "Expense month copied | user=%s | from=%s | to=%s | items=%d",
            user_id,
            source_month,
            target_month,
            len(source.items),
        )
        return await self.get_month_by_id(user_id, target.id)

    async def _refresh_total(self, monthly_expense_id: UUID) -> None:
        total = await self.db.scalar(
            select(func.coalesce(func.sum(ExpenseItem.amount), 0)).where(
                ExpenseItem.monthly_expense_id == monthly_expense_id
            )
        )
        expense = await monthly_expense_crud.get(self.db, monthly_expense_id)
        expense.total_amount = quantize(Decimal(str(total)), MONEY_STEP)
        await self.db.flush()

    # ── items ────────────────────────────────────────────────────────────────

    async def _owned_item(self, user_id: UUID, item_id: UUID) -> ExpenseItem:
        result = await self.db.execute(
            select(ExpenseItem)
            .join(MonthlyExpense, MonthlyExpense.id == ExpenseItem.monthly_expense_id)
            .where(ExpenseItem.id == item_id, MonthlyExpense.user_id == user_id)
        )
        item = result.scalar_one_or_none()
        if item is None:
            raise NotFoundError("Expense item not found")
        return item

    async def add_item(
        self, user_id: UUID, monthly_expense_id: UUID, data: ExpenseItemCreate
    ) -> ExpenseItem:
        expense = await monthly_expense_crud.get_where(
            self.db,
            MonthlyExpense.id == monthly_expense_id,
            MonthlyExpense.user_id == user_id,
        )
        if expense is None:
            raise NotFoundError("Monthly expense not found")

        item = await expense_item_crud.create(
            self.db,
            monthly_expense_id=expense.id,
            name=data.name,
            amount=data.amount,
            notes=data.notes,
        )
        await self._refresh_total(expense.id)
        await self.db.commit()
        return item

    async def update_item(self, user_id: UUID, item_id: UUID, data: ExpenseItemUpdate) -> ExpenseItem:
        item = await self._owned_item(user_id, item_id)
        # name and amount cannot be cleared, notes can
        changes = {
            k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None or k == "notes"
        }
        if "name" in changes:
            changes["name"] = changes["name"].strip()
            if not changes["name"]:
                raise DomainValidationError("Item name cannot be empty")

        await expense_item_crud.update(self.db, item, **changes)
        await self._refresh_total(item.monthly_expense_id)
        await self.db.commit()
        return item

    async def delete_item(self, user_id: UUID, item_id: UUID) -> None:
        item = await self._owned_item(user_id, item_id)
        monthly_expense_id = item.monthly_expense_id
        await expense_item_crud.delete(self.db, item)
        await self._refresh_total(monthly_expense_id)
        await self.db.commit()

    # ── trends ───────────────────────────────────────────────────────────────

    async def _recent_months(self, user_id: UUID, months: int) -> List[str]:
        """The user's last N recorded months, oldest first."""
        result = await self.db.execute(
            select(MonthlyExpense.month)
            .where(MonthlyExpense.user_id == user_id)
            .order_by(MonthlyExpense.month.desc())
            .limit(months)
        )
        return list(reversed(result.scalars().all()))

    async def get_monthly_trend(self, user_id: UUID, months: int = 12) -> List[dict]:
        result = await self.db.execute(
            select(MonthlyExpense.month, MonthlyExpense.total_amount)
            .where(MonthlyExpense.user_id == user_id)
            .order_by(MonthlyExpense.month.desc())
            .limit(months)
        )
        rows = [{"month": month, "total_amount": total} for month, total in result.all()]
        rows.reverse()
        return rows

    async def get_items_trend(
        self, user_id: UUID, names: List[str], months: int = 12
    ) -> Dict[str, List[dict]]:
        """
        Per-name monthly amounts over the user's last N months.

        Months where an item is absent report 0; same-named items in one
        month are summed.
        """
        month_list = await self._recent_months(user_id, months)
        if not month_list:
            return {name: [] for name in names}

        result = await self.db.execute(
            select(MonthlyExpense.month, ExpenseItem.name, func.sum(ExpenseItem.amount))
            .join(ExpenseItem, ExpenseItem.monthly_expense_id == MonthlyExpense.id)
            .where(
                MonthlyExpense.user_id == user_id,
                MonthlyExpense.month.in_(month_list),
                ExpenseItem.name.in_(names),
            )
            .group_by(MonthlyExpense.month, ExpenseItem.name)
        )
        amounts = {(month, name): Decimal(str(total)) for month, name, total in result.all()}

        return {
            name: [
                {"month": month, "amount": amounts.get((month, name), ZERO)}
                for month in month_list
            ]
            for name in names
        }

    async def get_item_trend(self, user_id: UUID, name: str, months: int = 12) -> List[dict]:
        trends = await self.get_items_trend(user_id, [name], months)
        return trends[name]

    async def get_item_names(self, user_id: UUID) -> List[str]:
        result = await self.db.execute(
            select(ExpenseItem.name)
            .join(MonthlyExpense, MonthlyExpense.id == ExpenseItem.monthly_expense_id)
            .where(MonthlyExpense.user_id == user_id)
            .distinct()
            .order_by(ExpenseItem.name)
        )
        return list(result.scalars().all())

    # ── tracked items ────────────────────────────────────────────────────────

    async def get_tracked_items(self, user_id: UUID) -> List[str]:
        setting = await user_setting_crud.get_where(
            self.db, UserSetting.user_id == user_id, UserSetting.setting_key == TRACKED_ITEMS_KEY
        )
        return list(setting.setting_value or []) if setting else []

    async def save_tracked_items(self, user_id: UUID, items: List[str]) -> List[str]:
        # Keep first occurrence order, drop blanks and duplicates
        cleaned = list(dict.fromkeys(i.strip() for i in items if i and i.strip()))

        setting = await user_setting_crud.get_where(
            self.db, UserSetting.user_id == user_id, UserSetting.setting_key == TRACKED_ITEMS_KEY
        )
        if setting is None:
            await user_setting_crud.create(
                self.db, user_id=user_id, setting_key=TRACKED_ITEMS_KEY, setting_value=cleaned
            )
        else:
            setting.setting_value = cleaned
        await self.db.commit()
        return cleaned
