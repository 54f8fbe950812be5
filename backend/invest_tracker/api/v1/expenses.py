"""Monthly expense API endpoints."""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from invest_tracker.core.database import get_db
from invest_tracker.dependencies import get_current_user
from invest_tracker.models.user import User
from invest_tracker.schemas.common import ApiResponse, ok
from invest_tracker.schemas.expense import (
    CopyMonthRequest,
    ExpenseItemCreate,
    ExpenseItemResponse,
    ExpenseItemUpdate,
    ItemTrendPoint,
    MonthlyExpenseDetail,
    MonthlyExpenseSummary,
    MonthlyExpenseUpsert,
    MonthlyTotal,
    MultiItemTrend,
    MultiItemTrendRequest,
    TrackedItems,
)
from invest_tracker.services.expense_service import ExpenseService

router = APIRouter()

MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


@router.get("/", response_model=ApiResponse[List[MonthlyExpenseSummary]])
async def list_months(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """All recorded months, newest first."""
    return ok(await ExpenseService(db).list_months(current_user.id))


@router.get("/trend", response_model=ApiResponse[List[MonthlyTotal]])
async def get_monthly_trend(
    months: int = Query(12, ge=1, le=120),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Monthly totals for the last N recorded months, oldest first."""
    return ok(await ExpenseService(db).get_monthly_trend(current_user.id, months))


@router.get("/item-names", response_model=ApiResponse[List[str]])
async def get_item_names(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return ok(await ExpenseService(db).get_item_names(current_user.id))


@router.get("/tracked-items", response_model=ApiResponse[TrackedItems])
async def get_tracked_items(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    items = await ExpenseService(db).get_tracked_items(current_user.id)
    return ok({"items": items})


@router.put("/tracked-items", response_model=ApiResponse[TrackedItems])
async def save_tracked_items(
    data: TrackedItems,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Replace the list of item names shown on the trend chart."""
    items = await ExpenseService(db).save_tracked_items(current_user.id, data.items)
    return ok({"items": items}, "Tracked items saved")


@router.get("/trend/item/{name}", response_model=ApiResponse[List[ItemTrendPoint]])
async def get_item_trend(
    name: str,
    months: int = Query(12, ge=1, le=120),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return ok(await ExpenseService(db).get_item_trend(current_user.id, name, months))


@router.post("/trend/items", response_model=ApiResponse[MultiItemTrend])
async def get_items_trend(
    data: MultiItemTrendRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Monthly amounts for several item names at once."""
    trends = await ExpenseService(db).get_items_trend(current_user.id, data.names, data.months)
    return ok({"trends": trends})


@router.get("/month/{month}", response_model=ApiResponse[MonthlyExpenseDetail])
async def get_month(
    month: str = Path(..., pattern=MONTH_PATTERN),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return ok(await ExpenseService(db).get_month(current_user.id, month))


@router.delete("/month/{month}", response_model=ApiResponse[None])
async def delete_month(
    month: str = Path(..., pattern=MONTH_PATTERN),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete a month together with all of its items."""
    await ExpenseService(db).delete_month(current_user.id, month)
    return ok(message="Monthly expense deleted successfully")


@router.post("/copy", response_model=ApiResponse[MonthlyExpenseDetail])
async def copy_month(
    data: CopyMonthRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Copy the items of one month into another, creating the target if needed."""
    expense = await ExpenseService(db).copy_month(
        current_user.id, data.source_month, data.target_month
    )
    return ok(expense, f"Copied {data.source_month} to {data.target_month}")


@router.put("/items/{item_id}", response_model=ApiResponse[ExpenseItemResponse])
async def update_item(
    item_id: UUID,
    data: ExpenseItemUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    item = await ExpenseService(db).update_item(current_user.id, item_id, data)
    return ok(item, "Expense item updated successfully")


@router.delete("/items/{item_id}", response_model=ApiResponse[None])
async def delete_item(
    item_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await ExpenseService(db).delete_item(current_user.id, item_id)
    return ok(message="Expense item deleted successfully")


@router.get("/{monthly_expense_id}", response_model=ApiResponse[MonthlyExpenseDetail])
async def get_month_by_id(
    monthly_expense_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return ok(await ExpenseService(db).get_month_by_id(current_user.id, monthly_expense_id))


@router.post(
    "/",
    response_model=ApiResponse[MonthlyExpenseDetail],
    status_code=status.HTTP_201_CREATED,
)
async def upsert_month(
    data: MonthlyExpenseUpsert,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create a month's sheet, or update its notes when it already exists."""
    expense = await ExpenseService(db).upsert_month(current_user.id, data.month, data.notes)
    return ok(expense, "Monthly expense saved")


@router.post(
    "/{monthly_expense_id}/items",
    response_model=ApiResponse[ExpenseItemResponse],
    status_code=status.HTTP_201_CREATED,
)
async def add_item(
    monthly_expense_id: UUID,
    data: ExpenseItemCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    item = await ExpenseService(db).add_item(current_user.id, monthly_expense_id, data)
    return ok(item, "Expense item added successfully")
