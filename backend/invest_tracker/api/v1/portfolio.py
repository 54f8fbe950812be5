"""Portfolio API endpoints: aggregates, valuation and snapshots."""

from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from invest_tracker.core.database import get_db
from invest_tracker.dependencies import get_current_user, get_verified_category
from invest_tracker.models.category import Category
from invest_tracker.models.user import User
from invest_tracker.schemas.common import ApiResponse, ok
from invest_tracker.schemas.portfolio import (
    CategoryPnl,
    CurrentValueUpdate,
    DailyPnl,
    DashboardResponse,
    DistributionItem,
    HistoryPoint,
    HoldingResponse,
    PortfolioOverview,
    SnapshotResponse,
)
from invest_tracker.services.portfolio_service import PortfolioService
from invest_tracker.services.snapshot_service import MAX_HISTORY_DAYS, SnapshotService
from invest_tracker.services.valuation_service import ValuationService

router = APIRouter()


@router.get("/dashboard", response_model=ApiResponse[DashboardResponse])
async def get_dashboard(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Overview, distribution, per-category PnL, 7-day PnL and 30-day history."""
    return ok(await PortfolioService(db).get_dashboard(current_user.id))


@router.get("/overview", response_model=ApiResponse[PortfolioOverview])
async def get_overview(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return ok(await PortfolioService(db).get_overview(current_user.id))


@router.get("/distribution", response_model=ApiResponse[List[DistributionItem]])
async def get_distribution(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Share of total current value per category."""
    return ok(await PortfolioService(db).get_distribution(current_user.id))


@router.get("/pnl", response_model=ApiResponse[List[CategoryPnl]])
async def get_pnl_by_category(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return ok(await PortfolioService(db).get_pnl_by_category(current_user.id))


@router.get("/pnl-7days", response_model=ApiResponse[List[DailyPnl]])
async def get_pnl_last_7_days(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return ok(await PortfolioService(db).get_pnl_last_7_days(current_user.id))


@router.get("/history", response_model=ApiResponse[List[HistoryPoint]])
async def get_history(
    days: int = Query(30, ge=1, le=MAX_HISTORY_DAYS),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Portfolio totals per snapshot date over the last N days."""
    return ok(await PortfolioService(db).get_history(current_user.id, days))


@router.get("/history/{category_id}", response_model=ApiResponse[List[SnapshotResponse]])
async def get_category_history(
    days: int = Query(30, ge=1, le=MAX_HISTORY_DAYS),
    category: Category = Depends(get_verified_category),
    db: AsyncSession = Depends(get_db),
):
    return ok(await SnapshotService(db).get_category_history(category.id, days))


@router.put("/value/{category_id}", response_model=ApiResponse[HoldingResponse])
async def update_current_value(
    data: CurrentValueUpdate,
    category: Category = Depends(get_verified_category),
    db: AsyncSession = Depends(get_db),
):
    """
    Set a holding's market value.

    Quantity, average price and invested capital are left as they are.
    """
    holding = await ValuationService(db).set_current_value(category, data.current_value)
    return ok(holding, "Current value updated successfully")


@router.post(
    "/snapshot",
    response_model=ApiResponse[List[SnapshotResponse]],
    status_code=status.HTTP_201_CREATED,
)
async def create_snapshot(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Record today's snapshot of every holding; repeating it overwrites today's rows."""
    snapshots = await SnapshotService(db).create_daily_snapshot(current_user.id)
    return ok(snapshots, "Snapshot created successfully")
