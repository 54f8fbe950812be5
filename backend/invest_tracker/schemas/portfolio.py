"""Portfolio schemas: holdings, aggregates and history."""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from invest_tracker.schemas.common import Money


class HoldingView(BaseModel):
    """A holding joined with its category and computed PnL."""

    category_id: UUID
    category_name: str
    color: str
    quantity: Money
    average_price: Money
    total_invested: Money
    current_value: Money
    pnl: Money
    pnl_percentage: Money
    value_as_of: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PortfolioSummary(BaseModel):
    total_invested: Money
    total_value: Money
    total_pnl: Money
    total_pnl_percentage: Money


class PortfolioOverview(BaseModel):
    holdings: List[HoldingView]
    summary: PortfolioSummary


class DistributionItem(BaseModel):
    """Share of total current value held in one category."""

    category_id: UUID
    category_name: str
    color: str
    value: Money
    percentage: Money


class CategoryPnl(BaseModel):
    category_id: UUID
    category_name: str
    color: str
    total_invested: Money
    current_value: Money
    pnl: Money
    pnl_percentage: Money


class DailyPnl(BaseModel):
    snapshot_date: date
    daily_pnl: Money


class HistoryPoint(BaseModel):
    """Portfolio totals for one snapshot date."""

    snapshot_date: date
    total_value: Money
    total_invested: Money
    pnl: Money
    pnl_percentage: Money


class DashboardResponse(BaseModel):
    """Everything the dashboard page renders, in one payload."""

    overview: PortfolioSummary
    holdings: List[HoldingView]
    distribution: List[DistributionItem]
    # Camel-case keys on the wire, matching the dashboard client
    pnl_by_category: List[CategoryPnl] = Field(serialization_alias="pnlByCategory")
    pnl_7_days: List[DailyPnl] = Field(serialization_alias="pnl7Days")
    portfolio_history: List[HistoryPoint] = Field(serialization_alias="portfolioHistory")


class CurrentValueUpdate(BaseModel):
    current_value: Decimal = Field(..., ge=0, max_digits=15, decimal_places=2)


class HoldingResponse(BaseModel):
    """Raw holding row."""

    id: UUID
    category_id: UUID
    quantity: Money
    average_price: Money
    total_invested: Money
    current_value: Money
    value_as_of: Optional[datetime] = None
    updated_at: datetime

    model_config = {"from_attributes": True}


class SnapshotResponse(BaseModel):
    id: UUID
    category_id: UUID
    snapshot_date: date
    total_value: Money
    total_invested: Money
    pnl: Money
    pnl_percentage: Money

    model_config = {"from_attributes": True}
