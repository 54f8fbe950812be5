"""Monthly expense schemas."""

import re
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, Field, field_validator

from invest_tracker.schemas.common import Money

_MONTH = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def validate_month(v: str) -> str:
    """Accept only YYYY-MM."""
    if not _MONTH.match(v):
        raise ValueError("Month must be in YYYY-MM format")
    return v


class MonthlyExpenseUpsert(BaseModel):
    month: str
    notes: Optional[str] = Field(None, max_length=1000)

    @field_validator("month")
    @classmethod
    def check_month(cls, v: str) -> str:
        return validate_month(v)


class ExpenseItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    amount: Decimal = Field(..., ge=0, max_digits=15, decimal_places=2)
    notes: Optional[str] = Field(None, max_length=1000)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Item name cannot be empty")
        return v


class ExpenseItemUpdate(BaseModel):
    """Partial item update."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    amount: Optional[Decimal] = Field(None, ge=0, max_digits=15, decimal_places=2)
    notes: Optional[str] = Field(None, max_length=1000)


class ExpenseItemResponse(BaseModel):
    id: UUID
    monthly_expense_id: UUID
    name: str
    amount: Money
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class MonthlyExpenseSummary(BaseModel):
    """Month header with its item count."""

    id: UUID
    month: str
    total_amount: Money
    notes: Optional[str] = None
    item_count: int = 0
    created_at: datetime
    updated_at: datetime


class MonthlyExpenseDetail(BaseModel):
    id: UUID
    month: str
    total_amount: Money
    notes: Optional[str] = None
    items: List[ExpenseItemResponse] = []
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CopyMonthRequest(BaseModel):
    source_month: str = Field(validation_alias=AliasChoices("sourceMonth", "source_month"))
    target_month: str = Field(validation_alias=AliasChoices("targetMonth", "target_month"))

    @field_validator("source_month", "target_month")
    @classmethod
    def check_months(cls, v: str) -> str:
        return validate_month(v)


class MonthlyTotal(BaseModel):
    month: str
    total_amount: Money


class ItemTrendPoint(BaseModel):
    month: str
    amount: Money


class MultiItemTrendRequest(BaseModel):
    names: List[str] = Field(..., min_length=1, max_length=20)
    months: int = Field(12, ge=1, le=120)


class MultiItemTrend(BaseModel):
    trends: Dict[str, List[ItemTrendPoint]]


class TrackedItems(BaseModel):
    items: List[str] = Field(default_factory=list, max_length=50)
