"""Category schemas."""

import re
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from invest_tracker.models.category import DEFAULT_CATEGORY_COLOR
from invest_tracker.schemas.common import Money

_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")


def clean_category_name(v: str) -> str:
    """Strip and bound a category name (2-100 chars, no angle brackets)."""
    v = v.strip()
    if len(v) < 2:
        raise ValueError("Category name must be at least 2 characters")
    if len(v) > 100:
        raise ValueError("Category name must be 100 characters or less")
    if "<" in v or ">" in v:
        raise ValueError("Category name cannot contain < or > characters")
    return v


def check_color(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not _HEX_COLOR.match(v):
        raise ValueError("Color must be a hex code like #4CAF50")
    return v.upper()


class CategoryCreate(BaseModel):
    """Category creation schema."""

    name: str
    color: str = DEFAULT_CATEGORY_COLOR
    description: Optional[str] = Field(None, max_length=500)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return clean_category_name(v)

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        return check_color(v)


class CategoryUpdate(BaseModel):
    """Partial update; omitted fields keep their stored values."""

    name: Optional[str] = None
    color: Optional[str] = None
    description: Optional[str] = Field(None, max_length=500)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        return clean_category_name(v) if v is not None else v

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: Optional[str]) -> Optional[str]:
        return check_color(v)


class CategoryResponse(BaseModel):
    """Category with its holding columns."""

    id: UUID
    name: str
    color: str
    description: Optional[str] = None
    quantity: Money = Decimal("0")
    average_price: Money = Decimal("0")
    total_invested: Money = Decimal("0")
    current_value: Money = Decimal("0")
    created_at: datetime
    updated_at: datetime


class CategoryDetail(CategoryResponse):
    transaction_count: int = 0
