"""Ledger transaction schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from invest_tracker.models.transaction import TransactionType
from invest_tracker.schemas.common import Money


class TransactionCreate(BaseModel):
    """
    Transaction creation schema.

    amount is derived as quantity * price; a client-supplied amount is ignored.
    """

    category_id: UUID
    type: TransactionType
    quantity: Decimal = Field(..., gt=0, max_digits=15, decimal_places=6)
    price: Decimal = Field(..., ge=0, max_digits=15, decimal_places=4)
    transaction_date: Optional[date] = None  # Defaults to today
    notes: Optional[str] = Field(None, max_length=1000)


class TransactionUpdate(BaseModel):
    """Partial update; omitted fields fall back to the stored values."""

    category_id: Optional[UUID] = None
    type: Optional[TransactionType] = None
    quantity: Optional[Decimal] = Field(None, gt=0, max_digits=15, decimal_places=6)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=15, decimal_places=4)
    transaction_date: Optional[date] = None
    notes: Optional[str] = Field(None, max_length=1000)


class TransactionResponse(BaseModel):
    """Transaction with its category's display fields."""

    id: UUID
    category_id: UUID
    category_name: Optional[str] = None
    category_color: Optional[str] = None
    type: TransactionType
    quantity: Money
    price: Money
    amount: Money
    transaction_date: date
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
