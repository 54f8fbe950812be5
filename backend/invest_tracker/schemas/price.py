"""Price quote schemas."""

from datetime import date
from uuid import UUID

from pydantic import BaseModel

from invest_tracker.schemas.common import Money


class PriceQuoteResponse(BaseModel):
    code: str
    price: Money
    date: date
    source: str


class RevaluationResponse(BaseModel):
    """Result of repricing a category's holding from a quote."""

    category_id: UUID
    code: str
    price: Money
    date: date
    source: str
    quantity: Money
    current_value: Money
    total_invested: Money

