"""Price quote API endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from invest_tracker.core.database import get_db
from invest_tracker.dependencies import get_current_user, get_price_sources, get_verified_category
from invest_tracker.models.category import Category
from invest_tracker.models.user import User
from invest_tracker.schemas.common import ApiResponse, ok
from invest_tracker.schemas.price import PriceQuoteResponse, RevaluationResponse
from invest_tracker.services.market_data import PriceSourceRegistry
from invest_tracker.services.valuation_service import ValuationService

router = APIRouter()


@router.get("/{code}", response_model=ApiResponse[PriceQuoteResponse])
async def get_price(
    code: str,
    current_user: User = Depends(get_current_user),
    price_sources: PriceSourceRegistry = Depends(get_price_sources),
):
    """
    Latest quote for an instrument.

    Supported codes: DCDS, GOLD (SJC, VÀNG) and USD (ĐÔ LA).
    """
    quote = await price_sources.get(code).fetch_quote()
    return ok(quote)


@router.post("/{code}/update/{category_id}", response_model=ApiResponse[RevaluationResponse])
async def update_value_from_price(
    code: str,
    category: Category = Depends(get_verified_category),
    price_sources: PriceSourceRegistry = Depends(get_price_sources),
    db: AsyncSession = Depends(get_db),
):
    """Revalue a category's holding at quantity times the latest quote."""
    result = await ValuationService(db, price_sources).revalue_from_source(category, code)
    return ok(result, "Current value updated from price source")
