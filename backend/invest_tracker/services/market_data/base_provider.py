"""
Base interface for external price sources.

A price source returns the latest quote for one instrument (a fund NAV, a
gold bar price, an exchange rate). Sources are looked up by code through
the registry in provider_factory, so tests can substitute their own.
"""

import logging
from abc import ABC, abstractmethod
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from time import time
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel

from invest_tracker.config import settings
from invest_tracker.core.exceptions import UpstreamError
from invest_tracker.core.metrics import track_price_fetch
from invest_tracker.utils.datetime_utils import utc_today

logger = logging.getLogger(__name__)


class PriceQuote(BaseModel):
    """Standardized quote returned by every source."""

    code: str
    price: Decimal
    date: date
    source: str


class PriceSource(ABC):
    """
    Abstract base class for price sources.

    Implementations: DcdsNavSource, SjcGoldSource, VcbUsdRateSource
    """

    code: str = ""
    source_name: str = ""

    @abstractmethod
    async def fetch_quote(self) -> PriceQuote:
        """
        Fetch the latest quote.

        Raises:
            UpstreamError: If the source is unreachable or returns no usable price
        """

    async def _get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """GET a JSON document, mapping transport and HTTP failures to UpstreamError."""
        start_time = time()
        try:
            async with httpx.AsyncClient(timeout=settings.PRICE_SOURCE_TIMEOUT_SECONDS) as client:
                response = await client.get(
                    url,
                    params=params,
                    headers={"Accept": "application/json", **(headers or {})},
                )
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            track_price_fetch(self.code, "failure", time() - start_time)
            logger.warning("Price fetch failed | source=%s | error=%s", self.code, e)
            raise UpstreamError(f"Failed to fetch {self.code} price: {e}") from e

        track_price_fetch(self.code, "success", time() - start_time)
        return payload

    def _quote(self, price: Any, quote_date: Any) -> PriceQuote:
        try:
            value = Decimal(str(price))
        except (InvalidOperation, TypeError) as e:
            raise UpstreamError(f"{self.code} source returned an invalid price: {price!r}") from e
        if not value.is_finite():
            raise UpstreamError(f"{self.code} source returned an invalid price: {price!r}")
        if value < 0:
            raise UpstreamError(f"{self.code} source returned a negative price")
        return PriceQuote(
            code=self.code,
            price=value,
            date=parse_quote_date(quote_date),
            source=self.source_name,
        )


def parse_quote_date(value: Any) -> date:
    """
    Best-effort date from an upstream timestamp; today when absent or unparsable.

    Example:
        >>> parse_quote_date("2024-03-08T09:30:00")
        datetime.date(2024, 3, 8)
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and len(value) >= 10:
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            pass
    return utc_today()
