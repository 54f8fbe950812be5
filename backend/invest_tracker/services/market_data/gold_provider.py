"""SJC gold bar buy price."""

from invest_tracker.config import settings
from invest_tracker.core.exceptions import UpstreamError

from .base_provider import PriceQuote, PriceSource


class SjcGoldSource(PriceSource):
    """SJC 1-luong buy price from vnappmob; needs GOLD_PRICE_API_KEY."""

    code = "GOLD"
    source_name = "vnappmob"

    async def fetch_quote(self) -> PriceQuote:
        if not settings.GOLD_PRICE_API_KEY:
            raise UpstreamError("GOLD_PRICE_API_KEY is not configured")

        payload = await self._get_json(
            settings.GOLD_PRICE_URL,
            headers={"Authorization": f"Bearer {settings.GOLD_PRICE_API_KEY}"},
        )

        results = payload.get("results") if isinstance(payload, dict) else None
        if not results:
            raise UpstreamError("No gold price data found in response")

        latest = results[0]
        return self._quote(latest.get("buy_1l"), latest.get("updated"))
