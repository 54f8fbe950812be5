"""USD/VND transfer rate from Vietcombank."""

from invest_tracker.config import settings
from invest_tracker.core.exceptions import UpstreamError
from invest_tracker.utils.datetime_utils import utc_today

from .base_provider import PriceQuote, PriceSource


class VcbUsdRateSource(PriceSource):
    code = "USD"
    source_name = "Vietcombank"

    async def fetch_quote(self) -> PriceQuote:
        payload = await self._get_json(
            settings.USD_RATE_URL, params={"date": utc_today().isoformat()}
        )

        rates = payload.get("Data") if isinstance(payload, dict) else None
        usd = next((r for r in rates or [] if r.get("currencyCode") == "USD"), None)
        if usd is None:
            raise UpstreamError("No USD price data found in response")

        return self._quote(usd.get("transfer"), payload.get("UpdatedDate") or payload.get("Date"))
