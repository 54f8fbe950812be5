"""Dragon Capital DCDS fund NAV per share."""

import json
from datetime import timedelta

from invest_tracker.config import settings
from invest_tracker.core.exceptions import UpstreamError
from invest_tracker.utils.datetime_utils import utc_now

from .base_provider import PriceQuote, PriceSource

# Site identifiers of the fund's public NAV endpoint
_APEX_CLASS = "@udd/01pJ2000000CgSu"
_SITE_ID = "0DMJ2000000oLukOAE"


class DcdsNavSource(PriceSource):
    """Latest published NAV of the DCDS fund (searched over the last 3 days)."""

    code = "DCDS"
    source_name = "Dragon Capital"

    async def fetch_quote(self) -> PriceQuote:
        now = utc_now()
        fund_params = {
            "endDateIsoString": now.isoformat() + "Z",
            "fundCode": "VF1",
            "fundReportCode": "DCDS",
            "orderBy": "navDate__c",
            "orderDirection": "desc",
            "pageNumber": 1,
            "pageSize": 30,
            "siteId": _SITE_ID,
            "startDateIsoString": (now - timedelta(days=3)).date().isoformat(),
        }
        payload = await self._get_json(
            settings.DCDS_NAV_URL,
            params={
                "cacheable": "true",
                "classname": _APEX_CLASS,
                "isContinuation": "false",
                "method": "getFundRelatedDataByDateRange",
                "namespace": "",
                "params": json.dumps(fund_params),
                "language": "vi",
                "asGuest": "true",
                "htmlEncode": "false",
            },
        )

        rows = payload.get("returnValue") if isinstance(payload, dict) else None
        if not rows:
            raise UpstreamError("No DCDS price data found in response")

        latest = rows[0]
        return self._quote(latest.get("navPerShare__c"), latest.get("navDate__c"))
