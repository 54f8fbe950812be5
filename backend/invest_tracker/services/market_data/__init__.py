"""
External price sources.

- DCDS: Dragon Capital fund NAV
- GOLD (aliases SJC, VÀNG): SJC gold bar price
- USD (aliases ĐÔ LA, ĐÔ LA MỸ): Vietcombank transfer rate
"""

from .base_provider import PriceQuote, PriceSource
from .provider_factory import PriceSourceRegistry, get_price_source_registry

__all__ = [
    "PriceQuote",
    "PriceSource",
    "PriceSourceRegistry",
    "get_price_source_registry",
]
