"""
Price source registry.

Maps instrument codes (and their local-language aliases) to price sources.
"""

import logging
from typing import Dict, Iterable, Optional

from invest_tracker.core.exceptions import NotFoundError

from .base_provider import PriceSource
from .dcds_provider import DcdsNavSource
from .gold_provider import SjcGoldSource
from .usd_provider import VcbUsdRateSource

logger = logging.getLogger(__name__)

# Alternate names users type for the same instrument
ALIASES: Dict[str, str] = {
    "VÀNG": "GOLD",
    "SJC": "GOLD",
    "ĐÔ LA": "USD",
    "ĐÔ LA MỸ": "USD",
}


class PriceSourceRegistry:
    """Lookup of price sources by code."""

    def __init__(self, sources: Iterable[PriceSource]):
        self._sources: Dict[str, PriceSource] = {s.code: s for s in sources}

    @staticmethod
    def normalize(code: str) -> str:
        code = code.strip().upper()
        return ALIASES.get(code, code)

    def get(self, code: str) -> PriceSource:
        """
        Resolve a code or alias to its source.

        Raises:
            NotFoundError: If no source handles the code
        """
        source = self._sources.get(self.normalize(code))
        if source is None:
            raise NotFoundError(
                f"Unsupported price code: {code}. Supported: {', '.join(self.codes())}"
            )
        return source

    def codes(self) -> list[str]:
        return sorted(self._sources)


_registry: Optional[PriceSourceRegistry] = None


def get_price_source_registry() -> PriceSourceRegistry:
    """Process-wide default registry with the built-in sources."""
    global _registry
    if _registry is None:
        _registry = PriceSourceRegistry([DcdsNavSource(), SjcGoldSource(), VcbUsdRateSource()])
        logger.info("Price sources registered: %s", ", ".join(_registry.codes()))
    return _registry
