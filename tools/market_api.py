# tools/market_api.py

from abc import ABC, abstractmethod


class MarketPriceProvider(ABC):
    """Source of the current mandi price for a crop."""

    @abstractmethod
    async def get_price(self, crop_name: str, location: str) -> dict:
        """Returns current_price (display string), market_trend and nearby_mandis."""


class MockMarketPriceProvider(MarketPriceProvider):
    """Fixed quote, used until a real market feed is wired in."""

    async def get_price(self, crop_name: str, location: str) -> dict:
        return {
            "current_price": "₹2,500 per quintal",
            "market_trend": "Stable",
            "nearby_mandis": ["Kochi Mandi", "Ernakulam Market"],
        }
