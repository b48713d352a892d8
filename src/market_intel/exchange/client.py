"""Abstract market-data client interface.

Defines the contract the fetch layer depends on. Methods return the
upstream JSON untouched (prices as strings) and raise on any network,
HTTP, or decoding failure; recovery is the fetch layer's job.
"""

from abc import ABC, abstractmethod


class MarketDataClient(ABC):
    """Abstract base class for public market-data REST clients."""

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the underlying HTTP session."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying HTTP session (CRITICAL for ccxt async)."""
        ...

    @abstractmethod
    async def fetch_ticker_24h(self, symbol: str) -> dict:
        """Fetch the raw 24h rolling ticker for a spot symbol.

        Returns a dict with string fields lastPrice, priceChangePercent
        and priceChange, among others.
        """
        ...

    @abstractmethod
    async def fetch_premium_index(self, symbol: str) -> dict:
        """Fetch the raw perpetual premium index (holds lastFundingRate as a string)."""
        ...

    @abstractmethod
    async def fetch_klines(self, symbol: str, interval: str, limit: int) -> list[list]:
        """Fetch raw spot candles.

        Returns rows of [openTime, open, high, low, close, volume, ...]
        in ascending openTime order, price fields as strings.
        """
        ...
