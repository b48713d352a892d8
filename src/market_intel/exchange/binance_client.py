"""Binance public market-data client via ccxt async.

Uses ccxt's implicit REST methods rather than the unified API so the
fetch layer sees Binance's raw payloads: no market loading, no symbol
translation, and string-typed numbers exactly as the exchange sends them.
"""

import ccxt.async_support as ccxt_async

from market_intel.config import ExchangeSettings
from market_intel.exchange.client import MarketDataClient
from market_intel.logging import get_logger

logger = get_logger(__name__)


class BinanceClient(MarketDataClient):
    """Concrete Binance client for spot (/api/v3) and USD-M futures (/fapi/v1) public data."""

    def __init__(self, settings: ExchangeSettings) -> None:
        self._settings = settings
        self._exchange = ccxt_async.binance(
            {
                "enableRateLimit": settings.enable_rate_limit,
                "timeout": settings.timeout_ms,
            }
        )

    @property
    def exchange(self) -> ccxt_async.binance:
        """Access the underlying ccxt exchange instance."""
        return self._exchange

    async def connect(self) -> None:
        """Nothing to preload: implicit endpoints need no market metadata."""
        logger.info("binance_client_ready", timeout_ms=self._settings.timeout_ms)

    async def close(self) -> None:
        """Clean up ccxt async resources. CRITICAL: must be called to avoid resource leaks."""
        logger.info("closing_binance_connection")
        await self._exchange.close()
        logger.info("binance_connection_closed")

    async def fetch_ticker_24h(self, symbol: str) -> dict:
        """GET /api/v3/ticker/24hr."""
        return await self._exchange.public_get_ticker_24hr({"symbol": symbol})

    async def fetch_premium_index(self, symbol: str) -> dict:
        """GET /fapi/v1/premiumIndex."""
        return await self._exchange.fapipublic_get_premiumindex({"symbol": symbol})

    async def fetch_klines(self, symbol: str, interval: str, limit: int) -> list[list]:
        """GET /api/v3/klines."""
        return await self._exchange.public_get_klines(
            {"symbol": symbol, "interval": interval, "limit": limit}
        )
