"""Exchange client layer -- raw Binance REST access via ccxt."""

from market_intel.exchange.binance_client import BinanceClient
from market_intel.exchange.client import MarketDataClient

__all__ = ["BinanceClient", "MarketDataClient"]
