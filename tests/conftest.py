"""Shared test fixtures for the market intelligence dashboard."""

import random
from unittest.mock import AsyncMock

import pytest

from market_intel.config import AnalysisSettings, AppSettings, DashboardSettings, InstrumentSettings
from market_intel.exchange.client import MarketDataClient
from market_intel.market_data.fetchers import MarketDataService
from market_intel.models import (
    ChartPoint,
    FundingRate,
    HighLowSample,
    PriceQuote,
    Snapshot,
    TimeFrame,
)


def make_kline(open_time: int, high: str, low: str, close: str) -> list:
    """Binance kline row with string prices, as the REST API returns it."""
    return [open_time, close, high, low, close, "12.5", open_time + 59_999, "0", 10, "0", "0", "0"]


@pytest.fixture
def instruments() -> InstrumentSettings:
    return InstrumentSettings()


@pytest.fixture
def mock_settings() -> AppSettings:
    """AppSettings with test defaults (no analysis key, UTC display)."""
    return AppSettings(
        log_level="DEBUG",
        instruments=InstrumentSettings(),
        dashboard=DashboardSettings(refresh_interval=0.05, display_timezone="UTC"),
        analysis=AnalysisSettings(api_key=""),  # type: ignore[arg-type]
    )


@pytest.fixture
def mock_client() -> AsyncMock:
    """Mock MarketDataClient; each test sets the return values it needs."""
    client = AsyncMock(spec=MarketDataClient)
    client.fetch_ticker_24h.return_value = {
        "symbol": "BTCUSDT",
        "lastPrice": "97250.50",
        "priceChangePercent": "1.250",
        "priceChange": "1200.10",
    }
    client.fetch_premium_index.return_value = {
        "symbol": "BTCUSDT",
        "lastFundingRate": "0.00010000",
    }
    client.fetch_klines.return_value = []
    return client


@pytest.fixture
def service(mock_client: AsyncMock, instruments: InstrumentSettings) -> MarketDataService:
    return MarketDataService(mock_client, instruments, rng=random.Random(42))


@pytest.fixture
def sample_snapshot() -> Snapshot:
    """A fully populated snapshot with distinct BTC and gold volatility panels."""
    return Snapshot(
        primary_quote=PriceQuote(price=97250.5, change_percent=1.25, change=1200.1),
        secondary_quote=PriceQuote(price=2675.0, change_percent=-0.4),
        funding_rates=(
            FundingRate(exchange="Binance", rate=0.0001),
            FundingRate(exchange="Bybit", rate=0.0123),
        ),
        primary_high_low=(
            HighLowSample.from_bounds("1H", 97500.0, 97000.0),
            HighLowSample.from_bounds("4H", 98000.0, 96000.0),
            HighLowSample.from_bounds("24H", 99000.0, 95000.0),
            HighLowSample.from_bounds("7D", 101000.0, 90000.0),
        ),
        secondary_high_low=(
            HighLowSample.from_bounds("1H", 2680.0, 2670.0),
            HighLowSample.from_bounds("4H", 2690.0, 2660.0),
            HighLowSample.empty("24H"),
            HighLowSample.from_bounds("7D", 2700.0, 2600.0),
        ),
        chart=(
            ChartPoint("10:00", 1_700_000_000_000, 97000.0, 2670.0),
            ChartPoint("10:01", 1_700_000_060_000, 97100.0, 2650.0),
        ),
        time_frame=TimeFrame.H1,
        updated_at=1_700_000_100.0,
    )
