"""Fetch layer -- one accessor per upstream endpoint, each with a fallback.

Every accessor catches its own failures (network, HTTP status, malformed
JSON, non-numeric fields), logs a warning, and returns a value of the
documented shape. Callers never see an exception and never see a missing
entry: funding and high/low lists keep their fixed cardinality.

Fallbacks:
  price quote  -> configured constant price, 0% change
  funding rate -> configured constant for the live venue
  high/low     -> zero-valued sample for the failed window only
  chart series -> empty list if either instrument's candles fail
"""

import asyncio
import math
import random
from datetime import datetime, timezone
from typing import Any
from zoneinfo import ZoneInfo

from market_intel.config import InstrumentSettings
from market_intel.exceptions import UpstreamDataError
from market_intel.exchange.client import MarketDataClient
from market_intel.logging import get_logger
from market_intel.models import (
    CHART_TIERS,
    DEFAULT_CHART_TIER,
    LOOKBACK_WINDOWS,
    ChartPoint,
    FundingRate,
    HighLowSample,
    LookbackWindow,
    PriceQuote,
    TimeFrame,
)

logger = get_logger(__name__)

LIVE_FUNDING_VENUE = "Binance"
SYNTHETIC_FUNDING_VENUE = "Bybit"


def parse_number(raw: Any, field_name: str) -> float:
    """Parse an upstream string-typed number into a finite float.

    Raises:
        UpstreamDataError: If the value is missing, non-numeric, NaN or infinite.
    """
    if raw is None:
        raise UpstreamDataError(f"missing field {field_name}")
    try:
        value = float(raw)
    except (TypeError, ValueError) as e:
        raise UpstreamDataError(f"non-numeric {field_name}: {raw!r}") from e
    if not math.isfinite(value):
        raise UpstreamDataError(f"non-finite {field_name}: {raw!r}")
    return value


def format_time_label(timestamp_ms: int, time_frame: TimeFrame, tz: ZoneInfo | timezone) -> str:
    """Axis label for a candle: date + hour on the 7D chart, clock time otherwise."""
    dt = datetime.fromtimestamp(timestamp_ms / 1000, tz=tz)
    if time_frame is TimeFrame.D7:
        return dt.strftime("%m/%d %H:00")
    return dt.strftime("%H:%M")


def join_series(
    primary_klines: list[list],
    secondary_klines: list[list],
    time_frame: TimeFrame,
    secondary_default: float,
    tz: ZoneInfo | timezone = timezone.utc,
) -> list[ChartPoint]:
    """Join two candle series on exact open-time equality.

    Produces one ChartPoint per primary candle, in primary order. A primary
    candle with no secondary candle at the same open time gets
    ``secondary_default`` instead of being dropped.
    """
    secondary_by_time: dict[int, float] = {}
    for row in secondary_klines:
        secondary_by_time[int(row[0])] = parse_number(row[4], "close")

    points: list[ChartPoint] = []
    for row in primary_klines:
        timestamp_ms = int(row[0])
        points.append(
            ChartPoint(
                time_label=format_time_label(timestamp_ms, time_frame, tz),
                timestamp_ms=timestamp_ms,
                primary=parse_number(row[4], "close"),
                secondary=secondary_by_time.get(timestamp_ms, secondary_default),
            )
        )
    return points


class MarketDataService:
    """Typed, failure-proof accessors over a MarketDataClient.

    Args:
        client: Raw upstream REST client.
        instruments: Symbols and fallback values for both instruments.
        rng: Random source for the synthetic funding venue (injectable for tests).
        display_timezone: IANA zone name used for chart time labels.
    """

    def __init__(
        self,
        client: MarketDataClient,
        instruments: InstrumentSettings,
        rng: random.Random | None = None,
        display_timezone: str = "UTC",
    ) -> None:
        self._client = client
        self._instruments = instruments
        self._rng = rng or random.Random()
        self._tz = ZoneInfo(display_timezone)

    @property
    def primary_symbol(self) -> str:
        return self._instruments.primary_symbol

    @property
    def secondary_symbol(self) -> str:
        return self._instruments.secondary_symbol

    # ──────────────────────────────────────────────
    # Price quotes
    # ──────────────────────────────────────────────

    async def fetch_price_quote(self, symbol: str, fallback_price: float) -> PriceQuote:
        """Fetch the 24h ticker for ``symbol``; fall back to ``fallback_price`` at 0% change."""
        try:
            data = await self._client.fetch_ticker_24h(symbol)
            return PriceQuote(
                price=parse_number(data.get("lastPrice"), "lastPrice"),
                change_percent=parse_number(
                    data.get("priceChangePercent"), "priceChangePercent"
                ),
                change=parse_number(data.get("priceChange", 0), "priceChange"),
            )
        except Exception as e:
            logger.warning("ticker_fetch_failed", symbol=symbol, error=str(e))
            return PriceQuote(price=fallback_price, change_percent=0.0)

    async def fetch_primary_quote(self) -> PriceQuote:
        return await self.fetch_price_quote(
            self._instruments.primary_symbol, self._instruments.primary_fallback_price
        )

    async def fetch_secondary_quote(self) -> PriceQuote:
        return await self.fetch_price_quote(
            self._instruments.secondary_symbol, self._instruments.secondary_fallback_price
        )

    # ──────────────────────────────────────────────
    # Funding rates
    # ──────────────────────────────────────────────

    async def fetch_funding_rates(self) -> list[FundingRate]:
        """Return [live venue, synthetic venue], always in that order.

        The second venue has no live source; its rate is drawn uniformly
        from [base, base + spread) on every call.
        """
        symbol = self._instruments.primary_symbol
        try:
            data = await self._client.fetch_premium_index(symbol)
            live_rate = parse_number(data.get("lastFundingRate"), "lastFundingRate")
        except Exception as e:
            logger.warning("funding_rate_fetch_failed", symbol=symbol, error=str(e))
            live_rate = self._instruments.funding_fallback_rate

        synthetic_rate = (
            self._instruments.synthetic_funding_base
            + self._rng.random() * self._instruments.synthetic_funding_spread
        )

        return [
            FundingRate(exchange=LIVE_FUNDING_VENUE, rate=live_rate),
            FundingRate(exchange=SYNTHETIC_FUNDING_VENUE, rate=synthetic_rate),
        ]

    # ──────────────────────────────────────────────
    # High / low
    # ──────────────────────────────────────────────

    async def _fetch_window(self, symbol: str, window: LookbackWindow) -> HighLowSample:
        try:
            klines = await self._client.fetch_klines(symbol, window.interval, window.limit)
            if not klines:
                return HighLowSample.empty(window.label)
            candle = klines[-1]
            return HighLowSample.from_bounds(
                window.label,
                high=parse_number(candle[2], "high"),
                low=parse_number(candle[3], "low"),
            )
        except Exception as e:
            logger.warning(
                "high_low_fetch_failed",
                symbol=symbol,
                window=window.label,
                error=str(e),
            )
            return HighLowSample.empty(window.label)

    async def fetch_high_low(self, symbol: str) -> list[HighLowSample]:
        """Fetch all lookback windows concurrently, returned in LOOKBACK_WINDOWS order."""
        return list(
            await asyncio.gather(
                *(self._fetch_window(symbol, window) for window in LOOKBACK_WINDOWS)
            )
        )

    # ──────────────────────────────────────────────
    # Chart series
    # ──────────────────────────────────────────────

    async def fetch_chart_series(self, time_frame: TimeFrame) -> list[ChartPoint]:
        """Fetch both instruments' candles for the tier and join them by open time."""
        tier = CHART_TIERS.get(time_frame, DEFAULT_CHART_TIER)
        primary_symbol = self._instruments.primary_symbol
        secondary_symbol = self._instruments.secondary_symbol

        try:
            primary_klines, secondary_klines = await asyncio.gather(
                self._client.fetch_klines(primary_symbol, tier.interval, tier.limit),
                self._client.fetch_klines(secondary_symbol, tier.interval, tier.limit),
            )
            points = join_series(
                primary_klines,
                secondary_klines,
                time_frame,
                secondary_default=self._instruments.secondary_fallback_price,
                tz=self._tz,
            )
        except Exception as e:
            logger.warning(
                "chart_series_fetch_failed",
                time_frame=time_frame.value,
                interval=tier.interval,
                error=str(e),
            )
            return []

        logger.debug(
            "chart_series_fetched",
            time_frame=time_frame.value,
            points=len(points),
            secondary_candles=len(secondary_klines),
        )
        return points
