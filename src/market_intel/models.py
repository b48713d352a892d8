"""Shared data models for the market intelligence dashboard.

All records are frozen: a refresh cycle allocates fresh instances and the
published Snapshot is replaced wholesale, never patched field by field.
Prices are plain floats -- these are display values, not order amounts.
"""

import time
from dataclasses import dataclass, field
from enum import Enum


class TimeFrame(str, Enum):
    """Chart lookback tier selected in the UI."""

    H1 = "1h"
    H4 = "4h"
    D1 = "24h"
    D7 = "7d"

    @property
    def label(self) -> str:
        return _TIME_FRAME_LABELS[self]


_TIME_FRAME_LABELS = {
    TimeFrame.H1: "1H",
    TimeFrame.H4: "4H",
    TimeFrame.D1: "24H",
    TimeFrame.D7: "7D",
}


class ChartMode(str, Enum):
    """Which instrument series are visible on the composed chart."""

    COMBINED = "combined"
    PRIMARY = "primary"
    SECONDARY = "secondary"


@dataclass(frozen=True)
class CandleTier:
    """Kline interval and point count requested for one time frame."""

    interval: str
    limit: int


# Candle resolution per chart time frame
CHART_TIERS: dict[TimeFrame, CandleTier] = {
    TimeFrame.H1: CandleTier("1m", 60),
    TimeFrame.H4: CandleTier("5m", 48),
    TimeFrame.D1: CandleTier("15m", 96),
    TimeFrame.D7: CandleTier("2h", 84),
}
DEFAULT_CHART_TIER = CandleTier("1h", 168)


@dataclass(frozen=True)
class LookbackWindow:
    """One high/low lookback window: display label plus the kline query."""

    label: str
    interval: str
    limit: int


# Fixed order -- HighLowSample lists always follow it
LOOKBACK_WINDOWS: tuple[LookbackWindow, ...] = (
    LookbackWindow("1H", "1h", 2),
    LookbackWindow("4H", "4h", 2),
    LookbackWindow("24H", "1d", 1),
    LookbackWindow("7D", "1w", 1),
)


@dataclass(frozen=True)
class PriceQuote:
    """Last trade price and 24h change for one instrument."""

    price: float
    change_percent: float
    change: float = 0.0


@dataclass(frozen=True)
class FundingRate:
    """One venue's funding rate as a fraction (0.0001 == 0.01%)."""

    exchange: str
    rate: float


@dataclass(frozen=True)
class HighLowSample:
    """High/low bounds for a lookback window plus the derived range."""

    timeframe: str
    high: float
    low: float
    range_percent: float

    @classmethod
    def from_bounds(cls, timeframe: str, high: float, low: float) -> "HighLowSample":
        """Build a sample, deriving range_percent and guarding low == 0."""
        range_percent = (high - low) / low * 100 if low > 0 else 0.0
        return cls(timeframe=timeframe, high=high, low=low, range_percent=range_percent)

    @classmethod
    def empty(cls, timeframe: str) -> "HighLowSample":
        return cls(timeframe=timeframe, high=0.0, low=0.0, range_percent=0.0)


@dataclass(frozen=True)
class ChartPoint:
    """One synchronized instant across the primary and secondary instruments."""

    time_label: str
    timestamp_ms: int
    primary: float
    secondary: float


@dataclass(frozen=True)
class Snapshot:
    """Everything the view shows for one refresh cycle, published atomically."""

    primary_quote: PriceQuote
    secondary_quote: PriceQuote
    funding_rates: tuple[FundingRate, ...]
    primary_high_low: tuple[HighLowSample, ...]
    secondary_high_low: tuple[HighLowSample, ...]
    chart: tuple[ChartPoint, ...]
    time_frame: TimeFrame
    updated_at: float = field(default_factory=time.time)

    @property
    def primary_funding_rate(self) -> float:
        """Rate of the first configured venue, or 0 when the list is empty."""
        return self.funding_rates[0].rate if self.funding_rates else 0.0
