"""Pure view derivations: (Snapshot, ChartMode) -> what the dashboard shows.

Nothing here performs I/O or mutates its inputs. Switching modes only
changes which derivation is computed; the Snapshot stays as published.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from market_intel.models import ChartMode, FundingRate, HighLowSample, PriceQuote, Snapshot
from market_intel.presentation.formatting import (
    format_change_percent,
    format_funding_rate,
    format_price,
    format_range_percent,
    funding_is_elevated,
)

PRIMARY_COLOR = "#4ecdc4"
SECONDARY_COLOR = "#ffd700"
LOADING_MESSAGE = "Synchronizing Market Data..."

LEFT_AXIS = "left"
RIGHT_AXIS = "right"


@dataclass(frozen=True)
class AxisConfig:
    axis_id: str
    visible: bool
    color: str
    compress_thousands: bool


@dataclass(frozen=True)
class SeriesBinding:
    """One instrument series: whether it is drawn and which Y axis it uses."""

    key: str  # "primary" or "secondary", matches ChartPoint fields
    name: str
    color: str
    visible: bool
    axis_id: str


@dataclass(frozen=True)
class ChartLayout:
    mode: ChartMode
    primary: SeriesBinding
    secondary: SeriesBinding
    left_axis: AxisConfig
    right_axis: AxisConfig

    @property
    def visible_series(self) -> tuple[SeriesBinding, ...]:
        return tuple(s for s in (self.primary, self.secondary) if s.visible)


@dataclass(frozen=True)
class ChartView:
    """Chart payload. When ``loading`` is set the series are empty and a placeholder is shown."""

    loading: bool
    message: str
    layout: ChartLayout
    labels: tuple[str, ...]
    primary_values: tuple[float, ...]
    secondary_values: tuple[float, ...]


@dataclass(frozen=True)
class TickerView:
    symbol: str
    name: str
    price: str
    change: str
    is_positive: bool


@dataclass(frozen=True)
class VolatilityRow:
    timeframe: str
    high: str
    low: str
    range_percent: str


@dataclass(frozen=True)
class FundingRow:
    exchange: str
    rate: str
    elevated: bool


def chart_layout(
    mode: ChartMode,
    primary_name: str = "Bitcoin (BTC)",
    secondary_name: str = "Gold (XAU)",
) -> ChartLayout:
    """Series visibility and axis binding for a chart mode.

    combined  -> primary on the left axis, secondary on the right axis
    primary   -> primary alone on the left axis, right axis hidden
    secondary -> secondary alone, rebound to the left axis, right axis hidden
    """
    if mode is ChartMode.COMBINED:
        primary = SeriesBinding("primary", primary_name, PRIMARY_COLOR, True, LEFT_AXIS)
        secondary = SeriesBinding("secondary", secondary_name, SECONDARY_COLOR, True, RIGHT_AXIS)
        left = AxisConfig(LEFT_AXIS, True, PRIMARY_COLOR, compress_thousands=True)
        right = AxisConfig(RIGHT_AXIS, True, SECONDARY_COLOR, compress_thousands=False)
    elif mode is ChartMode.PRIMARY:
        primary = SeriesBinding("primary", primary_name, PRIMARY_COLOR, True, LEFT_AXIS)
        secondary = SeriesBinding("secondary", secondary_name, SECONDARY_COLOR, False, LEFT_AXIS)
        left = AxisConfig(LEFT_AXIS, True, PRIMARY_COLOR, compress_thousands=True)
        right = AxisConfig(RIGHT_AXIS, False, SECONDARY_COLOR, compress_thousands=False)
    elif mode is ChartMode.SECONDARY:
        primary = SeriesBinding("primary", primary_name, PRIMARY_COLOR, False, LEFT_AXIS)
        secondary = SeriesBinding("secondary", secondary_name, SECONDARY_COLOR, True, LEFT_AXIS)
        left = AxisConfig(LEFT_AXIS, True, SECONDARY_COLOR, compress_thousands=False)
        right = AxisConfig(RIGHT_AXIS, False, SECONDARY_COLOR, compress_thousands=False)
    else:
        raise ValueError(f"Unknown chart mode: {mode!r}")

    return ChartLayout(
        mode=mode, primary=primary, secondary=secondary, left_axis=left, right_axis=right
    )


def volatility_panel(snapshot: Snapshot, mode: ChartMode) -> tuple[HighLowSample, ...]:
    """High/low list to display: secondary instrument's only in secondary mode."""
    if mode is ChartMode.SECONDARY:
        return snapshot.secondary_high_low
    return snapshot.primary_high_low


def chart_view(
    snapshot: Snapshot | None,
    mode: ChartMode,
    loading: bool,
    primary_name: str = "Bitcoin (BTC)",
    secondary_name: str = "Gold (XAU)",
) -> ChartView:
    """Chart payload for the selected mode, or a loading placeholder.

    The placeholder replaces the chart only when there is nothing to draw
    and a fetch is in flight; stale data stays on screen during a refresh.
    """
    layout = chart_layout(mode, primary_name, secondary_name)
    points = snapshot.chart if snapshot is not None else ()

    if loading and not points:
        return ChartView(
            loading=True,
            message=LOADING_MESSAGE,
            layout=layout,
            labels=(),
            primary_values=(),
            secondary_values=(),
        )

    return ChartView(
        loading=False,
        message="",
        layout=layout,
        labels=tuple(p.time_label for p in points),
        primary_values=tuple(p.primary for p in points) if layout.primary.visible else (),
        secondary_values=tuple(p.secondary for p in points) if layout.secondary.visible else (),
    )


def ticker_view(symbol: str, name: str, quote: PriceQuote) -> TickerView:
    return TickerView(
        symbol=symbol,
        name=name,
        price=format_price(quote.price),
        change=format_change_percent(quote.change_percent),
        is_positive=quote.change_percent >= 0,
    )


def volatility_rows(samples: Sequence[HighLowSample]) -> list[VolatilityRow]:
    return [
        VolatilityRow(
            timeframe=s.timeframe,
            high=format_price(s.high),
            low=format_price(s.low),
            range_percent=format_range_percent(s.range_percent),
        )
        for s in samples
    ]


def funding_rows(rates: Sequence[FundingRate]) -> list[FundingRow]:
    return [
        FundingRow(
            exchange=r.exchange,
            rate=format_funding_rate(r.rate),
            elevated=funding_is_elevated(r.rate),
        )
        for r in rates
    ]


def format_updated_at(updated_at: float | None, tz: ZoneInfo | timezone = timezone.utc) -> str:
    if updated_at is None:
        return "..."
    return datetime.fromtimestamp(updated_at, tz=tz).strftime("%H:%M:%S")


def build_dashboard_view(
    snapshot: Snapshot | None,
    mode: ChartMode,
    loading: bool,
    symbols: tuple[str, str],
    names: tuple[str, str],
    tz: ZoneInfo | timezone = timezone.utc,
) -> dict:
    """Template context for every dashboard panel.

    Args:
        snapshot: Published snapshot, or None before the first cycle.
        mode: Selected chart mode.
        loading: Whether a refresh cycle is in flight.
        symbols: (primary, secondary) ticker symbols for display.
        names: (primary, secondary) display names.
        tz: Zone used for the "Updated" clock.
    """
    primary_name, secondary_name = names
    view: dict = {
        "ready": snapshot is not None,
        "mode": mode.value,
        "loading": loading,
        "updated": format_updated_at(snapshot.updated_at if snapshot else None, tz),
        "chart": chart_view(snapshot, mode, loading, primary_name, secondary_name),
        "volatility_title": (
            f"{secondary_name if mode is ChartMode.SECONDARY else primary_name} Volatility"
        ),
    }
    if snapshot is None:
        view.update(tickers=[], volatility=[], funding=[], time_frame=None)
        return view

    view.update(
        time_frame=snapshot.time_frame.value,
        tickers=[
            ticker_view(symbols[0], primary_name, snapshot.primary_quote),
            ticker_view(symbols[1], secondary_name, snapshot.secondary_quote),
        ],
        volatility=volatility_rows(volatility_panel(snapshot, mode)),
        funding=funding_rows(snapshot.funding_rates),
    )
    return view
