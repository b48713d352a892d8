"""Presentation layer -- pure derivations from a Snapshot to display data."""

from market_intel.presentation.formatting import (
    format_axis_value,
    format_change_percent,
    format_funding_rate,
    format_price,
    format_range_percent,
    funding_is_elevated,
)
from market_intel.presentation.views import (
    ChartLayout,
    ChartView,
    build_dashboard_view,
    chart_layout,
    chart_view,
    volatility_panel,
)

__all__ = [
    "ChartLayout",
    "ChartView",
    "build_dashboard_view",
    "chart_layout",
    "chart_view",
    "format_axis_value",
    "format_change_percent",
    "format_funding_rate",
    "format_price",
    "format_range_percent",
    "funding_is_elevated",
    "volatility_panel",
]
