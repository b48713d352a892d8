"""Tests for the pure view derivations."""

import copy

import pytest

from market_intel.models import ChartMode, HighLowSample, Snapshot
from market_intel.presentation.views import (
    LOADING_MESSAGE,
    build_dashboard_view,
    chart_layout,
    chart_view,
    volatility_panel,
    volatility_rows,
)

SYMBOLS = ("BTCUSDT", "PAXGUSDT")
NAMES = ("Bitcoin (BTC)", "Gold (XAU)")


class TestChartLayout:
    def test_combined_uses_dual_axes(self) -> None:
        layout = chart_layout(ChartMode.COMBINED)
        assert layout.primary.visible and layout.secondary.visible
        assert layout.primary.axis_id == "left"
        assert layout.secondary.axis_id == "right"
        assert layout.right_axis.visible is True
        assert layout.left_axis.compress_thousands is True

    def test_primary_only_hides_secondary_axis(self) -> None:
        layout = chart_layout(ChartMode.PRIMARY)
        assert [s.key for s in layout.visible_series] == ["primary"]
        assert layout.primary.axis_id == "left"
        assert layout.right_axis.visible is False

    def test_secondary_only_rebinds_to_left_axis(self) -> None:
        layout = chart_layout(ChartMode.SECONDARY)
        assert [s.key for s in layout.visible_series] == ["secondary"]
        assert layout.secondary.axis_id == "left"
        assert layout.right_axis.visible is False
        assert layout.left_axis.color == layout.secondary.color
        assert layout.left_axis.compress_thousands is False

    def test_modes_are_deterministic_and_distinct(self) -> None:
        layouts = {mode: chart_layout(mode) for mode in ChartMode}
        for mode in ChartMode:
            assert chart_layout(mode) == layouts[mode]
        configs = {
            tuple((s.key, s.axis_id) for s in layout.visible_series) + (layout.right_axis.visible,)
            for layout in layouts.values()
        }
        assert len(configs) == 3

    def test_unknown_mode_rejected(self) -> None:
        with pytest.raises(ValueError):
            chart_layout("sideways")  # type: ignore[arg-type]


class TestVolatilityPanel:
    def test_secondary_mode_selects_secondary_list(self, sample_snapshot: Snapshot) -> None:
        assert volatility_panel(sample_snapshot, ChartMode.SECONDARY) is sample_snapshot.secondary_high_low

    @pytest.mark.parametrize("mode", [ChartMode.COMBINED, ChartMode.PRIMARY])
    def test_other_modes_select_primary_list(self, sample_snapshot: Snapshot, mode: ChartMode) -> None:
        assert volatility_panel(sample_snapshot, mode) is sample_snapshot.primary_high_low

    def test_zero_entry_renders_as_zero_values(self) -> None:
        rows = volatility_rows([HighLowSample.empty("24H")])
        assert rows[0].high == "$0.00"
        assert rows[0].low == "$0.00"
        assert rows[0].range_percent == "0.00%"


class TestChartView:
    def test_loading_placeholder_when_empty_and_fetching(self) -> None:
        view = chart_view(None, ChartMode.COMBINED, loading=True)
        assert view.loading is True
        assert view.message == LOADING_MESSAGE
        assert view.labels == ()

    def test_empty_chart_without_fetch_is_not_loading(self) -> None:
        view = chart_view(None, ChartMode.COMBINED, loading=False)
        assert view.loading is False
        assert view.labels == ()

    def test_stale_data_stays_visible_during_refresh(self, sample_snapshot: Snapshot) -> None:
        view = chart_view(sample_snapshot, ChartMode.COMBINED, loading=True)
        assert view.loading is False
        assert view.labels == ("10:00", "10:01")
        assert view.primary_values == (97000.0, 97100.0)
        assert view.secondary_values == (2670.0, 2650.0)

    def test_single_mode_drops_hidden_series(self, sample_snapshot: Snapshot) -> None:
        btc = chart_view(sample_snapshot, ChartMode.PRIMARY, loading=False)
        gold = chart_view(sample_snapshot, ChartMode.SECONDARY, loading=False)
        assert btc.secondary_values == () and len(btc.primary_values) == 2
        assert gold.primary_values == () and len(gold.secondary_values) == 2

    def test_mode_switch_leaves_snapshot_untouched(self, sample_snapshot: Snapshot) -> None:
        before = copy.deepcopy(sample_snapshot)
        for mode in ChartMode:
            chart_view(sample_snapshot, mode, loading=False)
            volatility_panel(sample_snapshot, mode)
        assert sample_snapshot == before


class TestDashboardView:
    def test_before_first_snapshot(self) -> None:
        view = build_dashboard_view(None, ChartMode.COMBINED, True, SYMBOLS, NAMES)
        assert view["ready"] is False
        assert view["updated"] == "..."
        assert view["tickers"] == []
        assert view["chart"].loading is True

    def test_full_view(self, sample_snapshot: Snapshot) -> None:
        view = build_dashboard_view(sample_snapshot, ChartMode.COMBINED, False, SYMBOLS, NAMES)

        btc, gold = view["tickers"]
        assert btc.symbol == "BTCUSDT"
        assert btc.price == "$97,250.50"
        assert btc.change == "1.25%" and btc.is_positive is True
        assert gold.change == "0.40%" and gold.is_positive is False

        assert [row.rate for row in view["funding"]] == ["0.0100%", "1.2300%"]
        assert [row.elevated for row in view["funding"]] == [False, True]

        assert view["volatility_title"] == "Bitcoin (BTC) Volatility"
        assert [row.timeframe for row in view["volatility"]] == ["1H", "4H", "24H", "7D"]
        assert view["updated"] == "22:15:00"
        assert view["time_frame"] == "1h"

    def test_secondary_mode_switches_volatility_panel(self, sample_snapshot: Snapshot) -> None:
        view = build_dashboard_view(sample_snapshot, ChartMode.SECONDARY, False, SYMBOLS, NAMES)
        assert view["volatility_title"] == "Gold (XAU) Volatility"
        assert view["volatility"][2].high == "$0.00"
