"""Tests for SignalAnalyst and prompt construction."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import openai
import pytest

from market_intel.analysis.signal import (
    ANALYSIS_FAILED_MESSAGE,
    KEY_MISSING_MESSAGE,
    NO_SIGNAL_MESSAGE,
    SignalAnalyst,
    build_prompt,
    volatility_context,
)
from market_intel.config import AnalysisSettings
from market_intel.models import ChartMode, HighLowSample, PriceQuote, Snapshot


def _mock_openai(output_text: str = "## QUANT STRATEGY SIGNAL\n**LONG**") -> MagicMock:
    client = MagicMock()
    client.responses.create = AsyncMock(return_value=SimpleNamespace(output_text=output_text))
    client.close = AsyncMock()
    return client


@pytest.fixture
def keyed_settings() -> AnalysisSettings:
    return AnalysisSettings(api_key="sk-test", model="gpt-4.1-mini", max_output_tokens=300)  # type: ignore[arg-type]


class TestCredential:
    @pytest.mark.parametrize("key, expected", [("", False), ("   ", False), ("sk-test", True)])
    def test_has_credential(self, key: str, expected: bool) -> None:
        analyst = SignalAnalyst(AnalysisSettings(api_key=key))  # type: ignore[arg-type]
        assert analyst.has_credential is expected

    @pytest.mark.asyncio
    async def test_missing_key_returns_notice_without_calling(self, sample_snapshot: Snapshot) -> None:
        client = _mock_openai()
        analyst = SignalAnalyst(AnalysisSettings(api_key=""), client=client)  # type: ignore[arg-type]

        text = await analyst.analyze(sample_snapshot, ChartMode.COMBINED)

        assert text == KEY_MISSING_MESSAGE
        client.responses.create.assert_not_awaited()


class TestAnalyze:
    @pytest.mark.asyncio
    async def test_returns_model_text_verbatim(
        self, keyed_settings: AnalysisSettings, sample_snapshot: Snapshot
    ) -> None:
        client = _mock_openai("## QUANT STRATEGY SIGNAL\n| **SHORT** | **62%** | **1:3** |")
        analyst = SignalAnalyst(keyed_settings, client=client)

        text = await analyst.analyze(sample_snapshot, ChartMode.COMBINED)

        assert text == "## QUANT STRATEGY SIGNAL\n| **SHORT** | **62%** | **1:3** |"
        kwargs = client.responses.create.await_args.kwargs
        assert kwargs["model"] == "gpt-4.1-mini"
        assert kwargs["max_output_tokens"] == 300
        assert "BTC Price: $97250.5" in kwargs["input"]

    @pytest.mark.asyncio
    async def test_provider_error_returns_failure_message(
        self, keyed_settings: AnalysisSettings, sample_snapshot: Snapshot
    ) -> None:
        client = _mock_openai()
        client.responses.create.side_effect = openai.OpenAIError("quota exceeded")
        analyst = SignalAnalyst(keyed_settings, client=client)

        text = await analyst.analyze(sample_snapshot, ChartMode.COMBINED)

        assert text == ANALYSIS_FAILED_MESSAGE

    @pytest.mark.asyncio
    async def test_empty_output_returns_no_signal(
        self, keyed_settings: AnalysisSettings, sample_snapshot: Snapshot
    ) -> None:
        analyst = SignalAnalyst(keyed_settings, client=_mock_openai("  "))
        assert await analyst.analyze(sample_snapshot, ChartMode.PRIMARY) == NO_SIGNAL_MESSAGE

    @pytest.mark.asyncio
    async def test_close_closes_injected_client(self, keyed_settings: AnalysisSettings) -> None:
        client = _mock_openai()
        analyst = SignalAnalyst(keyed_settings, client=client)
        await analyst.close()
        client.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_without_client_is_noop(self, keyed_settings: AnalysisSettings) -> None:
        await SignalAnalyst(keyed_settings).close()


class TestPrompt:
    def test_interpolates_snapshot_numbers(self, sample_snapshot: Snapshot) -> None:
        prompt = build_prompt(sample_snapshot, ChartMode.COMBINED)

        assert "BTC Price: $97250.5 (24h change: 1.25%)" in prompt
        assert "Gold Price: $2675.0" in prompt
        assert "Funding Rate: 0.0100%" in prompt
        assert "1H: 0.52%" in prompt
        assert "## QUANT STRATEGY SIGNAL" in prompt

    def test_gold_falling_reads_risk_on(self, sample_snapshot: Snapshot) -> None:
        assert "Risk sentiment: Risk-On" in build_prompt(sample_snapshot, ChartMode.COMBINED)

    def test_gold_rising_reads_risk_off(self, sample_snapshot: Snapshot) -> None:
        rising = Snapshot(
            primary_quote=sample_snapshot.primary_quote,
            secondary_quote=PriceQuote(price=2700.0, change_percent=0.8),
            funding_rates=sample_snapshot.funding_rates,
            primary_high_low=sample_snapshot.primary_high_low,
            secondary_high_low=sample_snapshot.secondary_high_low,
            chart=sample_snapshot.chart,
            time_frame=sample_snapshot.time_frame,
            updated_at=sample_snapshot.updated_at,
        )
        assert "Risk sentiment: Risk-Off" in build_prompt(rising, ChartMode.COMBINED)

    def test_volatility_follows_visible_panel(self, sample_snapshot: Snapshot) -> None:
        prompt = build_prompt(sample_snapshot, ChartMode.SECONDARY)
        assert "24H: 0.00%" in prompt
        assert "1H: 0.37%" in prompt

    def test_volatility_context_empty(self) -> None:
        assert volatility_context([]) == "N/A"

    def test_volatility_context_format(self) -> None:
        samples = [HighLowSample.from_bounds("1H", 101.0, 100.0)]
        assert volatility_context(samples) == "1H: 1.00%"
