"""On-demand trading-signal analysis via a hosted language model.

The current Snapshot's numbers are interpolated into a fixed prompt and
sent to the OpenAI Responses API. The result is free-form markdown shown
verbatim in the dashboard.

Credential handling is collapsed into one injected secret and a single
``has_credential`` predicate: the dashboard uses it to disable the trigger,
and ``analyze`` uses it to short-circuit before any client is built.
"""

from collections.abc import Sequence

import openai
from pydantic import SecretStr

from market_intel.config import AnalysisSettings
from market_intel.exceptions import AnalysisUnavailableError
from market_intel.logging import get_logger
from market_intel.models import ChartMode, HighLowSample, Snapshot
from market_intel.presentation.views import volatility_panel

logger = get_logger(__name__)

KEY_MISSING_MESSAGE = (
    "⚠️ API KEY MISSING.\nSet ANALYSIS_API_KEY in the environment or .env file."
)
ANALYSIS_FAILED_MESSAGE = "⚠️ Analysis engine connection failed. Check API quota."
NO_SIGNAL_MESSAGE = "Model returned no signal."

PROMPT_TEMPLATE = """\
ROLE: You are a senior quantitative crypto trader specialising in market microstructure.
TASK: Scan the market data below and produce ONE high-probability trade plan.

MARKET DATA:
- BTC Price: ${btc_price} (24h change: {btc_change}%)
- Gold Price: ${gold_price} (Risk sentiment: {risk_sentiment})
- Funding Rate: {funding_rate:.4f}% (sentiment proxy)
- Volatility Profile: {volatility}

ANALYSIS REQUIREMENTS:
1. **Liquidity Sweep**: identify price zones likely to be swept (stop hunts) before a reversal.
2. **Funding**: if funding is very positive (>0.01%), favour short scalps or wait for lower longs.
3. **Correlation**: assess capital rotation between crypto and gold.

OUTPUT FORMAT (MARKDOWN):

## QUANT STRATEGY SIGNAL

| Signal | Probability | Risk (R:R) |
| :---: | :---: | :---: |
| **[LONG/SHORT]** | **[XX]%** | **1:[X]** |

### PRECISION SETUP
* **Entry Zone**: $XXXXX - $XXXXX
* **Invalidation (SL)**: $XXXXX
* **Targets (TP)**:
   1. $XXXXX (Scalp)
   2. $XXXXX (Swing)

### LOGIC
> [One sentence on why, based on liquidity and funding]

*Setup is valid for the current session only.*
"""


def volatility_context(samples: Sequence[HighLowSample]) -> str:
    """'1H: 0.52%, 4H: 1.10%, ...' or 'N/A' when there are no samples."""
    if not samples:
        return "N/A"
    return ", ".join(f"{s.timeframe}: {s.range_percent:.2f}%" for s in samples)


def build_prompt(snapshot: Snapshot, mode: ChartMode) -> str:
    """Interpolate the snapshot into the analysis prompt.

    The volatility profile follows the panel visible for ``mode``; the
    funding rate is the live venue's, expressed in percent.
    """
    gold_change = snapshot.secondary_quote.change_percent
    return PROMPT_TEMPLATE.format(
        btc_price=snapshot.primary_quote.price,
        btc_change=snapshot.primary_quote.change_percent,
        gold_price=snapshot.secondary_quote.price,
        risk_sentiment="Risk-Off" if gold_change > 0 else "Risk-On",
        funding_rate=snapshot.primary_funding_rate * 100,
        volatility=volatility_context(volatility_panel(snapshot, mode)),
    )


class SignalAnalyst:
    """Turns a Snapshot into a markdown trading signal.

    Args:
        settings: Provider credential, model and token budget.
        client: Optional pre-built AsyncOpenAI client (tests inject a mock).
    """

    def __init__(
        self,
        settings: AnalysisSettings,
        client: openai.AsyncOpenAI | None = None,
    ) -> None:
        self._settings = settings
        self._client = client

    @property
    def has_credential(self) -> bool:
        return bool(self._api_key.get_secret_value().strip())

    @property
    def _api_key(self) -> SecretStr:
        return self._settings.api_key

    def _get_client(self) -> openai.AsyncOpenAI:
        if self._client is None:
            self._client = openai.AsyncOpenAI(api_key=self._api_key.get_secret_value())
        return self._client

    async def _generate(self, prompt: str) -> str:
        try:
            response = await self._get_client().responses.create(
                model=self._settings.model,
                input=prompt,
                max_output_tokens=self._settings.max_output_tokens,
            )
        except openai.OpenAIError as e:
            raise AnalysisUnavailableError(str(e)) from e
        return response.output_text or ""

    async def analyze(self, snapshot: Snapshot, mode: ChartMode) -> str:
        """Run one analysis. Always returns display text, never raises for provider errors."""
        if not self.has_credential:
            logger.warning("analysis_key_missing")
            return KEY_MISSING_MESSAGE

        prompt = build_prompt(snapshot, mode)
        logger.info("analysis_requested", model=self._settings.model, mode=mode.value)

        try:
            text = await self._generate(prompt)
        except AnalysisUnavailableError as e:
            logger.error("analysis_failed", error=str(e))
            return ANALYSIS_FAILED_MESSAGE

        if not text.strip():
            logger.warning("analysis_empty_response")
            return NO_SIGNAL_MESSAGE

        logger.info("analysis_completed", chars=len(text))
        return text

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
