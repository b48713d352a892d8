"""Generative-analysis boundary -- prompt building and the model call."""

from market_intel.analysis.signal import (
    ANALYSIS_FAILED_MESSAGE,
    KEY_MISSING_MESSAGE,
    NO_SIGNAL_MESSAGE,
    SignalAnalyst,
    build_prompt,
)

__all__ = [
    "ANALYSIS_FAILED_MESSAGE",
    "KEY_MISSING_MESSAGE",
    "NO_SIGNAL_MESSAGE",
    "SignalAnalyst",
    "build_prompt",
]
