"""Configuration system using pydantic-settings with environment variable loading."""

from typing import Literal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class ExchangeSettings(BaseSettings):
    """Upstream market-data connection settings (public endpoints only)."""

    model_config = SettingsConfigDict(env_prefix="EXCHANGE_")

    timeout_ms: int = 30000  # transport default; no per-request retry
    enable_rate_limit: bool = True


class InstrumentSettings(BaseSettings):
    """The two instruments shown side by side and their fallback quotes."""

    model_config = SettingsConfigDict(env_prefix="INSTRUMENTS_")

    primary_symbol: str = "BTCUSDT"
    primary_name: str = "Bitcoin (BTC)"
    primary_fallback_price: float = 95000.0

    # Paxos Gold trades around the clock and tracks spot XAU
    secondary_symbol: str = "PAXGUSDT"
    secondary_name: str = "Gold (XAU)"
    secondary_fallback_price: float = 2650.0

    funding_fallback_rate: float = 0.0100
    synthetic_funding_base: float = 0.01
    synthetic_funding_spread: float = 0.005


class DashboardSettings(BaseSettings):
    """Dashboard server configuration."""

    model_config = SettingsConfigDict(env_prefix="DASHBOARD_")

    host: str = "0.0.0.0"
    port: int = 8080
    enabled: bool = True
    refresh_interval: float = 30.0  # seconds between snapshot refresh cycles
    display_timezone: str = "UTC"
    default_time_frame: Literal["1h", "4h", "24h", "7d"] = "1h"


class AnalysisSettings(BaseSettings):
    """Generative-analysis provider settings.

    The API key is the only credential the dashboard knows about. When it
    is empty the analysis trigger is disabled and no call is attempted.
    """

    model_config = SettingsConfigDict(env_prefix="ANALYSIS_")

    api_key: SecretStr = SecretStr("")
    model: str = "gpt-4.1-mini"
    max_output_tokens: int = 600


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    exchange: ExchangeSettings = ExchangeSettings()
    instruments: InstrumentSettings = InstrumentSettings()
    dashboard: DashboardSettings = DashboardSettings()
    analysis: AnalysisSettings = AnalysisSettings()
