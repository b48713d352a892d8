"""Entry point for the market intelligence dashboard.

Wires all components together and serves the FastAPI dashboard with
uvicorn's programmatic API. The snapshot refresher shares uvicorn's event
loop and is started and stopped by the FastAPI lifespan.

Component wiring order (in _build_components):
1. AppSettings (configuration)
2. Logging setup
3. MarketDataClient (BinanceClient, public endpoints only)
4. MarketDataService (fail-safe fetch accessors)
5. SnapshotRefresher (periodic aggregation loop)
6. SignalAnalyst (generative analysis, optional credential)
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI

from market_intel.analysis import SignalAnalyst
from market_intel.config import AppSettings
from market_intel.exchange.binance_client import BinanceClient
from market_intel.logging import get_logger, setup_logging
from market_intel.market_data.fetchers import MarketDataService
from market_intel.market_data.refresher import SnapshotRefresher
from market_intel.models import TimeFrame


def _build_components(settings: AppSettings) -> dict[str, Any]:
    """Build all dashboard components from settings.

    Does NOT open connections or start the refresher -- that happens in the
    lifespan so both live and die with the web server.

    Args:
        settings: Application-wide settings.

    Returns:
        Dict mapping component names to instances.
    """
    logger = get_logger("market_intel.main")

    client = BinanceClient(settings.exchange)
    service = MarketDataService(
        client,
        settings.instruments,
        display_timezone=settings.dashboard.display_timezone,
    )
    refresher = SnapshotRefresher(
        service,
        refresh_interval=settings.dashboard.refresh_interval,
        time_frame=TimeFrame(settings.dashboard.default_time_frame),
    )
    analyst = SignalAnalyst(settings.analysis)

    if not analyst.has_credential:
        logger.warning(
            "no_analysis_key_configured",
            note="Market data works; the signal analysis trigger is disabled.",
        )

    return {
        "client": client,
        "service": service,
        "refresher": refresher,
        "analyst": analyst,
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage component lifecycle within the FastAPI application.

    On startup: connects the client, wires the WebSocket broadcaster and
    starts the refresher (which runs a first cycle immediately).

    On shutdown: stops the refresher, then closes the analysis and exchange
    clients.
    """
    from market_intel.dashboard.panels import snapshot_broadcaster

    logger = get_logger("market_intel.main")
    components = app.state.components

    app.state.refresher = components["refresher"]
    app.state.analyst = components["analyst"]

    await components["client"].connect()
    components["refresher"].add_listener(snapshot_broadcaster(app))
    await components["refresher"].start()

    logger.info("lifespan_started", interval=app.state.settings.dashboard.refresh_interval)

    yield

    await components["refresher"].stop()
    await components["analyst"].close()
    await components["client"].close()

    logger.info("market_intel_stopped")


async def run() -> None:
    """Run the dashboard server until interrupted."""
    settings = AppSettings()

    setup_logging(settings.log_level)
    logger = get_logger("market_intel.main")

    components = _build_components(settings)

    if not settings.dashboard.enabled:
        # Headless: keep snapshots fresh and log them, no web server
        refresher = components["refresher"]
        logger.info("starting_without_dashboard")
        try:
            await components["client"].connect()
            await refresher.start()
            while True:
                await asyncio.sleep(3600)
        finally:
            await refresher.stop()
            await components["client"].close()
            logger.info("market_intel_stopped")
        return

    from market_intel.dashboard.app import create_dashboard_app

    app = create_dashboard_app(lifespan=lifespan)
    app.state.settings = settings
    app.state.components = components

    logger.info(
        "starting_with_dashboard",
        host=settings.dashboard.host,
        port=settings.dashboard.port,
    )

    config = uvicorn.Config(
        app,
        host=settings.dashboard.host,
        port=settings.dashboard.port,
        log_level="warning",  # Suppress uvicorn access logs
    )
    server = uvicorn.Server(config)
    await server.serve()


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
