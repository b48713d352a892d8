"""Snapshot refresher -- the periodic aggregation loop behind the dashboard.

Each cycle fans out to every fetch-layer accessor at once, waits for all of
them to settle, and publishes one immutable Snapshot by replacing a single
reference. Readers therefore see either the previous snapshot or the new
one, never a mix.

Cycles are not mutually excluded: a manual refresh can overlap a timer
tick. Every cycle takes a sequence number when it starts, and a completion
is only published if no later-started cycle has published first, so a slow
old cycle can never overwrite fresher data.

After stop(), a cycle that is still in flight runs to completion (its
requests are shielded from cancellation) and its result is discarded.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable

from market_intel.logging import get_logger
from market_intel.market_data.fetchers import MarketDataService
from market_intel.models import Snapshot, TimeFrame

logger = get_logger(__name__)

SnapshotListener = Callable[[Snapshot], Awaitable[None]]


class SnapshotRefresher:
    """Keeps one Snapshot fresh on a fixed cadence.

    Args:
        service: Fetch-layer accessors.
        refresh_interval: Seconds between timer-driven cycles.
        time_frame: Initial chart time frame.
    """

    def __init__(
        self,
        service: MarketDataService,
        refresh_interval: float = 30.0,
        time_frame: TimeFrame = TimeFrame.H1,
    ) -> None:
        self._service = service
        self._refresh_interval = refresh_interval
        self._time_frame = time_frame
        self._snapshot: Snapshot | None = None
        self._listeners: list[SnapshotListener] = []
        self._running = False
        self._stopped = False
        self._task: asyncio.Task | None = None  # type: ignore[type-arg]
        self._cycle_seq = 0
        self._published_seq = 0
        self._in_flight = 0

    # ──────────────────────────────────────────────
    # State
    # ──────────────────────────────────────────────

    @property
    def snapshot(self) -> Snapshot | None:
        """The currently published snapshot, or None before the first cycle completes."""
        return self._snapshot

    @property
    def time_frame(self) -> TimeFrame:
        return self._time_frame

    @property
    def is_refreshing(self) -> bool:
        return self._in_flight > 0

    @property
    def is_running(self) -> bool:
        return self._running

    def set_time_frame(self, time_frame: TimeFrame) -> None:
        """Select the chart tier used by cycles started from now on."""
        if time_frame is not self._time_frame:
            logger.info(
                "time_frame_changed",
                previous=self._time_frame.value,
                current=time_frame.value,
            )
            self._time_frame = time_frame

    def add_listener(self, listener: SnapshotListener) -> None:
        """Register a coroutine called with every newly published snapshot."""
        self._listeners.append(listener)

    # ──────────────────────────────────────────────
    # Lifecycle
    # ──────────────────────────────────────────────

    async def start(self) -> None:
        """Refresh immediately, then every refresh_interval seconds, in the background."""
        if self._running:
            logger.warning("snapshot_refresher_already_running")
            return
        self._running = True
        self._stopped = False
        self._task = asyncio.create_task(self._refresh_loop())
        logger.info("snapshot_refresher_started", interval=self._refresh_interval)

    async def stop(self) -> None:
        """Tear down the schedule. In-flight cycles finish but are not published."""
        self._running = False
        self._stopped = True
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("snapshot_refresher_stopped")

    async def _refresh_loop(self) -> None:
        while self._running:
            # Shield so that stop() cancels the schedule, not the requests
            await asyncio.shield(self.refresh())
            if self._running:
                await asyncio.sleep(self._refresh_interval)

    # ──────────────────────────────────────────────
    # One cycle
    # ──────────────────────────────────────────────

    async def _collect(self, time_frame: TimeFrame) -> Snapshot:
        service = self._service
        (
            primary_quote,
            secondary_quote,
            funding_rates,
            primary_high_low,
            secondary_high_low,
            chart,
        ) = await asyncio.gather(
            service.fetch_primary_quote(),
            service.fetch_secondary_quote(),
            service.fetch_funding_rates(),
            service.fetch_high_low(service.primary_symbol),
            service.fetch_high_low(service.secondary_symbol),
            service.fetch_chart_series(time_frame),
        )
        return Snapshot(
            primary_quote=primary_quote,
            secondary_quote=secondary_quote,
            funding_rates=tuple(funding_rates),
            primary_high_low=tuple(primary_high_low),
            secondary_high_low=tuple(secondary_high_low),
            chart=tuple(chart),
            time_frame=time_frame,
            updated_at=time.time(),
        )

    async def refresh(self) -> Snapshot | None:
        """Run one aggregation cycle and publish its snapshot.

        Returns the snapshot visible after the cycle: the new one if it was
        published, otherwise whatever was already published (possibly None).
        """
        self._cycle_seq += 1
        seq = self._cycle_seq
        time_frame = self._time_frame
        self._in_flight += 1
        started = time.monotonic()

        try:
            snapshot = await self._collect(time_frame)
        except asyncio.CancelledError:
            raise
        except Exception:
            # Accessors swallow their own errors; reaching here is a defect
            logger.error("snapshot_refresh_failed", cycle=seq, exc_info=True)
            return self._snapshot
        finally:
            self._in_flight -= 1

        if self._stopped:
            logger.debug("snapshot_discarded_after_stop", cycle=seq)
            return self._snapshot
        if seq < self._published_seq:
            logger.debug(
                "snapshot_discarded_stale",
                cycle=seq,
                published=self._published_seq,
            )
            return self._snapshot

        self._snapshot = snapshot
        self._published_seq = seq
        logger.info(
            "snapshot_published",
            cycle=seq,
            time_frame=time_frame.value,
            chart_points=len(snapshot.chart),
            duration_ms=round((time.monotonic() - started) * 1000),
        )

        await self._notify(snapshot)
        return snapshot

    async def _notify(self, snapshot: Snapshot) -> None:
        for listener in list(self._listeners):
            try:
                await listener(snapshot)
            except Exception:
                logger.warning("snapshot_listener_error", exc_info=True)
