"""Market data layer -- fail-safe fetch accessors and the snapshot refresh loop."""

from market_intel.market_data.fetchers import MarketDataService
from market_intel.market_data.refresher import SnapshotRefresher

__all__ = ["MarketDataService", "SnapshotRefresher"]
