"""Single in-process view state shared by every dashboard client."""

from dataclasses import dataclass

from market_intel.models import ChartMode


@dataclass
class ViewState:
    """UI selections that do not affect fetching.

    The chart time frame lives on the SnapshotRefresher because it changes
    what is fetched; everything here only changes how a snapshot is shown.
    """

    mode: ChartMode = ChartMode.COMBINED
    analysis_text: str = ""
    analyzing: bool = False
