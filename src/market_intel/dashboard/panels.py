"""Panel rendering shared by page loads, action responses and WebSocket pushes.

Every panel is rendered from the same template context and wrapped in an
htmx out-of-band swap div, so one payload refreshes the whole dashboard.
"""

from __future__ import annotations

from dataclasses import asdict
from zoneinfo import ZoneInfo

import structlog
from fastapi import FastAPI
from fastapi.templating import Jinja2Templates

from market_intel.models import Snapshot, TimeFrame
from market_intel.presentation import build_dashboard_view

log = structlog.get_logger(__name__)

# (element id, partial template)
PANELS: tuple[tuple[str, str], ...] = (
    ("status-panel", "partials/status.html"),
    ("tickers-panel", "partials/tickers.html"),
    ("chart-panel", "partials/chart.html"),
    ("volatility-panel", "partials/volatility.html"),
    ("funding-panel", "partials/funding.html"),
    ("analysis-panel", "partials/analysis.html"),
)


def dashboard_context(app: FastAPI) -> dict:
    """Gather snapshot, view state and settings into one template context."""
    settings = app.state.settings
    refresher = app.state.refresher
    view_state = app.state.view_state
    analyst = app.state.analyst
    instruments = settings.instruments

    view = build_dashboard_view(
        refresher.snapshot,
        view_state.mode,
        loading=refresher.is_refreshing,
        symbols=(instruments.primary_symbol, instruments.secondary_symbol),
        names=(instruments.primary_name, instruments.secondary_name),
        tz=ZoneInfo(settings.dashboard.display_timezone),
    )
    return {
        **view,
        "chart_json": asdict(view["chart"]),
        "time_frame": refresher.time_frame.value,
        "time_frames": [(tf.value, tf.label) for tf in TimeFrame],
        "has_credential": analyst.has_credential,
        "analysis_text": view_state.analysis_text,
        "analyzing": view_state.analyzing,
    }


def render_panel_fragments(app: FastAPI) -> str:
    """Render every panel as OOB swap divs, concatenated into one HTML payload."""
    templates: Jinja2Templates = app.state.templates
    env = templates.env
    context = dashboard_context(app)

    fragments = []
    for element_id, template_name in PANELS:
        html = env.get_template(template_name).render(**context)
        fragments.append(f'<div id="{element_id}" hx-swap-oob="innerHTML">{html}</div>')
    return "\n".join(fragments)


def snapshot_broadcaster(app: FastAPI):
    """Build the refresher listener that pushes fresh panels to all WebSocket clients."""

    async def _broadcast(snapshot: Snapshot) -> None:
        hub = app.state.hub
        if not hub.connections:
            return
        await hub.broadcast(render_panel_fragments(app))
        log.debug("dashboard_panels_broadcast", clients=len(hub.connections))

    return _broadcast
