"""POST endpoints behind the dashboard controls.

Each action returns the full set of OOB panel fragments, so the clicking
client updates immediately; other clients catch up on the next broadcast.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Form, HTTPException, Request
from fastapi.responses import HTMLResponse

from market_intel.analysis import KEY_MISSING_MESSAGE
from market_intel.dashboard.panels import render_panel_fragments
from market_intel.models import ChartMode, TimeFrame

log = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/refresh", response_class=HTMLResponse)
async def refresh(request: Request) -> HTMLResponse:
    """Manual refresh: run one cycle now, outside the timer."""
    await request.app.state.refresher.refresh()
    return HTMLResponse(render_panel_fragments(request.app))


@router.post("/timeframe", response_class=HTMLResponse)
async def set_time_frame(request: Request, time_frame: str = Form(...)) -> HTMLResponse:
    """Switch the chart tier and refresh so the new candles show at once."""
    try:
        selected = TimeFrame(time_frame)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Unknown time frame: {time_frame}")

    refresher = request.app.state.refresher
    if selected is not refresher.time_frame:
        refresher.set_time_frame(selected)
        await refresher.refresh()
    return HTMLResponse(render_panel_fragments(request.app))


@router.post("/mode", response_class=HTMLResponse)
async def set_mode(request: Request, mode: str = Form(...)) -> HTMLResponse:
    """Switch chart mode. Presentation only: no fetch, snapshot untouched."""
    try:
        selected = ChartMode(mode)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Unknown chart mode: {mode}")

    request.app.state.view_state.mode = selected
    log.info("chart_mode_changed", mode=selected.value)
    return HTMLResponse(render_panel_fragments(request.app))


@router.post("/analyze", response_class=HTMLResponse)
async def analyze(request: Request) -> HTMLResponse:
    """Run the signal analysis on the current snapshot; replaces any previous text."""
    view_state = request.app.state.view_state
    analyst = request.app.state.analyst
    snapshot = request.app.state.refresher.snapshot

    if not analyst.has_credential:
        view_state.analysis_text = KEY_MISSING_MESSAGE
    elif snapshot is None:
        view_state.analysis_text = "Market data is still loading. Try again in a moment."
    else:
        view_state.analyzing = True
        view_state.analysis_text = ""
        try:
            view_state.analysis_text = await analyst.analyze(snapshot, view_state.mode)
        finally:
            view_state.analyzing = False

    return HTMLResponse(render_panel_fragments(request.app))
