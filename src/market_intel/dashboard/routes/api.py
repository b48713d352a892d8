"""JSON API endpoints exposing the published snapshot and its derived views."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

import structlog
from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from market_intel.models import ChartMode, Snapshot
from market_intel.presentation import chart_view, volatility_panel

log = structlog.get_logger(__name__)

router = APIRouter()


def _parse_mode(raw: str | None, default: ChartMode) -> ChartMode:
    if raw is None:
        return default
    try:
        return ChartMode(raw)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Unknown chart mode: {raw}")


def _snapshot_to_dict(snapshot: Snapshot) -> dict[str, Any]:
    data = asdict(snapshot)
    data["time_frame"] = snapshot.time_frame.value
    return data


@router.get("/snapshot")
async def get_snapshot(request: Request) -> JSONResponse:
    """The published snapshot, or {"ready": false} before the first cycle completes."""
    snapshot = request.app.state.refresher.snapshot
    if snapshot is None:
        return JSONResponse(status_code=503, content={"ready": False})
    return JSONResponse(content={"ready": True, **_snapshot_to_dict(snapshot)})


@router.get("/chart")
async def get_chart(request: Request, mode: str | None = None) -> JSONResponse:
    """Chart series and axis layout for ``mode`` (defaults to the selected mode)."""
    refresher = request.app.state.refresher
    instruments = request.app.state.settings.instruments
    selected = _parse_mode(mode, request.app.state.view_state.mode)
    view = chart_view(
        refresher.snapshot,
        selected,
        loading=refresher.is_refreshing,
        primary_name=instruments.primary_name,
        secondary_name=instruments.secondary_name,
    )
    return JSONResponse(content=asdict(view))


@router.get("/volatility")
async def get_volatility(request: Request, mode: str | None = None) -> JSONResponse:
    """High/low samples for the instrument selected by ``mode``."""
    snapshot = request.app.state.refresher.snapshot
    if snapshot is None:
        return JSONResponse(status_code=503, content={"ready": False})
    selected = _parse_mode(mode, request.app.state.view_state.mode)
    return JSONResponse(
        content=[asdict(sample) for sample in volatility_panel(snapshot, selected)]
    )


@router.get("/status")
async def get_status(request: Request) -> JSONResponse:
    """Refresh loop status and current UI selections."""
    refresher = request.app.state.refresher
    snapshot = refresher.snapshot
    return JSONResponse(
        content={
            "running": refresher.is_running,
            "refreshing": refresher.is_refreshing,
            "time_frame": refresher.time_frame.value,
            "mode": request.app.state.view_state.mode.value,
            "updated_at": snapshot.updated_at if snapshot else None,
            "analysis_enabled": request.app.state.analyst.has_credential,
        }
    )
