"""Page route serving the full dashboard HTML."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from market_intel.dashboard.panels import dashboard_context

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
async def dashboard_index(request: Request) -> HTMLResponse:
    """Render every panel from the currently published snapshot (or placeholders)."""
    templates: Jinja2Templates = request.app.state.templates
    return templates.TemplateResponse(request, "index.html", dashboard_context(request.app))
