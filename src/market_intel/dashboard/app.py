"""FastAPI dashboard application factory with Jinja2 templates and WebSocket hub."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from fastapi import FastAPI
from fastapi.templating import Jinja2Templates

from market_intel.dashboard.routes import actions, api, pages, ws
from market_intel.dashboard.routes.ws import DashboardHub
from market_intel.dashboard.state import ViewState
from market_intel.presentation import format_axis_value

TEMPLATES_DIR = Path(__file__).parent / "templates"


def create_dashboard_app(lifespan: Any = None) -> FastAPI:
    """Create and configure the FastAPI dashboard application.

    Args:
        lifespan: Optional async context manager for application lifespan events.
                  Used by main.py to start and stop the snapshot refresher.

    Returns:
        Configured FastAPI application with templates, WebSocket hub, and routes.
        Callers must set ``settings``, ``refresher`` and ``analyst`` on app.state.
    """
    app = FastAPI(
        title="Market Intelligence Dashboard",
        lifespan=lifespan,
    )

    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
    templates.env.filters["axis_value"] = format_axis_value
    app.state.templates = templates

    app.state.hub = DashboardHub()
    app.state.view_state = ViewState()

    app.include_router(pages.router)
    app.include_router(api.router, prefix="/api")
    app.include_router(actions.router, prefix="/actions")
    app.include_router(ws.router)

    return app
