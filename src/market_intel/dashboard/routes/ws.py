"""WebSocket push channel: every published snapshot reaches every open dashboard."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from market_intel.dashboard.panels import render_panel_fragments

log = structlog.get_logger(__name__)

router = APIRouter()


class DashboardHub:
    """Tracks open dashboard sockets and fans panel HTML out to them."""

    def __init__(self) -> None:
        self.connections: list[WebSocket] = []

    async def connect(self, ws: WebSocket, initial_html: str | None = None) -> None:
        """Accept a socket and, if given, send it the current panels straight away."""
        await ws.accept()
        self.connections.append(ws)
        log.info("dashboard_ws_connected", total=len(self.connections))
        if initial_html:
            await ws.send_text(initial_html)

    def disconnect(self, ws: WebSocket) -> None:
        if ws in self.connections:
            self.connections.remove(ws)
        log.info("dashboard_ws_disconnected", total=len(self.connections))

    async def broadcast(self, html: str) -> int:
        """Send ``html`` to every client; drop sockets that fail. Returns the delivery count."""
        delivered = 0
        for ws in self.connections.copy():
            try:
                await ws.send_text(html)
                delivered += 1
            except Exception:
                self.connections.remove(ws)
                log.warning("dashboard_ws_broadcast_error", remaining=len(self.connections))
        return delivered


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    hub: DashboardHub = websocket.app.state.hub
    initial = render_panel_fragments(websocket.app) if websocket.app.state.refresher.snapshot else None
    await hub.connect(websocket, initial)
    try:
        while True:
            # Clients never send anything meaningful; reading detects disconnects
            await websocket.receive_text()
    except WebSocketDisconnect:
        hub.disconnect(websocket)
