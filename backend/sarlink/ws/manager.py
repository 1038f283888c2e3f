from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


def make_event(event_type: str, payload: Any) -> dict[str, Any]:
    return {
        "type": event_type,
        "payload": payload,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


class ConnectionManager:
    def __init__(self) -> None:
        self.active_connections: list[WebSocket] = []
        self._pending: set[asyncio.Task[None]] = set()

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self.active_connections.append(websocket)
        logger.info("Operator connected. Total: %d", len(self.active_connections))

    def disconnect(self, websocket: WebSocket) -> None:
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)
        logger.info("Operator disconnected. Total: %d", len(self.active_connections))

    async def broadcast(self, event_type: str, payload: Any) -> None:
        if not self.active_connections:
            return
        message = make_event(event_type, payload)
        disconnected: list[WebSocket] = []
        for conn in list(self.active_connections):
            try:
                await conn.send_json(message)
            except Exception:
                disconnected.append(conn)
        for conn in disconnected:
            self.disconnect(conn)

    def broadcast_soon(self, event_type: str, payload: Any) -> None:
        """Schedule a broadcast from synchronous code running on the event loop."""
        if not self.active_connections:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        task = loop.create_task(self.broadcast(event_type, payload))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def send_to(self, websocket: WebSocket, event_type: str, payload: Any) -> None:
        try:
            await websocket.send_json(make_event(event_type, payload))
        except Exception:
            self.disconnect(websocket)


ws_manager = ConnectionManager()
