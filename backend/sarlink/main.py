from __future__ import annotations

import asyncio
import json as _json
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from sarlink.ai.mission_planner import PlanRequestBusy, plan_requester
from sarlink.api.router import api_router
from sarlink.config import settings
from sarlink.middleware.rate_limit import RateLimitMiddleware
from sarlink.services.console import mission_console
from sarlink.services.fleet_store import fleet_store
from sarlink.services.log_store import log_store
from sarlink.simulator.runner import simulation_runner
from sarlink.ws.manager import ws_manager


class _JSONFormatter(logging.Formatter):
    """Structured JSON log formatter for production."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "ts": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1]:
            log_entry["exc"] = self.formatException(record.exc_info)
        return _json.dumps(log_entry)


def _setup_logging() -> None:
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if settings.debug else logging.INFO)
    handler = logging.StreamHandler()
    if settings.debug:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    else:
        handler.setFormatter(_JSONFormatter())
    root.addHandler(handler)


_setup_logging()
logger = logging.getLogger(__name__)

# Strong references to in-flight websocket plan requests
_background_tasks: set[asyncio.Task[None]] = set()


async def _broadcast_fleet(tick: int) -> None:
    if tick % max(1, settings.broadcast_every_ticks) == 0:
        await ws_manager.broadcast("fleet.update", fleet_store.to_dict())


def _wire_events() -> None:
    """Forward store and planner changes to connected operators."""
    log_store.add_listener(lambda entry: ws_manager.broadcast_soon("log.entry", entry.to_dict()))
    mission_console.on_plan_changed(
        lambda plan: ws_manager.broadcast_soon("plan.updated", plan.to_dict() if plan else None)
    )
    plan_requester.add_listener(
        lambda state: ws_manager.broadcast_soon("planner.state", {"state": state})
    )
    simulation_runner.on_tick(_broadcast_fleet)


_wire_events()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    # Startup
    logger.info("Starting SAR-Link operations console")
    if not plan_requester.is_available():
        logger.warning("Planner %s has no credential; plans will fail", settings.planner_provider)
    await simulation_runner.start()
    yield
    # Shutdown
    logger.info("Shutting down SAR-Link operations console")
    await simulation_runner.stop()


async def _request_plan(websocket: WebSocket, command: str) -> None:
    try:
        await mission_console.submit_command(command)
    except PlanRequestBusy as e:
        await ws_manager.send_to(websocket, "error", {"message": str(e)})
    except Exception:
        logger.exception("Plan request from websocket failed")


async def handle_ws_message(websocket: WebSocket, data: dict[str, Any]) -> None:
    """Process incoming WebSocket messages from the frontend."""
    msg_type = data.get("type", "")
    payload = data.get("payload") or {}
    if not isinstance(payload, dict):
        logger.warning("Ignoring WS %s message with non-object payload", msg_type)
        return

    if msg_type == "plan.request":
        command = payload.get("command", "")
        if not isinstance(command, str):
            await ws_manager.send_to(websocket, "error", {"message": "command must be a string"})
            return
        # Planning runs in the background so this socket can still discard or execute
        task = asyncio.create_task(_request_plan(websocket, command))
        _background_tasks.add(task)
        task.add_done_callback(_background_tasks.discard)

    elif msg_type == "plan.execute":
        if mission_console.execute_plan() is None:
            await ws_manager.send_to(websocket, "error", {"message": "no plan to execute"})

    elif msg_type == "plan.discard":
        mission_console.discard_plan()

    else:
        logger.debug("Ignoring unknown WS message type: %s", msg_type)


def create_app() -> FastAPI:
    app = FastAPI(title="SAR-Link Operations Console", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if not settings.debug:
        app.add_middleware(RateLimitMiddleware)

    app.include_router(api_router)

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket) -> None:
        await ws_manager.connect(websocket)
        # Send full state snapshot on connect
        await ws_manager.send_to(websocket, "state.sync", mission_console.to_dict())
        try:
            while True:
                raw = await websocket.receive_text()
                try:
                    data = _json.loads(raw)
                except ValueError:
                    logger.warning("Dropping malformed WS frame from operator")
                    continue
                if not isinstance(data, dict):
                    logger.warning("Dropping non-object WS frame from operator")
                    continue
                logger.debug("WS message from operator: %s", data.get("type"))
                await handle_ws_message(websocket, data)
        except WebSocketDisconnect:
            pass
        finally:
            ws_manager.disconnect(websocket)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("sarlink.main:app", host="0.0.0.0", port=8000)
