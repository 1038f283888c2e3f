from fastapi import APIRouter

from sarlink.ai.mission_planner import plan_requester
from sarlink.services.fleet_store import fleet_store
from sarlink.simulator.runner import simulation_runner
from sarlink.ws.manager import ws_manager

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> dict:
    """Liveness probe: always returns 200 if the process is running."""
    return {"status": "ok"}


@router.get("/health/ready")
async def readiness_check() -> dict:
    """Readiness probe: checks the simulation loop and planner credential."""
    checks: dict[str, str] = {
        "simulation": "ok" if simulation_runner.running else "stopped",
        "planner": "ok" if plan_requester.is_available() else "not_configured",
    }

    all_ok = all(v == "ok" for v in checks.values())

    return {
        "status": "ok" if all_ok else "degraded",
        "checks": checks,
        "robots_count": len(fleet_store.robots),
        "ticks": simulation_runner.simulator.tick_count,
        "ws_clients": len(ws_manager.active_connections),
    }
