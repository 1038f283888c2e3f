from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from sarlink.services.fleet_store import fleet_store

router = APIRouter(prefix="/fleet", tags=["fleet"])


@router.get("")
async def list_robots() -> dict[str, Any]:
    return {
        "robots": [r.to_dict() for r in fleet_store.robots.values()]
    }


@router.get("/{robot_id}")
async def get_robot(robot_id: str) -> dict[str, Any]:
    robot = fleet_store.get(robot_id)
    if robot is None:
        return {"error": "not found"}
    return robot.to_dict()
