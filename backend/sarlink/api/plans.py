from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel

from sarlink.ai.mission_planner import PlanRequestBusy
from sarlink.services.console import mission_console

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/plans", tags=["plans"])


class SubmitCommandRequest(BaseModel):
    command: str


@router.post("")
async def submit_command(body: SubmitCommandRequest) -> dict[str, Any]:
    """Ask the planner for a plan from a natural language command."""
    try:
        plan = await mission_console.submit_command(body.command)
    except PlanRequestBusy as e:
        return {"error": str(e)}
    return {"plan": plan.to_dict() if plan else None}


@router.get("/current")
async def get_current_plan() -> dict[str, Any]:
    plan = mission_console.current_plan
    return {"plan": plan.to_dict() if plan else None}


@router.post("/current/execute")
async def execute_current_plan() -> dict[str, Any]:
    assigned = mission_console.execute_plan()
    if assigned is None:
        return {"error": "no plan to execute"}
    return {"assigned": [r.to_dict() for r in assigned]}


@router.post("/current/discard")
async def discard_current_plan() -> dict[str, Any]:
    if not mission_console.discard_plan():
        return {"error": "no plan to discard"}
    return {"plan": None}
