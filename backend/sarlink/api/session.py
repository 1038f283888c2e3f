from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from sarlink.services.console import mission_console

router = APIRouter(prefix="/session", tags=["session"])


@router.get("")
async def get_session() -> dict[str, Any]:
    return mission_console.to_dict()


@router.post("/reset")
async def reset_session() -> dict[str, Any]:
    """Restore the initial fleet and clear the plan, command and journal."""
    mission_console.reset()
    return mission_console.to_dict()
