from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from sarlink.services.log_store import log_store

router = APIRouter(prefix="/logs", tags=["logs"])


@router.get("")
async def list_logs(limit: int = 50) -> dict[str, Any]:
    return {"logs": [e.to_dict() for e in log_store.entries(limit)]}
