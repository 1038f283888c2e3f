from fastapi import APIRouter

from sarlink.api.fleet import router as fleet_router
from sarlink.api.health import router as health_router
from sarlink.api.logs import router as logs_router
from sarlink.api.plans import router as plans_router
from sarlink.api.session import router as session_router

api_router = APIRouter(prefix="/api")
api_router.include_router(health_router)
api_router.include_router(fleet_router)
api_router.include_router(plans_router)
api_router.include_router(logs_router)
api_router.include_router(session_router)
