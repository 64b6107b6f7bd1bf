"""
Router principal da API v1.

Inclui todos os routers de endpoints.
"""

from fastapi import APIRouter

from app.api.v1.config import router as config_router
from app.api.v1.fines import router as fines_router
from app.api.v1.system import router as system_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(fines_router)
api_router.include_router(config_router)
api_router.include_router(system_router)
