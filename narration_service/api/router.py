from fastapi import APIRouter

from narration_service.api.endpoints import pois, visitors

api_router = APIRouter()

api_router.include_router(visitors.router, prefix="/visitors", tags=["visitors"])
api_router.include_router(pois.router, prefix="/pois", tags=["pois"])
