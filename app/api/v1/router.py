"""
API v1 Router
"""
from fastapi import APIRouter

from app.api.v1.health import router as health_router
from app.api.v1.youtube import router as youtube_router

api_router = APIRouter()

# Подключение роутеров
api_router.include_router(health_router, prefix="/health", tags=["Health"])
api_router.include_router(youtube_router, prefix="/youtube", tags=["YouTube"])
