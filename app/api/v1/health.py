"""
Health check endpoints
"""
import logging

from fastapi import APIRouter, Request

from app.exceptions import CacheStoreError

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/")
async def health_check(request: Request):
    """Проверка здоровья приложения и доступности Redis"""
    redis_status = "ok"
    try:
        await request.app.state.redis_store.ping()
    except CacheStoreError as e:
        logger.warning("Health check: Redis unavailable: %s", e)
        redis_status = "unavailable"
    return {
        "success": redis_status == "ok",
        "status": "healthy" if redis_status == "ok" else "degraded",
        "redis": redis_status,
    }
