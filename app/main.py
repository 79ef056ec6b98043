"""
Главное приложение FastAPI
"""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

from app.config import settings
from app.api.v1.router import api_router
from app.cache.redis_store import RedisStore
from app.exceptions import VideoAPIError
from app.logging_config import setup_logging
from app.middleware.docs_auth_middleware import DocsAuthMiddleware
from app.middleware.logging_middleware import LoggingMiddleware
from app.middleware.rate_limit_middleware import RateLimiter, RateLimitMiddleware
from app.monitoring.metrics import setup_metrics
from app.services.youtube_service import create_youtube_service


setup_logging(settings.LOG_LEVEL, use_json=settings.LOG_JSON)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan события приложения"""
    logger.info("Starting %s...", settings.PROJECT_NAME)
    store = RedisStore(settings)
    app.state.redis_store = store
    app.state.rate_limiter = RateLimiter(
        store, settings.RATE_LIMIT_MAX, settings.RATE_LIMIT_WINDOW
    )
    app.state.youtube_service = create_youtube_service(store, settings)
    logger.info("Redis store and YouTube service initialized")

    yield

    logger.info("Shutting down %s...", settings.PROJECT_NAME)
    await app.state.youtube_service.close()
    await store.close()
    logger.info("Redis connection closed")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Кэширующий фасад над YouTube Data API: детали видео и комментарии",
    lifespan=lifespan
)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Gzip Middleware
app.add_middleware(GZipMiddleware, minimum_size=1000)

# Custom Middleware (последний добавленный - внешний: логируются и 429/503 лимитера)
app.add_middleware(DocsAuthMiddleware)
app.add_middleware(RateLimitMiddleware)
app.add_middleware(LoggingMiddleware)

if settings.ENABLE_METRICS:
    setup_metrics(app)


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": {"code": code, "message": message},
        },
    )


@app.exception_handler(VideoAPIError)
async def video_api_exception_handler(request: Request, exc: VideoAPIError):
    """NotFound -> 404, QuotaExceeded -> 403, Upstream -> 500, InvalidInput -> 400"""
    return _error_response(exc.status_code, exc.code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Ошибки валидации параметров -> 400"""
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid input") if errors else "Invalid input"
    return _error_response(400, "INVALID_INPUT", message)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Глобальный обработчик исключений"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return _error_response(
        500,
        "INTERNAL_ERROR",
        "Internal server error" if not settings.DEBUG else str(exc),
    )


@app.get("/health")
async def health_check():
    """Проверка здоровья приложения"""
    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "version": settings.VERSION
    }


# API Routes
app.include_router(api_router, prefix=settings.API_V1_PREFIX)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        workers=1 if settings.DEBUG else 4
    )
