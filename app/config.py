from pydantic_settings import BaseSettings
from typing import List, Optional
from functools import lru_cache


class Settings(BaseSettings):
    """Настройки приложения"""

    # Redis
    REDIS_URL: str = "redis://redis:6379/0"
    REDIS_HOST: Optional[str] = None
    REDIS_PORT: int = 6379
    REDIS_PASSWORD: Optional[str] = None
    REDIS_MAX_RETRIES: int = 10
    REDIS_SOCKET_TIMEOUT: float = 150.0

    # YouTube Data API
    YOUTUBE_API_KEY: str = ""
    YOUTUBE_BASE_URL: str = "https://www.googleapis.com/youtube/v3"
    YOUTUBE_TIMEOUT: float = 10.0

    # Cache TTL (seconds)
    VIDEO_DETAILS_CACHE_TTL: int = 3600
    VIDEO_COMMENTS_CACHE_TTL: int = 3600

    # Comments pagination
    DEFAULT_MAX_RESULTS: int = 20

    # Application
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True
    DEBUG: bool = True
    API_V1_PREFIX: str = "/api/v1"
    PROJECT_NAME: str = "Video Metadata API"
    VERSION: str = "1.0.0"

    # Documentation (basic auth)
    DOCS_USERNAME: str = "admin"
    DOCS_PASSWORD: str = "test"

    # Celery
    CELERY_BROKER_URL: str = "redis://redis:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://redis:6379/0"
    CELERY_TASK_TIME_LIMIT: int = 300
    CELERY_WORKER_PREFETCH_MULTIPLIER: int = 1
    CELERY_WORKER_CONCURRENCY: int = 4
    WORKER_MAX_RETRIES: int = 5

    # Monitoring
    ENABLE_METRICS: bool = True

    # Rate limiting (fixed window)
    RATE_LIMIT_WINDOW: int = 3600
    RATE_LIMIT_MAX: int = 1000
    RATE_LIMIT_EXEMPT_PATHS: List[str] = ["/health", "/metrics", "/api/v1/health/"]

    # CORS
    CORS_ORIGINS: List[str] = ["*"]

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def redis_url(self) -> str:
        """Формирование URL для Redis (REDIS_HOST имеет приоритет над REDIS_URL)"""
        if not self.REDIS_HOST:
            return self.REDIS_URL
        auth = f":{self.REDIS_PASSWORD}@" if self.REDIS_PASSWORD else ""
        return f"redis://{auth}{self.REDIS_HOST}:{self.REDIS_PORT}/0"


@lru_cache()
def get_settings() -> Settings:
    """Получить настройки (кэшированные)"""
    return Settings()


settings = get_settings()
