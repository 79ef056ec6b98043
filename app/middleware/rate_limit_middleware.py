"""
Rate limiting middleware (fixed window counter in Redis)
"""
import logging

from starlette.requests import Request
from starlette.responses import JSONResponse

from app.cache.redis_store import RedisStore
from app.config import settings
from app.exceptions import CacheStoreError, RateLimitExceededError
from app.monitoring.metrics import track_rate_limit_rejection

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Фиксированное окно: INCR rateLimit:<ip>, на первом запросе окна EXPIRE.
    Счётчик увеличивается и для отклонённых запросов. На границе окон
    возможен всплеск до 2x лимита.
    """

    def __init__(self, store: RedisStore, max_requests: int, window_seconds: int):
        self.store = store
        self.max_requests = max_requests
        self.window_seconds = window_seconds

    @staticmethod
    def key(client_address: str) -> str:
        return f"rateLimit:{client_address}"

    async def admit(self, client_address: str) -> int:
        """
        Пропустить запрос или выбросить RateLimitExceededError.
        Ошибки Redis (CacheStoreError) пробрасываются вызывающему.
        """
        key = self.key(client_address)
        current = await self.store.incr(key)
        if current == 1:
            await self.store.expire(key, self.window_seconds)
        if current > self.max_requests:
            # счётчик без TTL (EXPIRE на первом запросе не прошёл) - окно не закроется само
            if await self.store.ttl(key) == -1:
                logger.warning("Rate limit key %s has no expiry, restoring window", key)
                await self.store.expire(key, self.window_seconds)
            raise RateLimitExceededError()
        return current


class RateLimitMiddleware:
    """Middleware для ограничения частоты запросов (ASGI-совместимый)"""

    def __init__(self, app, exempt_paths=None):
        self.app = app
        self.exempt_paths = set(
            settings.RATE_LIMIT_EXEMPT_PATHS if exempt_paths is None else exempt_paths
        )

    async def __call__(self, scope, receive, send):
        """Обработка запроса с rate limiting"""
        if scope["type"] != "http" or scope["path"] in self.exempt_paths:
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive, send)
        client_ip = request.client.host if request.client else "unknown"
        limiter: RateLimiter = request.app.state.rate_limiter

        try:
            await limiter.admit(client_ip)
        except RateLimitExceededError as e:
            track_rate_limit_rejection("limit")
            logger.info("Rate limit exceeded for %s", client_ip, extra={"client_ip": client_ip})
            response = JSONResponse(status_code=429, content={"detail": e.message})
            await response(scope, receive, send)
            return
        except CacheStoreError as e:
            # fail closed: без счётчика запрос не пропускаем
            track_rate_limit_rejection("store_unavailable")
            logger.error(
                "Rate limiter store error for %s: %s", client_ip, e,
                extra={"client_ip": client_ip},
            )
            response = JSONResponse(
                status_code=503, content={"detail": "Rate limiter unavailable"}
            )
            await response(scope, receive, send)
            return

        await self.app(scope, receive, send)
