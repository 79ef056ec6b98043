"""
Async Redis key-value store: get / set-with-expiry / incr / expire / ttl with a bounded reconnect policy.
"""
import asyncio
import logging
from typing import Optional

from redis.asyncio import Redis
from redis.asyncio.retry import Retry
from redis.backoff import NoBackoff
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError

from app.config import Settings, get_settings
from app.exceptions import CacheStoreError, CacheStoreUnavailableError

logger = logging.getLogger(__name__)

RETRY_STEP_SECONDS = 0.1
RETRY_MAX_DELAY_SECONDS = 3.0


def retry_delay(attempt: int, max_retries: int = 10) -> Optional[float]:
    """
    Задержка перед попыткой переподключения attempt (1..).
    None означает, что попытки исчерпаны.
    """
    if attempt > max_retries:
        return None
    return min(attempt * RETRY_STEP_SECONDS, RETRY_MAX_DELAY_SECONDS)


class RedisStore:
    """
    Строковое хранилище на redis.asyncio. Один экземпляр на процесс.
    Переподключение выполняет сам RedisStore (retry_delay + asyncio.sleep);
    встроенные повторы redis-py отключены.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[Redis] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self.max_retries = self._settings.REDIS_MAX_RETRIES
        self._unavailable = False
        self._redis = client or Redis.from_url(
            self._settings.redis_url,
            decode_responses=True,
            socket_timeout=self._settings.REDIS_SOCKET_TIMEOUT,
            retry=Retry(NoBackoff(), 0),
        )

    @property
    def available(self) -> bool:
        return not self._unavailable

    async def _call(self, op: str, fn, *args, **kwargs):
        if self._unavailable:
            raise CacheStoreUnavailableError(
                f"Redis unavailable after {self.max_retries} reconnect attempts"
            )
        attempt = 0
        while True:
            try:
                return await fn(*args, **kwargs)
            except RedisConnectionError as e:
                attempt += 1
                delay = retry_delay(attempt, self.max_retries)
                if delay is None:
                    self._unavailable = True
                    logger.error(
                        "Redis connection failed after %s attempts (op=%s): %s",
                        attempt, op, e,
                    )
                    raise CacheStoreUnavailableError(str(e)) from e
                logger.warning(
                    "Redis connection error (op=%s), retry %s in %.1fs: %s",
                    op, attempt, delay, e,
                )
                await asyncio.sleep(delay)
            except RedisError as e:
                logger.warning("Redis %s error: %s", op, e)
                raise CacheStoreError(str(e)) from e

    async def get(self, key: str) -> Optional[str]:
        return await self._call("get", self._redis.get, key)

    async def set(self, key: str, value: str, ttl: int) -> None:
        """SET key value EX ttl."""
        await self._call("set", self._redis.set, key, value, ex=ttl)

    async def incr(self, key: str) -> int:
        return int(await self._call("incr", self._redis.incr, key))

    async def expire(self, key: str, seconds: int) -> bool:
        return bool(await self._call("expire", self._redis.expire, key, seconds))

    async def ttl(self, key: str) -> int:
        """TTL в секундах; -1 - ключ без срока жизни, -2 - ключа нет."""
        return int(await self._call("ttl", self._redis.ttl, key))

    async def ping(self) -> bool:
        return bool(await self._call("ping", self._redis.ping))

    async def close(self) -> None:
        await self._redis.aclose()
