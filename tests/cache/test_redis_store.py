"""
Тесты RedisStore: операции, политика переподключения, недоступность хранилища.
"""
import socket

import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import ResponseError

from app.cache.redis_store import RedisStore
from app.config import Settings, get_settings
from app.exceptions import CacheStoreError, CacheStoreUnavailableError


@pytest.fixture
def mock_redis():
    """Мок redis.asyncio.Redis."""
    redis = MagicMock()
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock(return_value=True)
    redis.incr = AsyncMock(return_value=1)
    redis.expire = AsyncMock(return_value=True)
    redis.ttl = AsyncMock(return_value=-1)
    redis.ping = AsyncMock(return_value=True)
    redis.aclose = AsyncMock()
    return redis


@pytest.fixture
def store(mock_redis):
    return RedisStore(get_settings(), client=mock_redis)


@pytest.fixture
def mock_sleep():
    with patch("app.cache.redis_store.asyncio.sleep", new_callable=AsyncMock) as sleep:
        yield sleep


def _refused_port() -> int:
    """Порт, на котором никто не слушает."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


class TestReconnectPolicy:
    """Переподключение: пауза 100ms * n (не больше 3s), не больше REDIS_MAX_RETRIES попыток."""

    @pytest.mark.asyncio
    async def test_recovers_after_transient_failures(self, store, mock_redis, mock_sleep):
        mock_redis.get.side_effect = [
            RedisConnectionError("refused"),
            RedisConnectionError("refused"),
            "value",
        ]

        assert await store.get("key") == "value"

        assert [c.args[0] for c in mock_sleep.await_args_list] == pytest.approx([0.1, 0.2])
        assert mock_redis.get.await_count == 3
        assert store.available

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self, mock_redis, mock_sleep):
        store = RedisStore(Settings(REDIS_MAX_RETRIES=3), client=mock_redis)
        mock_redis.incr.side_effect = RedisConnectionError("refused")

        with pytest.raises(CacheStoreUnavailableError):
            await store.incr("key")

        assert [c.args[0] for c in mock_sleep.await_args_list] == pytest.approx([0.1, 0.2, 0.3])
        assert mock_redis.incr.await_count == 4
        assert not store.available

    @pytest.mark.asyncio
    async def test_delay_is_capped(self, mock_redis, mock_sleep):
        store = RedisStore(Settings(REDIS_MAX_RETRIES=40), client=mock_redis)
        mock_redis.ping.side_effect = RedisConnectionError("refused")

        with pytest.raises(CacheStoreUnavailableError):
            await store.ping()

        delays = [c.args[0] for c in mock_sleep.await_args_list]
        assert len(delays) == 40
        assert delays[9] == pytest.approx(1.0)
        assert max(delays) == pytest.approx(3.0)

    @pytest.mark.asyncio
    async def test_real_client_follows_store_backoff(self, mock_sleep):
        """Настоящий redis.asyncio клиент: отказ соединения проходит через тот же цикл."""
        settings = Settings(
            REDIS_URL=f"redis://127.0.0.1:{_refused_port()}/0",
            REDIS_MAX_RETRIES=3,
            REDIS_SOCKET_TIMEOUT=1,
        )
        store = RedisStore(settings)
        try:
            with pytest.raises(CacheStoreUnavailableError):
                await store.get("key")
        finally:
            await store.close()

        assert [c.args[0] for c in mock_sleep.await_args_list] == pytest.approx([0.1, 0.2, 0.3])
        assert not store.available


class TestRedisStore:
    """Unit тесты RedisStore."""

    @pytest.mark.asyncio
    async def test_get_returns_value(self, store, mock_redis):
        mock_redis.get.return_value = '{"a": 1}'
        assert await store.get("key") == '{"a": 1}'
        mock_redis.get.assert_awaited_once_with("key")

    @pytest.mark.asyncio
    async def test_set_uses_expiry(self, store, mock_redis):
        await store.set("key", "value", 3600)
        mock_redis.set.assert_awaited_once_with("key", "value", ex=3600)

    @pytest.mark.asyncio
    async def test_incr_returns_int(self, store, mock_redis):
        mock_redis.incr.return_value = 7
        assert await store.incr("rateLimit:1.2.3.4") == 7

    @pytest.mark.asyncio
    async def test_expire_returns_bool(self, store, mock_redis):
        mock_redis.expire.return_value = 0
        assert await store.expire("key", 60) is False
        mock_redis.expire.assert_awaited_once_with("key", 60)

    @pytest.mark.asyncio
    async def test_ttl_reports_missing_expiry(self, store, mock_redis):
        assert await store.ttl("rateLimit:1.2.3.4") == -1
        mock_redis.ttl.assert_awaited_once_with("rateLimit:1.2.3.4")

    @pytest.mark.asyncio
    async def test_command_error_maps_to_cache_store_error(self, store, mock_redis):
        mock_redis.incr.side_effect = ResponseError("WRONGTYPE")
        with pytest.raises(CacheStoreError):
            await store.incr("key")
        assert store.available

    @pytest.mark.asyncio
    async def test_connection_failure_marks_store_unavailable(self, store, mock_redis, mock_sleep):
        """После исчерпания попыток хранилище недоступно до рестарта."""
        mock_redis.get.side_effect = RedisConnectionError("refused")
        with pytest.raises(CacheStoreUnavailableError):
            await store.get("key")
        assert not store.available

        mock_redis.get.side_effect = None
        with pytest.raises(CacheStoreUnavailableError):
            await store.get("key")
        assert mock_redis.get.await_count == store.max_retries + 1

    @pytest.mark.asyncio
    async def test_close_closes_client(self, store, mock_redis):
        await store.close()
        mock_redis.aclose.assert_awaited_once()
