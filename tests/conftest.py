"""
Pytest configuration and fixtures for Video Metadata API tests
"""
import os
from typing import Any, Callable, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest


# Set test environment variables BEFORE any imports
os.environ['REDIS_URL'] = 'redis://localhost:6379/0'
os.environ['CELERY_BROKER_URL'] = 'memory://'
os.environ['CELERY_RESULT_BACKEND'] = 'cache+memory://'
os.environ['YOUTUBE_API_KEY'] = 'test-api-key'
os.environ['YOUTUBE_BASE_URL'] = 'https://youtube.test/youtube/v3'
os.environ['DOCS_USERNAME'] = 'docs'
os.environ['DOCS_PASSWORD'] = 'docs-secret'
os.environ['RATE_LIMIT_MAX'] = '5'
os.environ['RATE_LIMIT_WINDOW'] = '60'
os.environ['LOG_JSON'] = 'false'


class FakeRedisStore:
    """In-memory замена RedisStore: те же async-операции + журнал вызовов."""

    def __init__(self):
        self.data: Dict[str, str] = {}
        self.ttls: Dict[str, int] = {}
        self.calls: List[tuple] = []
        self.error: Optional[Exception] = None

    def _check(self, *call):
        self.calls.append(call)
        if self.error is not None:
            raise self.error

    def ops(self, name: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == name]

    async def get(self, key):
        self._check("get", key)
        return self.data.get(key)

    async def set(self, key, value, ttl):
        self._check("set", key, value, ttl)
        self.data[key] = value
        self.ttls[key] = ttl

    async def incr(self, key):
        self._check("incr", key)
        value = int(self.data.get(key, 0)) + 1
        self.data[key] = str(value)
        return value

    async def expire(self, key, seconds):
        self._check("expire", key, seconds)
        if key not in self.data:
            return False
        self.ttls[key] = seconds
        return True

    async def ttl(self, key):
        self._check("ttl", key)
        if key not in self.data:
            return -2
        return self.ttls.get(key, -1)

    async def ping(self):
        self._check("ping")
        return True

    async def close(self):
        pass


class FakeYouTube:
    """Upstream YouTube API на httpx.MockTransport: ответы по пути, журнал запросов."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.responses: Dict[str, Callable[[httpx.Request], httpx.Response]] = {}

    def respond(self, endpoint: str, json: Any = None, status_code: int = 200):
        self.responses[endpoint] = lambda request: httpx.Response(status_code, json=json)

    def raise_on(self, endpoint: str, exc: Exception):
        def handler(request):
            raise exc
        self.responses[endpoint] = handler

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        endpoint = "/" + request.url.path.rsplit("/", 1)[-1]
        if endpoint not in self.responses:
            return httpx.Response(404, json={"error": {"code": 404}})
        return self.responses[endpoint](request)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def fake_store():
    return FakeRedisStore()


@pytest.fixture
def fake_youtube():
    return FakeYouTube()


@pytest.fixture
def youtube_client(fake_youtube):
    from app.youtube.client import YouTubeClient

    return YouTubeClient(
        "https://youtube.test/youtube/v3",
        "test-api-key",
        timeout=5,
        transport=fake_youtube.transport(),
    )


@pytest.fixture
def scheduler():
    """Мок PageScheduler."""
    mock = MagicMock()
    mock.schedule = AsyncMock(return_value="job-1")
    return mock


@pytest.fixture
def youtube_service(fake_store, youtube_client, scheduler):
    from app.cache.cache_service import CacheService, CommentsPageCache, VideoDetailsCache
    from app.services.youtube_service import YouTubeService

    cache = CacheService(fake_store)
    return YouTubeService(
        client=youtube_client,
        details_cache=VideoDetailsCache(cache, ttl=3600),
        comments_cache=CommentsPageCache(cache, ttl=1800),
        scheduler=scheduler,
    )


@pytest.fixture
async def client(fake_store, youtube_service):
    """
    Async HTTP клиент к приложению.
    Lifespan не запускается: состояние app.state подставляется фикстурами.
    """
    from httpx import AsyncClient, ASGITransport
    from app.main import app
    from app.middleware.rate_limit_middleware import RateLimiter

    app.state.redis_store = fake_store
    app.state.rate_limiter = RateLimiter(fake_store, max_requests=5, window_seconds=60)
    app.state.youtube_service = youtube_service

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
