"""
Redis-backed JSON cache and the two resource caches: video details and comment pages.
"""
import json
import logging
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from app.cache.redis_store import RedisStore
from app.exceptions import CacheStoreError
from app.monitoring.metrics import track_cache_lookup
from app.schemas.youtube import CommentsPage, VideoDetails

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _load_entry(model: Type[ModelT], key: str, data: Any) -> Optional[ModelT]:
    """Запись кэша, не прошедшая валидацию схемы, считается промахом."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.warning("Cache entry does not match %s key=%s: %s", model.__name__, key, e)
        return None


class CacheService:
    """JSON-кэш поверх RedisStore. Ошибки Redis не пробрасываются: промах / пропуск записи."""

    def __init__(self, store: RedisStore, default_ttl: int = 3600) -> None:
        self.store = store
        self.default_ttl = default_ttl

    async def get(self, key: str) -> Optional[Any]:
        """Получение значения из кэша."""
        try:
            value = await self.store.get(key)
        except CacheStoreError as e:
            logger.warning("Cache get error key=%s: %s", key, e)
            return None
        if value is None:
            return None
        try:
            return json.loads(value)
        except ValueError as e:
            logger.warning("Cache entry is not valid JSON key=%s: %s", key, e)
            return None

    async def set(
        self,
        key: str,
        value: Any,
        ttl: Optional[int] = None,
    ) -> bool:
        """Установка значения в кэш."""
        try:
            await self.store.set(key, json.dumps(value), ttl or self.default_ttl)
            return True
        except CacheStoreError as e:
            logger.warning("Cache set error key=%s: %s", key, e)
            return False


class VideoDetailsCache:
    """Кэш деталей видео: video:<id>."""

    resource = "video"

    def __init__(self, cache_service: CacheService, ttl: int = 3600) -> None:
        self.cache = cache_service
        self.ttl = ttl

    @staticmethod
    def key(video_id: str) -> str:
        return f"video:{video_id}"

    async def get_details(self, video_id: str) -> Optional[VideoDetails]:
        """Детали видео из кэша или None."""
        key = self.key(video_id)
        data = await self.cache.get(key)
        details = None if data is None else _load_entry(VideoDetails, key, data)
        track_cache_lookup(self.resource, hit=details is not None)
        return details

    async def set_details(self, video_id: str, details: VideoDetails) -> bool:
        return await self.cache.set(
            self.key(video_id), details.model_dump(by_alias=True), self.ttl
        )


class CommentsPageCache:
    """Кэш страниц комментариев: comments:<videoId>:<pageToken|initial>."""

    resource = "comments"

    def __init__(self, cache_service: CacheService, ttl: int = 3600) -> None:
        self.cache = cache_service
        self.ttl = ttl

    @staticmethod
    def key(video_id: str, page_token: Optional[str] = None) -> str:
        return f"comments:{video_id}:{page_token or 'initial'}"

    async def get_page(
        self,
        video_id: str,
        page_token: Optional[str] = None,
    ) -> Optional[CommentsPage]:
        """Страница комментариев из кэша или None."""
        key = self.key(video_id, page_token)
        data = await self.cache.get(key)
        page = None if data is None else _load_entry(CommentsPage, key, data)
        track_cache_lookup(self.resource, hit=page is not None)
        return page

    async def set_page(
        self,
        video_id: str,
        page_token: Optional[str],
        page: CommentsPage,
    ) -> bool:
        return await self.cache.set(
            self.key(video_id, page_token), page.model_dump(by_alias=True), self.ttl
        )
