"""
Cache layer: async Redis store and resource caches for video details and comment pages.
"""
from app.cache.cache_service import (
    CacheService,
    CommentsPageCache,
    VideoDetailsCache,
)
from app.cache.redis_store import RedisStore

__all__ = [
    "CacheService",
    "CommentsPageCache",
    "RedisStore",
    "VideoDetailsCache",
]
