"""
Celery tasks: fetchNextPage warms the cache for the next page of comments
"""
import asyncio
import logging
from typing import Any, Dict

from app.cache.redis_store import RedisStore
from app.config import get_settings
from app.exceptions import CacheStoreError, InvalidInputError, UpstreamError
from app.queue.celery_app import celery_app
from app.queue.scheduler import FETCH_NEXT_PAGE_TASK
from app.schemas.youtube import CommentsRequest, CommentsPage
from app.services.youtube_service import YouTubeService, create_youtube_service

logger = logging.getLogger(__name__)

settings = get_settings()


def validate_job_payload(payload: Dict[str, Any]) -> CommentsRequest:
    """
    Проверка payload задачи fetchNextPage.
    videoId - непустая строка, maxResults (если есть) - целое 1..100,
    pageToken передаётся как есть.
    """
    if not isinstance(payload, dict):
        raise InvalidInputError("invalid resource id")

    video_id = payload.get("videoId")
    if not video_id or not isinstance(video_id, str):
        raise InvalidInputError("invalid resource id")

    max_results = payload.get("maxResults")
    if max_results is None:
        max_results = settings.DEFAULT_MAX_RESULTS
    elif (
        isinstance(max_results, bool)
        or not isinstance(max_results, int)
        or not 1 <= max_results <= 100
    ):
        raise InvalidInputError("invalid page size")

    return CommentsRequest(
        video_id=video_id,
        max_results=max_results,
        page_token=payload.get("pageToken"),
    )


async def process_fetch_next_page(
    service: YouTubeService,
    payload: Dict[str, Any],
) -> CommentsPage:
    """Загрузить страницу через тот же cache-aside путь, что и HTTP-запрос. Ошибки пробрасываются."""
    request = validate_job_payload(payload)
    logger.debug(
        "Start fetching next page video=%s page_token=%s",
        request.video_id, request.page_token,
        extra={"video_id": request.video_id, "page_token": request.page_token},
    )
    page = await service.get_video_comments(request)
    logger.debug("Finished fetching next page video=%s", request.video_id)
    return page


async def _async_fetch_next_page(payload: Dict[str, Any]) -> Dict[str, Any]:
    store = RedisStore(settings)
    service = create_youtube_service(store, settings)
    try:
        page = await process_fetch_next_page(service, payload)
    finally:
        await service.close()
        await store.close()
    return {
        "videoId": payload.get("videoId"),
        "comments": len(page.comments),
        "nextPageToken": page.next_page_token,
    }


@celery_app.task(
    name=FETCH_NEXT_PAGE_TASK,
    bind=True,
    acks_late=True,
    max_retries=settings.WORKER_MAX_RETRIES,
    autoretry_for=(UpstreamError, CacheStoreError),
    retry_backoff=True,
    retry_backoff_max=300,
    retry_jitter=True,
)
def fetch_next_page(self, payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Celery-задача догрузки следующей страницы комментариев.
    InvalidInputError / NotFoundError / QuotaExceededError - без повтора.
    """
    return asyncio.run(_async_fetch_next_page(payload))
