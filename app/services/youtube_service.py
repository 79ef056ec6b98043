"""
Cache-aside read-through for YouTube video details and comment pages,
with background prefetch of the next comment page.
"""
import logging
from typing import Any, Dict, Optional

from app.cache.cache_service import CacheService, CommentsPageCache, VideoDetailsCache
from app.cache.redis_store import RedisStore
from app.config import Settings, get_settings
from app.exceptions import NotFoundError, UpstreamError, VideoAPIError
from app.monitoring.metrics import track_continuation_job
from app.queue.scheduler import PageScheduler
from app.schemas.youtube import (
    Comment,
    CommentsPage,
    CommentsRequest,
    ContinuationJob,
    PageInfo,
    Thumbnail,
    VideoDetails,
)
from app.youtube.client import YouTubeClient

logger = logging.getLogger(__name__)


def _as_int(value: Any) -> int:
    """Статистика YouTube приходит строками ("1024"); отсутствие -> 0."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _as_str(value: Any) -> str:
    return value if isinstance(value, str) else ""


class YouTubeService:
    """Сервис видео и комментариев: кэш -> YouTube API -> кэш (+ догрузка страниц)."""

    def __init__(
        self,
        client: YouTubeClient,
        details_cache: VideoDetailsCache,
        comments_cache: CommentsPageCache,
        scheduler: PageScheduler,
    ) -> None:
        self.client = client
        self.details_cache = details_cache
        self.comments_cache = comments_cache
        self.scheduler = scheduler

    async def get_video_details(self, video_id: str) -> VideoDetails:
        """Детали видео: из кэша video:<id> или из /videos с записью в кэш."""
        cached = await self.details_cache.get_details(video_id)
        if cached is not None:
            return cached

        try:
            data = await self.client.get_videos(video_id)
            items = data.get("items") or []
            if not isinstance(items, list):
                raise UpstreamError("Unexpected upstream response: items is not a list")
            if not items:
                raise NotFoundError("Video not found")
            details = self._parse(self.map_video_details, items[0])
        except VideoAPIError as e:
            self._log_error("video", video_id, e)
            raise

        await self.details_cache.set_details(video_id, details)
        return details

    async def get_video_comments(self, request: CommentsRequest) -> CommentsPage:
        """
        Страница комментариев: из кэша comments:<videoId>:<pageToken|initial>
        или из /commentThreads. При наличии nextPageToken ставит задачу
        догрузки следующей страницы.
        """
        cached = await self.comments_cache.get_page(request.video_id, request.page_token)
        if cached is not None:
            logger.info(
                "Returning cached data for %s",
                CommentsPageCache.key(request.video_id, request.page_token),
            )
            return cached

        try:
            data = await self.client.get_comment_threads(
                request.video_id, request.max_results, request.page_token
            )
            page = self._parse(self.map_comments_page, data)
        except VideoAPIError as e:
            self._log_error("comments", request.video_id, e)
            raise

        await self.comments_cache.set_page(request.video_id, request.page_token, page)

        if page.next_page_token:
            await self._schedule_next_page(
                ContinuationJob(
                    video_id=request.video_id,
                    page_token=page.next_page_token,
                    max_results=request.max_results,
                )
            )
        return page

    async def _schedule_next_page(self, job: ContinuationJob) -> None:
        # Ошибка постановки не должна ломать ответ клиенту
        try:
            await self.scheduler.schedule(job)
            track_continuation_job("scheduled")
        except Exception as e:
            track_continuation_job("schedule_failed")
            logger.warning(
                "Failed to schedule next page video=%s page_token=%s: %s",
                job.video_id, job.page_token, e,
                extra={"video_id": job.video_id, "page_token": job.page_token},
            )

    @staticmethod
    def map_video_details(item: Dict[str, Any]) -> VideoDetails:
        snippet = item.get("snippet") or {}
        statistics = item.get("statistics") or {}
        thumbnails = {
            name: Thumbnail.model_validate(thumb)
            for name, thumb in (snippet.get("thumbnails") or {}).items()
            if isinstance(thumb, dict) and thumb.get("url")
        }
        return VideoDetails(
            title=_as_str(snippet.get("title")),
            description=_as_str(snippet.get("description")),
            view_count=_as_int(statistics.get("viewCount")),
            like_count=_as_int(statistics.get("likeCount")),
            comment_count=_as_int(statistics.get("commentCount")),
            channel_title=_as_str(snippet.get("channelTitle")),
            thumbnails=thumbnails,
            published_at=_as_str(snippet.get("publishedAt")),
        )

    @staticmethod
    def map_comment(item: Dict[str, Any]) -> Comment:
        """Элемент commentThreads -> Comment. Отсутствующие поля получают значения по умолчанию."""
        thread = item.get("snippet") or {}
        top_level = (thread.get("topLevelComment") or {}).get("snippet") or {}
        return Comment(
            id=item["id"],
            text=_as_str(top_level.get("textDisplay")),
            author=_as_str(top_level.get("authorDisplayName")),
            published_at=_as_str(top_level.get("publishedAt")),
            like_count=_as_int(top_level.get("likeCount")),
            reply_count=_as_int(thread.get("totalReplyCount")),
            author_profile_image_url=top_level.get("authorProfileImageUrl") or None,
        )

    @classmethod
    def map_comments_page(cls, data: Dict[str, Any]) -> CommentsPage:
        page_info = data.get("pageInfo") or {}
        return CommentsPage(
            comments=[cls.map_comment(item) for item in data.get("items") or []],
            next_page_token=data.get("nextPageToken") or None,
            page_info=PageInfo(
                total_results=_as_int(page_info.get("totalResults")),
                results_per_page=_as_int(page_info.get("resultsPerPage")),
            ),
        )

    @staticmethod
    def _parse(mapper, payload):
        # Ответ без обязательных полей (id комментария и т.п.) - ошибка upstream
        try:
            return mapper(payload)
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise UpstreamError(f"Unexpected YouTube API payload: {e!r}") from e

    @staticmethod
    def _log_error(resource: str, video_id: str, error: VideoAPIError) -> None:
        logger.error(
            "Error fetching %s for video=%s: %s",
            resource, video_id, error.message,
            extra={"video_id": video_id},
        )

    async def close(self) -> None:
        """Закрыть HTTP-клиент (хранилище кэша закрывает владелец)."""
        await self.client.close()


def create_youtube_service(
    store: RedisStore,
    settings: Optional[Settings] = None,
    scheduler: Optional[PageScheduler] = None,
) -> YouTubeService:
    """Собрать сервис из настроек поверх общего RedisStore (API и воркер)."""
    settings = settings or get_settings()
    cache = CacheService(store)
    return YouTubeService(
        client=YouTubeClient(
            settings.YOUTUBE_BASE_URL,
            settings.YOUTUBE_API_KEY,
            timeout=settings.YOUTUBE_TIMEOUT,
        ),
        details_cache=VideoDetailsCache(cache, settings.VIDEO_DETAILS_CACHE_TTL),
        comments_cache=CommentsPageCache(cache, settings.VIDEO_COMMENTS_CACHE_TTL),
        scheduler=scheduler or PageScheduler(),
    )
