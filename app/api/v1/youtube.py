"""
YouTube API: video details and comment pages
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from app.config import settings
from app.exceptions import InvalidInputError
from app.schemas.youtube import CommentsPage, CommentsRequest, VideoDetails
from app.services.youtube_service import YouTubeService

router = APIRouter()


def get_youtube_service(request: Request) -> YouTubeService:
    """Сервис создаётся в lifespan и хранится в app.state."""
    return request.app.state.youtube_service


@router.get(
    "/video/{video_id}",
    response_model=VideoDetails,
    summary="Get video details",
)
async def get_video_details(
    video_id: str,
    service: YouTubeService = Depends(get_youtube_service),
):
    """Детали видео по YouTube video ID."""
    return await service.get_video_details(video_id)


@router.get(
    "/comments",
    response_model=CommentsPage,
    summary="Get video comments",
)
async def get_video_comments(
    video_id: Optional[str] = Query(None, alias="videoId", description="YouTube video ID"),
    max_results: Optional[int] = Query(
        None, alias="maxResults", description="Maximum number of results to return (1-100)"
    ),
    page_token: Optional[str] = Query(
        None, alias="pageToken", description="Token for the page of results, empty for initial page"
    ),
    service: YouTubeService = Depends(get_youtube_service),
):
    """
    Страница комментариев видео.
    Следующая страница (если есть) догружается в кэш в фоне.
    """
    if not video_id:
        raise InvalidInputError("videoId is required")
    if max_results is not None and not 1 <= max_results <= 100:
        raise InvalidInputError("Invalid maxResults value")

    request = CommentsRequest(
        video_id=video_id,
        max_results=max_results or settings.DEFAULT_MAX_RESULTS,
        page_token=page_token or None,
    )
    return await service.get_video_comments(request)
