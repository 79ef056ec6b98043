"""
YouTube Data API v3 client: authenticated URLs, /videos and /commentThreads lookups.
"""
import logging
from typing import Any, Dict, Optional, Union
from urllib.parse import urlencode

import httpx

from app.exceptions import NotFoundError, QuotaExceededError, UpstreamError
from app.monitoring.metrics import track_upstream_request

logger = logging.getLogger(__name__)

Params = Dict[str, Union[str, int]]


class YouTubeClient:
    """HTTP-клиент YouTube API с таймаутом и маппингом ошибок транспорта."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    def build_url(self, endpoint: str, params: Params) -> str:
        """URL вида <base><endpoint>?<params>&key=<api key>."""
        query = urlencode({**params, "key": self._api_key})
        return f"{self.base_url}{endpoint}?{query}"

    async def get_videos(self, video_id: str) -> Dict[str, Any]:
        """GET /videos: snippet + statistics для одного видео."""
        return await self._get("/videos", {"part": "snippet,statistics", "id": video_id})

    async def get_comment_threads(
        self,
        video_id: str,
        max_results: int,
        page_token: Optional[str] = None,
    ) -> Dict[str, Any]:
        """GET /commentThreads: одна страница комментариев верхнего уровня."""
        params: Params = {
            "part": "snippet",
            "videoId": video_id,
            "maxResults": max_results,
        }
        if page_token:
            params["pageToken"] = page_token
        return await self._get("/commentThreads", params)

    async def _get(self, endpoint: str, params: Params) -> Dict[str, Any]:
        url = self.build_url(endpoint, params)
        try:
            response = await self._client.get(url)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            track_upstream_request(endpoint, str(status_code))
            if status_code == 404:
                raise NotFoundError("Video not found") from e
            if status_code == 403:
                raise QuotaExceededError("API quota exceeded") from e
            raise UpstreamError(f"YouTube API returned {status_code}") from e
        except httpx.TimeoutException as e:
            track_upstream_request(endpoint, "timeout")
            raise UpstreamError(f"YouTube API timeout: {endpoint}") from e
        except httpx.HTTPError as e:
            track_upstream_request(endpoint, "transport_error")
            raise UpstreamError(f"YouTube API request failed: {e}") from e
        except ValueError as e:
            track_upstream_request(endpoint, "invalid_json")
            raise UpstreamError("YouTube API returned invalid JSON") from e

        if not isinstance(data, dict):
            track_upstream_request(endpoint, "invalid_json")
            raise UpstreamError("YouTube API returned unexpected payload")
        track_upstream_request(endpoint, "ok")
        return data

    async def close(self) -> None:
        await self._client.aclose()
