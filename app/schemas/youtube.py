"""
YouTube Pydantic schemas for API request/response and queue payloads
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """База: snake_case в коде, camelCase в JSON (ответы, кэш, задачи)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Thumbnail(CamelModel):
    """Превью видео"""

    url: str
    width: Optional[int] = None
    height: Optional[int] = None


class VideoDetails(CamelModel):
    """Детали видео (snippet + statistics)"""

    title: str = ""
    description: str = ""
    view_count: int = 0
    like_count: int = 0
    comment_count: int = 0
    channel_title: str = ""
    thumbnails: Dict[str, Thumbnail] = Field(default_factory=dict)
    published_at: str = ""


class Comment(CamelModel):
    """Комментарий верхнего уровня"""

    id: str
    text: str = ""
    author: str = ""
    published_at: str = ""
    like_count: int = 0
    reply_count: int = 0
    author_profile_image_url: Optional[str] = None


class PageInfo(CamelModel):
    """Метаданные пагинации YouTube"""

    total_results: int = 0
    results_per_page: int = 0


class CommentsPage(CamelModel):
    """Страница комментариев с токеном следующей страницы"""

    comments: List[Comment]
    next_page_token: Optional[str] = None
    page_info: PageInfo = Field(default_factory=PageInfo)


class CommentsRequest(CamelModel):
    """Параметры запроса страницы комментариев"""

    video_id: str
    max_results: int = Field(default=20, ge=1, le=100)
    page_token: Optional[str] = None


class ContinuationJob(CamelModel):
    """Задача догрузки следующей страницы комментариев (payload fetchNextPage)"""

    video_id: str
    page_token: Optional[str] = None
    max_results: Optional[int] = None

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)
