"""
Pydantic schemas for API and services
"""
from app.schemas.youtube import (
    Comment,
    CommentsPage,
    CommentsRequest,
    ContinuationJob,
    PageInfo,
    Thumbnail,
    VideoDetails,
)

__all__ = [
    "Comment",
    "CommentsPage",
    "CommentsRequest",
    "ContinuationJob",
    "PageInfo",
    "Thumbnail",
    "VideoDetails",
]
