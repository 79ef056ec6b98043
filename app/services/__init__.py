"""
Business logic services
"""
from app.services.youtube_service import YouTubeService, create_youtube_service

__all__ = ["YouTubeService", "create_youtube_service"]
