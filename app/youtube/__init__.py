"""
YouTube Data API integration
"""
from app.youtube.client import YouTubeClient

__all__ = ["YouTubeClient"]
