"""
Service exceptions: upstream errors, rate limiting, input validation, cache store.
"""


class VideoAPIError(Exception):
    """Базовое исключение сервиса. status_code и code используются в HTTP-ответе."""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str = "Internal error"):
        super().__init__(message)
        self.message = message


class NotFoundError(VideoAPIError):
    """Ресурс отсутствует в YouTube API (404 или пустой список items)."""

    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, message: str = "Video not found"):
        super().__init__(message)


class QuotaExceededError(VideoAPIError):
    """YouTube API отказал в доступе (403: квота или ключ)."""

    status_code = 403
    code = "QUOTA_EXCEEDED"

    def __init__(self, message: str = "API quota exceeded"):
        super().__init__(message)


class UpstreamError(VideoAPIError):
    """Любая другая ошибка upstream: статус, таймаут, сеть, невалидный JSON."""

    status_code = 500
    code = "UPSTREAM_ERROR"

    def __init__(self, message: str = "Error fetching data"):
        super().__init__(message)


class RateLimitExceededError(VideoAPIError):
    """Клиент превысил лимит запросов в текущем окне."""

    status_code = 429
    code = "RATE_LIMITED"

    def __init__(self, message: str = "Too Many Requests, Limit reached"):
        super().__init__(message)


class InvalidInputError(VideoAPIError):
    """Невалидные параметры запроса или задачи воркера."""

    status_code = 400
    code = "INVALID_INPUT"

    def __init__(self, message: str = "Invalid input"):
        super().__init__(message)


class CacheStoreError(Exception):
    """Ошибка транспорта Redis."""

    pass


class CacheStoreUnavailableError(CacheStoreError):
    """Redis недоступен после исчерпания попыток переподключения (нужен рестарт)."""

    pass
