"""
Prometheus metrics
"""
import time

from fastapi import FastAPI
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi.responses import Response

# HTTP запросы
http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status_code']
)

# Время обработки запросов
http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint']
)

# Попадания/промахи кэша по типу ресурса
cache_lookups_total = Counter(
    'cache_lookups_total',
    'Cache lookups by resource and result',
    ['resource', 'result']  # result: 'hit' или 'miss'
)

# Запросы к YouTube API
upstream_requests_total = Counter(
    'upstream_requests_total',
    'YouTube API requests',
    ['endpoint', 'outcome']
)

# Отказы rate limiter
rate_limit_rejections_total = Counter(
    'rate_limit_rejections_total',
    'Requests rejected by the rate limiter',
    ['reason']  # 'limit' или 'store_unavailable'
)

# Задачи догрузки страниц
continuation_jobs_total = Counter(
    'continuation_jobs_total',
    'Next-page continuation jobs',
    ['outcome']  # 'scheduled', 'schedule_failed', 'completed', 'failed'
)


def setup_metrics(app: FastAPI):
    """Настройка метрик для FastAPI приложения"""

    @app.get("/metrics", include_in_schema=False)
    async def metrics():
        """Endpoint для Prometheus метрик"""
        return Response(
            content=generate_latest(),
            media_type=CONTENT_TYPE_LATEST
        )

    @app.middleware("http")
    async def metrics_middleware(request, call_next):
        """Middleware для сбора метрик HTTP запросов"""
        method = request.method
        path = request.url.path

        if path in ["/health", "/metrics", "/favicon.ico"]:
            return await call_next(request)

        start_time = time.time()
        response = await call_next(request)
        duration = time.time() - start_time

        http_requests_total.labels(
            method=method,
            endpoint=path,
            status_code=response.status_code
        ).inc()

        http_request_duration_seconds.labels(
            method=method,
            endpoint=path
        ).observe(duration)

        return response


def track_cache_lookup(resource: str, hit: bool):
    """Отслеживание обращения к кэшу"""
    cache_lookups_total.labels(resource=resource, result="hit" if hit else "miss").inc()


def track_upstream_request(endpoint: str, outcome: str):
    """Отслеживание запроса к YouTube API"""
    upstream_requests_total.labels(endpoint=endpoint, outcome=outcome).inc()


def track_rate_limit_rejection(reason: str):
    """Отслеживание отказа rate limiter"""
    rate_limit_rejections_total.labels(reason=reason).inc()


def track_continuation_job(outcome: str):
    """Отслеживание задачи догрузки страницы"""
    continuation_jobs_total.labels(outcome=outcome).inc()
